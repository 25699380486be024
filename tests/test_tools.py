import csv
import math

import tools
from models import Lead
from tools import (
    ConstantDelay,
    count_words,
    filter_results,
    html_to_text,
    lead_stats,
    split_into_batches,
    write_leads_csv,
)
import pytest


def test_count_words():
    assert count_words("") == 0
    assert count_words(None) == 0
    assert count_words("   \n\t ") == 0
    assert count_words("  one two\tthree\nfour  ") == 4


@pytest.mark.parametrize("n, max_words", [(0, 10), (1, 10), (10, 10), (11, 10), (25, 10), (25000, 10000)])
def test_split_into_batches_round_trips(make_words, n, max_words):
    content = make_words(n)
    batches = split_into_batches(content, max_words)

    assert len(batches) == math.ceil(n / max_words)
    assert all(count_words(b) <= max_words for b in batches)
    assert " ".join(batches) == " ".join(content.split())


def test_split_normalizes_whitespace():
    assert split_into_batches("  a\n\nb   c\td ", 3) == ["a b c", "d"]


def test_split_rejects_non_positive_size():
    with pytest.raises(ValueError):
        split_into_batches("a b", 0)


def test_constant_delay_sleeps(monkeypatch):
    slept = []
    monkeypatch.setattr(tools.time, "sleep", slept.append)

    ConstantDelay(1.5).wait()
    ConstantDelay(0).wait()

    assert slept == [1.5]


def test_filter_results_drops_search_social_and_duplicates():
    results = [
        {"url": "https://acme.com/"},
        {"url": "https://acme.com"},
        {"url": "https://www.facebook.com/acme"},
        {"url": "https://maps.google.com/?q=acme"},
        {"url": "mailto:hi@acme.com"},
        {"url": "https://bob-plumbing.net/contact"},
    ]
    assert [r["url"] for r in filter_results(results)] == ["https://acme.com/", "https://bob-plumbing.net/contact"]


def test_html_to_text_keeps_lines_and_drops_scripts():
    html = "<html><head><style>p{}</style><script>var x=1;</script></head><body><h1>Acme Ltd</h1><p>Call 555-123-4567</p></body></html>"
    assert html_to_text(html) == "Acme Ltd\nCall 555-123-4567"


def _lead(**kw):
    return Lead(source_url=kw.pop("source_url", "https://acme.com"), keyword="kw", **kw)


def test_write_leads_csv_appends_and_dedupes(tmp_path):
    path = tmp_path / "out" / "leads.csv"

    msg = write_leads_csv([_lead(name="Jane", email="jane@acme.com"), _lead(name="Jane", email="jane@acme.com")], str(path))
    assert "Wrote 1 new rows" in msg

    msg = write_leads_csv([_lead(name="Jane", email="jane@acme.com"), _lead(phone="555-123-4567")], str(path))
    assert "Wrote 1 new rows" in msg and "skipped 1 duplicates" in msg

    with path.open(encoding="utf-8", newline="") as f:
        rows = list(csv.DictReader(f))
    assert [r["name"] for r in rows] == ["Jane", ""]
    assert rows[1]["phone"] == "555-123-4567"
    assert set(rows[0]) == set(tools.LEAD_HEADERS)


def test_write_leads_csv_rotates_on_old_header(tmp_path):
    path = tmp_path / "leads.csv"
    path.write_text("name,role,email,about,url\n", encoding="utf-8")

    msg = write_leads_csv([_lead(name="Jane")], str(path))

    assert "leads_v2.csv" in msg
    assert (tmp_path / "leads_v2.csv").exists()


def test_lead_stats():
    leads = [
        _lead(company="Acme", email="a@acme.com"),
        _lead(company="Acme", phone="555-123-4567"),
        _lead(company="Bolt", name="Only A Name"),
    ]
    assert lead_stats(leads) == {
        "total_leads": 3,
        "leads_with_email": 1,
        "leads_with_phone": 1,
        "valid_leads": 2,
        "unique_companies": 2,
    }
