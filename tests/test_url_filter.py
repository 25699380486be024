import json

from prompts import UrlFilterPrompts
from url_filter import UrlFilter

RESULTS = [
    {"url": "https://miamiplumbing.com", "title": "Miami Plumbing Co", "snippet": "24/7 plumbers in Miami"},
    {"url": "https://www.yelp.com/search?plumbers", "title": "Top 10 plumbers", "snippet": "Directory"},
    {"url": "https://www.facebook.com/miamiplumbing", "title": "Facebook", "snippet": ""},
    {"url": "https://cityplumbers.net/contact", "title": "City Plumbers", "snippet": "Contact us"},
]


def test_without_generator_only_prefilters():
    url_filter = UrlFilter()

    kept = url_filter.filter_urls(RESULTS, "plumber miami")

    assert url_filter.is_available() is False
    assert [r["url"] for r in kept] == [
        "https://miamiplumbing.com",
        "https://www.yelp.com/search?plumbers",
        "https://cityplumbers.net/contact",
    ]


def test_generator_picks_relevant_results(make_generator):
    generator = make_generator('```json\n{"relevant": [2, 0, 0, 9, "1"]}\n```')
    url_filter = UrlFilter(generator)

    kept = url_filter.filter_urls(RESULTS, "plumber miami")

    assert url_filter.is_available() is True
    assert [r["url"] for r in kept] == ["https://miamiplumbing.com", "https://cityplumbers.net/contact"]
    [prompt] = generator.prompts
    assert 'KEYWORD: "plumber miami"' in prompt
    # social hosts never reach the model
    assert "facebook.com" not in prompt
    assert "2. URL: https://cityplumbers.net/contact" in prompt


def test_empty_selection_drops_everything(make_generator):
    url_filter = UrlFilter(make_generator(json.dumps({"relevant": []})))
    assert url_filter.filter_urls(RESULTS, "plumber miami") == []


def test_generator_failure_keeps_prefiltered_results(make_generator):
    for reply in (RuntimeError("quota exceeded"), "no json here", '{"picked": [0]}'):
        url_filter = UrlFilter(make_generator(reply))
        kept = url_filter.filter_urls(RESULTS, "plumber miami")
        assert len(kept) == 3


def test_nothing_to_filter_skips_the_model(make_generator):
    generator = make_generator('{"relevant": [0]}')
    assert UrlFilter(generator).filter_urls([{"url": "https://twitter.com/x"}], "kw") == []
    assert generator.prompts == []


def test_relevance_prompt_lists_results():
    prompt = UrlFilterPrompts.relevance("dentist", [{"url": "https://a.com", "title": "A", "snippet": "teeth"}])
    assert "0. URL: https://a.com\n   TITLE: A\n   SNIPPET: teeth" in prompt
    assert '"relevant"' in prompt
