# heuristics.py
import re
from typing import Iterable, List

from models import Lead, WebsiteContent

_EMAIL_RE = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
_PHONE_RE = re.compile(r"\+?1?[-.\s]?\(?[0-9]{3}\)?[-.\s]?[0-9]{3}[-.\s]?[0-9]{4}")
_PHONE_RUN_RE = re.compile(r"\d{3}[-.\s]?\d{3}[-.\s]?\d{4}")

_PLACEHOLDER_MARKERS = ("example.", "test@", "noreply")


def find_emails(text: str) -> List[str]:
    return [e for e in _EMAIL_RE.findall(text or "") if not any(m in e for m in _PLACEHOLDER_MARKERS)]


def find_phones(text: str) -> List[str]:
    out = []
    for cand in _PHONE_RE.findall(text or ""):
        digits = re.sub(r"\D", "", cand)
        if 10 <= len(digits) <= 15:
            out.append(cand.strip())
    return out


def guess_company(content: str) -> str:
    """First short, contact-free line near the top of the page, or ''."""
    for line in (content or "").split("\n")[:10]:
        trimmed = line.strip()
        if 5 < len(trimmed) < 100 and "@" not in trimmed and not _PHONE_RUN_RE.search(trimmed):
            return trimmed
    return ""


def extract_basic_leads(websites: Iterable[WebsiteContent]) -> List[Lead]:
    """
    Regex-only extraction: at most one lead per website, emitted only when a
    usable email or phone is found. Name and title are always left empty.
    """
    leads: List[Lead] = []
    for site in websites:
        content = site.content or ""
        emails = find_emails(content)
        phones = find_phones(content)
        if not emails and not phones:
            continue
        leads.append(
            Lead(
                company=guess_company(content),
                email=emails[0] if emails else "",
                phone=phones[0] if phones else "",
                source_url=site.url,
                keyword=site.keyword or "unknown",
            )
        )
    return leads
