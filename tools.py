# tools.py
import csv
import logging
import time
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set, Tuple
from urllib.parse import parse_qs, quote_plus, urlparse

from bs4 import BeautifulSoup
from playwright.sync_api import sync_playwright

import sys
import asyncio

from models import Lead, WebsiteContent

if sys.platform.startswith("win"):
    asyncio.set_event_loop_policy(asyncio.WindowsProactorEventLoopPolicy())

logger = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


# ---------- batching ----------
def count_words(text: Optional[str]) -> int:
    if not text:
        return 0
    return len(text.split())


def split_into_batches(content: Optional[str], max_words: int) -> List[str]:
    """
    Group the whitespace-separated words of `content` into consecutive batches
    of at most `max_words` words, each re-joined with single spaces.
    """
    if max_words < 1:
        raise ValueError("max_words must be >= 1")
    words = (content or "").split()
    return [" ".join(words[i:i + max_words]) for i in range(0, len(words), max_words)]


# ---------- pacing ----------
class ConstantDelay:
    """Fixed pause between LLM calls. Anything with a `wait()` method can stand in for it."""

    def __init__(self, seconds: float = 1.0):
        self.seconds = seconds

    def wait(self) -> None:
        if self.seconds > 0:
            time.sleep(self.seconds)


# ---------- search ----------
def _clean_result_url(href: str) -> str:
    """Resolve Google /url? redirects and drop fragments."""
    if not href:
        return ""
    if href.startswith("/url?"):
        query_params = parse_qs(urlparse(f"https://google.com{href}").query)
        href = (query_params.get("q") or query_params.get("url") or [""])[0]
    return href.split("#")[0]


def google_search_results(keyword: str, max_results: int = 10, browser: str = "chromium") -> List[Dict]:
    """
    Use Playwright to fetch Google SERPs for `keyword`.
    Returns: [{"url": ..., "title": ..., "snippet": ...}, ...]
    """
    results: List[Dict] = []
    seen: Set[str] = set()
    per_page = 10
    pages = max(1, -(-max_results // per_page))

    with sync_playwright() as p:
        b = getattr(p, browser).launch(headless=True, args=["--disable-blink-features=AutomationControlled"])
        ctx = b.new_context(user_agent=USER_AGENT, viewport={"width": 1920, "height": 1080})
        page = ctx.new_page()

        for page_index in range(pages):
            search_url = f"https://www.google.com/search?q={quote_plus(keyword)}&start={page_index * per_page}"
            logger.info("🔍 Fetching page %d/%d: %s", page_index + 1, pages, search_url)
            try:
                page.goto(search_url, timeout=30000, wait_until="domcontentloaded")
                page.wait_for_timeout(2000)
            except Exception as e:
                logger.warning("⚠️  Navigation error on page %d: %s", page_index + 1, e)
                continue

            soup = BeautifulSoup(page.content(), "html.parser")
            for block in soup.select("div.g"):
                anchor = block.find("a", href=True)
                heading = block.find("h3")
                if not anchor or not heading:
                    continue
                url = _clean_result_url(anchor["href"])
                if not url or url in seen:
                    continue
                seen.add(url)
                snippet_el = block.find("div", attrs={"data-sncf": True}) or block.find("span")
                results.append({
                    "url": url,
                    "title": heading.get_text(strip=True),
                    "snippet": snippet_el.get_text(" ", strip=True) if snippet_el else "",
                })
                if len(results) >= max_results:
                    break
            if len(results) >= max_results:
                break
            time.sleep(2.0)  # polite delay between SERP pages

        ctx.close()
        b.close()

    logger.info("🎉 Collected %d search results for %r", len(results), keyword)
    return results


_SKIP_HOSTS = (
    "google.", "youtube.com", "facebook.com", "instagram.com", "twitter.com",
    "x.com", "linkedin.com", "wikipedia.org", "tiktok.com", "pinterest.",
)


def filter_results(results: Iterable[Dict]) -> List[Dict]:
    """Keep http(s) results outside search/social hosts, first occurrence only."""
    out: List[Dict] = []
    seen: Set[str] = set()
    for r in results:
        url = (r.get("url") or "").strip()
        parsed = urlparse(url)
        host = parsed.netloc.lower()
        if parsed.scheme not in ("http", "https") or not host:
            continue
        if any(s in host for s in _SKIP_HOSTS):
            continue
        key = host + parsed.path.rstrip("/")
        if key in seen:
            continue
        seen.add(key)
        out.append(r)
    return out


# ---------- page content ----------
def html_to_text(html: str) -> str:
    """Visible text of a page, one block per line."""
    soup = BeautifulSoup(html or "", "html.parser")
    for tag in soup(["script", "style", "noscript", "svg"]):
        tag.decompose()
    lines = (line.strip() for line in soup.get_text("\n").splitlines())
    return "\n".join(line for line in lines if line)


def fetch_website_content(result: Dict, keyword: str, browser: str = "chromium") -> WebsiteContent:
    """Load one search result with Playwright. A failed load yields empty content."""
    url = result["url"]
    html = ""
    try:
        with sync_playwright() as p:
            b = getattr(p, browser).launch(headless=True)
            ctx = b.new_context(user_agent=USER_AGENT)
            page = ctx.new_page()
            page.goto(url, timeout=45000, wait_until="domcontentloaded")
            page.wait_for_timeout(2000)
            html = page.content()
            ctx.close()
            b.close()
    except Exception as e:
        logger.warning("⚠️  Could not load %s: %s", url, e)

    return WebsiteContent(
        url=url,
        keyword=keyword,
        content=html_to_text(html),
        title=result.get("title", ""),
        snippet=result.get("snippet", ""),
    )


def fetch_websites(results: List[Dict], keyword: str, browser: str = "chromium") -> List[WebsiteContent]:
    out: List[WebsiteContent] = []
    for r in results:
        out.append(fetch_website_content(r, keyword, browser=browser))
        time.sleep(1.0)  # polite delay
    return out


# ---------- CSV append + dedupe ----------
LEAD_HEADERS = ["name", "title", "company", "email", "phone", "source_url", "extracted_at", "keyword"]


def _lead_key(row: Dict[str, str]) -> Tuple[str, str, str, str]:
    return (row.get("source_url", ""), row.get("name", ""), row.get("email", ""), row.get("phone", ""))


def write_leads_csv(leads: Iterable[Lead], path: str) -> str:
    """
    Append leads to CSV, skipping rows already present
    (same source_url, name, email and phone).
    """
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)

    # If an old file has a different header (older schema), write to a new file suffix
    if p.exists():
        with p.open("r", encoding="utf-8", newline="") as f:
            existing_headers = csv.DictReader(f).fieldnames
        if existing_headers and existing_headers != LEAD_HEADERS:
            p = p.with_name(p.stem + "_v2" + p.suffix)

    # Recompute seen from the (possibly rotated) file
    seen: Set[Tuple[str, str, str, str]] = set()
    if p.exists():
        with p.open("r", encoding="utf-8", newline="") as f:
            for r in csv.DictReader(f):
                seen.add(_lead_key(r))

    rows = [lead.to_row() for lead in leads]
    new_rows = []
    for row in rows:
        key = _lead_key(row)
        if key in seen:
            continue
        seen.add(key)
        new_rows.append(row)

    write_header = not p.exists() or p.stat().st_size == 0
    with p.open("a", encoding="utf-8", newline="") as f:
        w = csv.DictWriter(f, fieldnames=LEAD_HEADERS)
        if write_header:
            w.writeheader()
        w.writerows(new_rows)

    return f"Wrote {len(new_rows)} new rows to {p} (skipped {len(rows) - len(new_rows)} duplicates)."


def lead_stats(leads: List[Lead]) -> Dict[str, int]:
    return {
        "total_leads": len(leads),
        "leads_with_email": sum(1 for l in leads if l.email),
        "leads_with_phone": sum(1 for l in leads if l.phone),
        "valid_leads": sum(1 for l in leads if l.is_valid),
        "unique_companies": len({l.company for l in leads if l.company}),
    }
