# main.py
import os
import json
import logging
import argparse
from pathlib import Path
from typing import List, Optional, Tuple

from dotenv import load_dotenv

from llm import build_generator
from models import ExtractionConfig, Lead, WebsiteContent
from tools import fetch_websites, google_search_results, lead_stats, write_leads_csv
from url_filter import UrlFilter
from workflow import LeadExtractor

KEYWORDS_FILE = "keywords.json"
MIN_RESULTS, MAX_RESULTS = 1, 100


def config_from_env() -> ExtractionConfig:
    """Build the extraction config from the environment (after .env is loaded)."""
    values = {
        "api_key": os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY"),
        "model": os.getenv("GEMINI_MODEL"),
        "max_words_per_batch": os.getenv("MAX_WORDS_PER_BATCH"),
        "max_prompt_chars": os.getenv("MAX_PROMPT_CHARS"),
        "delay_seconds": os.getenv("LLM_DELAY_SECONDS"),
        "keywords": [k.strip() for k in os.getenv("KEYWORDS", "").split(",") if k.strip()],
    }
    return ExtractionConfig(**{k: v for k, v in values.items() if v})


def build_pipeline(config: ExtractionConfig) -> Tuple[LeadExtractor, UrlFilter]:
    """One Gemini client shared by the URL filter and the lead extractor."""
    generator = build_generator(config)
    return LeadExtractor(config, generator=generator), UrlFilter(generator)


def parse_keywords(
    value: Optional[str],
    keywords_file: str = KEYWORDS_FILE,
    config_keywords: Optional[List[str]] = None,
) -> List[str]:
    """
    Comma-separated keywords, "file" to read them from keywords.json,
    or "config" to use the KEYWORDS setting.
    """
    if not value:
        return []
    source = value.strip().lower()
    if source == "config":
        return [k.strip() for k in (config_keywords or []) if k.strip()]
    if source == "file":
        path = Path(keywords_file)
        if not path.exists():
            print(f"⚠️  {keywords_file} not found.")
            return []
        data = json.loads(path.read_text(encoding="utf-8"))
        keywords = data if isinstance(data, list) else data.get("keywords", [])
        return [str(k).strip() for k in keywords if str(k).strip()]
    return [k.strip() for k in value.split(",") if k.strip()]


def results_per_keyword(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"{value!r} is not a number")
    if not MIN_RESULTS <= n <= MAX_RESULTS:
        raise argparse.ArgumentTypeError(f"results per keyword must be between {MIN_RESULTS} and {MAX_RESULTS}")
    return n


def load_websites(path: str) -> List[WebsiteContent]:
    """Pre-fetched pages: a JSON list of {url, keyword, content, ...} objects."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return [WebsiteContent(**item) for item in data]


def _badge(ok: bool) -> str:
    return "✅ Available" if ok else "❌ Not Available"


def show_status(extractor: LeadExtractor, url_filter: UrlFilter):
    print("\n🔍 System Status Check:")
    print(f"   🧠 AI URL Filter: {_badge(url_filter.is_available())}")
    print(f"   🧠 AI Lead Extractor: {_badge(extractor.is_available())}")
    key_set = bool(os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY"))
    print(f"   🔑 GEMINI_API_KEY: {'✅ Set' if key_set else '❌ Not Set'}")
    if not key_set:
        print("   💡 Set GEMINI_API_KEY environment variable for AI functionality")


def run_keyword(extractor: LeadExtractor, url_filter: UrlFilter, keyword: str, max_results: int, browser: str) -> List[Lead]:
    results = google_search_results(keyword, max_results=max_results, browser=browser)
    if not results:
        print(f"⚠️  No search results for: {keyword!r}")
        return []
    filtered = url_filter.filter_urls(results, keyword)
    print(f"✅ Filtered to {len(filtered)} relevant websites")
    websites = fetch_websites(filtered, keyword, browser=browser)
    return extractor.extract_leads(websites, keyword)


def run_keywords(
    extractor: LeadExtractor,
    url_filter: UrlFilter,
    keywords: List[str],
    max_results: int,
    browser: str,
    output_csv: str,
) -> List[Lead]:
    """Process keywords in order, appending each keyword's leads to the CSV as soon as they are found."""
    leads: List[Lead] = []
    for i, keyword in enumerate(keywords, start=1):
        print(f"\n🔍 Processing keyword {i}/{len(keywords)}: {keyword!r}")
        try:
            keyword_leads = run_keyword(extractor, url_filter, keyword, max_results, browser)
        except Exception as e:
            print(f"❌ Error processing keyword {keyword!r}: {e}")
            continue
        print(f"✅ Keyword {keyword!r}: {len(keyword_leads)} leads found")
        if keyword_leads:
            print(write_leads_csv(keyword_leads, output_csv))
        leads.extend(keyword_leads)
    return leads


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Keyword search + AI lead extraction pipeline")
    parser.add_argument("keywords", nargs="?",
                        help='Comma-separated keywords, "file", "config", "status" or "help"')
    parser.add_argument("--max-results", type=results_per_keyword,
                        help=f"Search results to visit per keyword ({MIN_RESULTS}-{MAX_RESULTS})")
    parser.add_argument("--input-json", type=str, help="Extract from pre-fetched pages instead of searching")
    parser.add_argument("--output-csv", type=str, help="Output CSV path")
    parser.add_argument("--browser", type=str, choices=["chromium", "firefox", "webkit"])
    return parser


if __name__ == "__main__":
    load_dotenv()
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"), format="%(message)s")
    parser = build_parser()
    args = parser.parse_args()

    if (not args.keywords and not args.input_json) or args.keywords == "help":
        parser.print_help()
        raise SystemExit(0)

    config = config_from_env()
    extractor, url_filter = build_pipeline(config)
    if args.keywords == "status":
        show_status(extractor, url_filter)
        raise SystemExit(0)

    # prefer CLI > ENV > defaults
    max_results = args.max_results or results_per_keyword(os.getenv("MAX_RESULTS", "10"))
    output_csv = args.output_csv or os.path.join(os.getcwd(), "output", "leads.csv")
    browser = args.browser or os.getenv("BROWSER", "chromium")

    if not extractor.is_available():
        print("⚠️  Running in degraded mode: regex extraction only")

    try:
        if args.input_json:
            sites = load_websites(args.input_json)
            keyword = args.keywords or (sites[0].keyword if sites and sites[0].keyword else "unknown")
            leads = extractor.extract_leads(sites, keyword)
            if leads:
                print(write_leads_csv(leads, output_csv))
        else:
            keywords = parse_keywords(args.keywords, config_keywords=config.keywords)
            if not keywords:
                raise SystemExit("❌ No valid keywords found. Pass them as 'kw1,kw2' or use 'file' / 'config'.")
            leads = run_keywords(extractor, url_filter, keywords, max_results, browser, output_csv)
    except KeyboardInterrupt:
        print(f"\n🛑 Interrupted. Check {os.path.dirname(output_csv)} for any partial results.")
        raise SystemExit(130)

    print(f"📊 Stats: {lead_stats(leads)}")
    print(f"🎉 Done. Total leads: {len(leads)}")
