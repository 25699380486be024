# parsing.py
import json
import logging
import re
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from heuristics import extract_basic_leads
from models import LEAD_FIELDS, Lead, WebsiteContent, utc_now

logger = logging.getLogger(__name__)


class ParseOutcome(BaseModel):
    leads: List[Lead] = []
    context_summary: str = ""
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def extract_json_str(s: str) -> str:
    """
    Try to isolate a single JSON object from an LLM string, stripping code fences if present.
    """
    s = re.sub(r"```(?:json)?", "", s or "").strip()

    # Extract first {...} block if any wrapping text exists
    start = s.find("{")
    end = s.rfind("}")
    if start != -1 and end != -1 and end > start:
        return s[start:end + 1]
    return s


def _field(entry: Dict[str, Any], key: str) -> str:
    value = entry.get(key)
    if value is None:
        return ""
    return str(value).strip()


def read_response(raw: str, website: WebsiteContent) -> ParseOutcome:
    """Parse a raw model reply into leads. Failures come back as an outcome with `error` set."""
    try:
        data = json.loads(extract_json_str(raw))
    except ValueError as e:
        return ParseOutcome(error=f"invalid JSON: {e}")

    if not isinstance(data, dict) or not isinstance(data.get("leads"), list):
        return ParseOutcome(error="response has no 'leads' array")

    extracted_at = utc_now()
    keyword = website.keyword or "unknown"
    leads = [
        Lead(
            **{f: _field(entry, f) for f in LEAD_FIELDS},
            source_url=website.url,
            extracted_at=extracted_at,
            keyword=keyword,
        )
        for entry in data["leads"]
        if isinstance(entry, dict)
    ]

    summary = data.get("context_summary")
    return ParseOutcome(leads=leads, context_summary=str(summary).strip() if summary else "")


def recover(outcome: ParseOutcome, website: WebsiteContent) -> ParseOutcome:
    """Replace any failed outcome with the heuristic extraction of `website`."""
    if outcome.ok:
        return outcome
    logger.warning("⚠️  Falling back to basic extraction for %s: %s", website.url, outcome.error)
    return ParseOutcome(leads=extract_basic_leads([website]), context_summary="")


def parse_single(raw: str, website: WebsiteContent) -> List[Lead]:
    return recover(read_response(raw, website), website).leads


def parse_batch(raw: str, website: WebsiteContent) -> ParseOutcome:
    # A failed batch resets the context chain (summary comes back empty).
    return recover(read_response(raw, website), website)
