# url_filter.py
import json
import logging
from typing import Dict, List, Optional

from llm import LeadGenerator
from parsing import extract_json_str
from prompts import UrlFilterPrompts
from tools import filter_results

logger = logging.getLogger(__name__)


class UrlFilter:
    """
    Narrows search results to the ones worth scraping for a keyword.

    The host/duplicate filter always runs first. When a generator is configured,
    the model then picks the relevant results; any failure keeps the pre-filtered list.
    """

    def __init__(self, generator: Optional[LeadGenerator] = None):
        self.generator = generator

    def is_available(self) -> bool:
        return self.generator is not None

    def _relevant_indices(self, raw: str, count: int) -> List[int]:
        data = json.loads(extract_json_str(raw))
        picked = data.get("relevant") if isinstance(data, dict) else None
        if not isinstance(picked, list):
            raise ValueError("response has no 'relevant' array")
        out: List[int] = []
        for i in picked:
            if isinstance(i, int) and not isinstance(i, bool) and 0 <= i < count and i not in out:
                out.append(i)
        return sorted(out)

    def filter_urls(self, results: List[Dict], keyword: str) -> List[Dict]:
        candidates = filter_results(results)
        if not candidates or self.generator is None:
            return candidates

        logger.info("🧠 Filtering %d websites with LLM for %r", len(candidates), keyword)
        try:
            raw = self.generator.generate(UrlFilterPrompts.relevance(keyword, candidates))
            indices = self._relevant_indices(raw, len(candidates))
        except Exception as e:
            logger.warning("⚠️  LLM URL filter failed, keeping %d pre-filtered results: %s", len(candidates), e)
            return candidates

        kept = [candidates[i] for i in indices]
        logger.info("✅ Filtered to %d relevant websites", len(kept))
        return kept
