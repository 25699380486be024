# workflow.py
import logging
from typing import Iterable, Iterator, List, Optional

from langgraph.graph import StateGraph, END

from heuristics import extract_basic_leads
from llm import LeadGenerator, build_generator
from models import BatchState, ExtractionConfig, Lead, WebsiteContent
from parsing import ParseOutcome, parse_batch, recover, read_response
from prompts import LeadPrompts
from tools import ConstantDelay, count_words, split_into_batches

logger = logging.getLogger(__name__)


class HeuristicStrategy:
    """Degraded mode: no LLM configured, regex extraction only."""

    available = False

    def iter_leads(self, websites: Iterable[WebsiteContent], keyword: str) -> Iterator[List[Lead]]:
        logger.info("ℹ️  No Gemini API key available, using basic extraction")
        for site in websites:
            yield extract_basic_leads([site])


class LLMStrategy:
    available = True

    def __init__(self, generator: LeadGenerator, config: ExtractionConfig, pacing):
        self.generator = generator
        self.config = config
        self.pacing = pacing
        self.prompts = LeadPrompts()
        self.batch_graph = self.build_graph()

    # ---- Nodes ----
    def _node_next_batch(self, state: BatchState) -> dict:
        remaining = state["batches"]
        return {
            "current_batch": remaining[0],
            "batches": remaining[1:],
            "batch_index": state.get("batch_index", 0) + 1,
        }

    def _node_extract_batch(self, state: BatchState) -> dict:
        site = state["website"]
        index, total = state["batch_index"], state["batch_total"]
        is_last = not state["batches"]
        update = {}

        try:
            prompt = self.prompts.batched(
                state["keyword"],
                site.url,
                state["current_batch"],
                context_summary=state["context_summary"],
                is_last=is_last,
                index=index,
                total=total,
            )
            raw = self.generator.generate(prompt)
            result = parse_batch(raw, site)
            update = {
                "leads": state["leads"] + result.leads,
                "context_summary": result.context_summary,
            }
            logger.info("🧩 Batch %d/%d of %s: %d leads", index, total, site.url, len(result.leads))
        except Exception as e:
            # Skip the batch; context stays at its last good value.
            logger.warning("⚠️  Batch %d/%d of %s failed: %s", index, total, site.url, e)

        if not is_last:
            self.pacing.wait()
        return update

    @staticmethod
    def _router_continue_or_end(state: BatchState):
        return "continue" if state["batches"] else "end"

    # ---- Graph builder ----
    def build_graph(self):
        g = StateGraph(BatchState)

        g.add_node("next_batch", self._node_next_batch)
        g.add_node("extract_batch", self._node_extract_batch)

        g.set_entry_point("next_batch")
        g.add_edge("next_batch", "extract_batch")
        g.add_conditional_edges(
            "extract_batch",
            self._router_continue_or_end,
            {"continue": "next_batch", "end": END},
        )

        return g.compile()

    # ---- Paths ----
    def process_single_batch(self, site: WebsiteContent, keyword: str) -> List[Lead]:
        prompt = self.prompts.single_batch(keyword, site.url, site.content, self.config.max_prompt_chars)
        try:
            outcome = read_response(self.generator.generate(prompt), site)
        except Exception as e:
            logger.error("❌ Gemini extraction error for %s: %s", site.url, e)
            outcome = ParseOutcome(error=f"LLM call failed: {e}")
        finally:
            self.pacing.wait()
        return recover(outcome, site).leads

    def process_large_content(self, site: WebsiteContent, keyword: str) -> List[Lead]:
        batches = split_into_batches(site.content, self.config.max_words_per_batch)
        logger.info("✂️  Splitting %s into %d batches", site.url, len(batches))
        initial_state = BatchState(
            website=site,
            keyword=keyword,
            batches=list(batches),
            batch_index=0,
            batch_total=len(batches),
            context_summary="",
            leads=[],
        )
        final_state = self.batch_graph.invoke(
            initial_state, config={"recursion_limit": 2 * len(batches) + 10}
        )
        return list(final_state["leads"])

    def extract_from_website(self, site: WebsiteContent, keyword: str) -> List[Lead]:
        if count_words(site.content) <= self.config.max_words_per_batch:
            return self.process_single_batch(site, keyword)
        return self.process_large_content(site, keyword)

    def iter_leads(self, websites: Iterable[WebsiteContent], keyword: str) -> Iterator[List[Lead]]:
        for site in websites:
            try:
                leads = self.extract_from_website(site, keyword)
            except Exception as e:
                logger.error("❌ Failed to extract leads from %s: %s", site.url, e)
                leads = []
            yield leads


class LeadExtractor:
    """
    Entry point of the extraction pipeline.

    The strategy (Gemini or regex-only) is chosen once here; nothing downstream
    checks whether an API key was configured.
    """

    def __init__(
        self,
        config: Optional[ExtractionConfig] = None,
        generator: Optional[LeadGenerator] = None,
        pacing=None,
    ):
        self.config = config or ExtractionConfig()
        generator = generator if generator is not None else build_generator(self.config)
        if generator is None:
            self.strategy = HeuristicStrategy()
        else:
            self.strategy = LLMStrategy(
                generator,
                self.config,
                pacing if pacing is not None else ConstantDelay(self.config.delay_seconds),
            )

    def is_available(self) -> bool:
        return self.strategy.available

    def iter_leads(self, websites: Iterable[WebsiteContent], keyword: str) -> Iterator[List[Lead]]:
        """Yield each website's leads in input order; stop iterating to abandon the run."""
        return self.strategy.iter_leads(websites, keyword)

    def extract_leads(self, websites: Iterable[WebsiteContent], keyword: str) -> List[Lead]:
        websites = list(websites)
        if self.is_available():
            logger.info("🧠 Extracting leads from %d websites for keyword: %r", len(websites), keyword)

        results: List[Lead] = []
        for leads in self.iter_leads(websites, keyword):
            results.extend(leads)

        logger.info("✅ Lead extraction completed: %d leads found", len(results))
        return results
