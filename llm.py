# llm.py
from typing import Optional, Protocol

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from models import ExtractionConfig
from prompts import LeadPrompts


class LeadGenerator(Protocol):
    def generate(self, prompt: str) -> str:
        ...


def _content_text(content) -> str:
    # Newer Gemini responses may carry a list of parts instead of a plain string.
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("text"):
                parts.append(str(part["text"]))
        return "".join(parts)
    return "" if content is None else str(content)


class GeminiGenerator:
    """Prompt -> text through Gemini. Errors from the API propagate to the caller."""

    def __init__(self, model: str, api_key: str, temperature: float = 0.0):
        self.llm = ChatGoogleGenerativeAI(model=model, google_api_key=api_key, temperature=temperature)

    def generate(self, prompt: str) -> str:
        system = SystemMessage(content=LeadPrompts.EXTRACT_SYSTEM)
        human = HumanMessage(content=prompt)
        llm_resp = self.llm.invoke([system, human])
        return _content_text(getattr(llm_resp, "content", "") if llm_resp else "")


def build_generator(config: ExtractionConfig) -> Optional[GeminiGenerator]:
    if not (config.api_key or "").strip():
        return None
    return GeminiGenerator(config.model, config.api_key.strip(), config.temperature)
