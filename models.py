# models.py
from datetime import datetime, timezone
from typing import List, Dict, Optional, TypedDict
from pydantic import BaseModel, ConfigDict, Field

LEAD_FIELDS = ("name", "title", "company", "email", "phone")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ExtractionConfig(BaseModel):
    # LLM
    api_key: Optional[str] = None
    model: str = "gemini-2.5-flash"
    temperature: float = 0.0
    # batching / truncation
    max_words_per_batch: int = Field(10000, ge=1)   # single call up to this many words
    max_prompt_chars: int = Field(50000, ge=1)      # hard cap for single-batch prompts
    # pacing between LLM calls
    delay_seconds: float = Field(1.0, ge=0)
    # keywords used by the "config" keyword source
    keywords: List[str] = []


class WebsiteContent(BaseModel):
    """One fetched page, as handed over by the content fetcher."""
    model_config = ConfigDict(frozen=True)

    url: str
    keyword: Optional[str] = None
    content: str = ""
    title: str = ""
    snippet: str = ""


class Lead(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = ""
    title: str = ""
    company: str = ""
    email: str = ""
    phone: str = ""
    source_url: str
    extracted_at: datetime = Field(default_factory=utc_now)
    keyword: str = "unknown"

    @property
    def is_valid(self) -> bool:
        return bool(self.email or self.phone)

    def to_row(self) -> Dict[str, str]:
        return {
            "name": self.name,
            "title": self.title,
            "company": self.company,
            "email": self.email,
            "phone": self.phone,
            "source_url": self.source_url,
            "extracted_at": self.extracted_at.isoformat(),
            "keyword": self.keyword,
        }


class BatchState(TypedDict, total=False):
    website: WebsiteContent
    keyword: str               # search keyword the run was started with
    batches: List[str]         # batches still waiting to be dispatched
    current_batch: str         # batch currently being extracted
    batch_index: int           # 1-based index of current_batch
    batch_total: int
    context_summary: str       # carried from the previous batch of the same website
    leads: List[Lead]          # leads accumulated for this website
