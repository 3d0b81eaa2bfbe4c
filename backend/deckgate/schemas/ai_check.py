from pydantic import Field

from deckgate.schemas.analysis import AspectSummary
from deckgate.schemas.base import CamelModel


class DeckSummary(CamelModel):
    """Metadata handed to the reasoning service. Never carries file content."""

    format: str = "unknown"
    platform: str | None = None
    page_count: int | None = None
    has_video: bool = False
    has_audio: bool = False
    aspect: AspectSummary | None = None
    images_approx: int | None = None
    text_ops_approx: int | None = None
    bullets_approx: int | None = None
    source_type: str | None = None


class AiCheckRequest(CamelModel):
    rule_id: str = ""
    rule_label: str = ""
    prompt: str = ""
    deck_summary: DeckSummary = Field(default_factory=DeckSummary)


class AiVerdict(CamelModel):
    passed: bool = Field(alias="pass")
    reasons: list[str] = Field(default_factory=list)
    fallback: bool | None = None
