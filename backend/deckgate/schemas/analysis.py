import enum
from typing import Literal

from pydantic import Field

from deckgate.schemas.base import CamelModel


class DeckFormat(str, enum.Enum):
    pdf = "pdf"
    pptx = "pptx"
    keynote = "keynote"
    google_slides = "google-slides"
    canva = "canva"
    figma = "figma"
    url = "url"
    unknown = "unknown"


class PageSize(CamelModel):
    width: float
    height: float


class AspectSummary(CamelModel):
    common_ratio: str | None = None
    ratios: list[float] = Field(default_factory=list)


class DeckAnalysis(CamelModel):
    # URL-sourced analyses cannot fill every field; unset means "not determined".
    page_count: int | None = None
    page_sizes_pt: list[PageSize] | None = None
    aspect_summary: AspectSummary | None = None
    fonts_approx: list[str] | None = None
    has_video: bool | None = None
    has_audio: bool | None = None
    text_ops_approx: int | None = None
    images_approx: int | None = None
    bullets_approx: int | None = None
    analysis_method: Literal["pdf", "html"]
