from pydantic import Field

from deckgate.schemas.analysis import DeckFormat
from deckgate.schemas.base import CamelModel


class AiCheck(CamelModel):
    id: str = Field(min_length=1)
    label: str = Field(min_length=1)
    prompt: str


def _default_ai_checks() -> list[AiCheck]:
    return [
        AiCheck(
            id="ai-title",
            label="Has a proper title slide",
            prompt=(
                "Decide if the deck likely has a proper title slide (typically slide 1). "
                "Use ONLY metadata: {pageCount, aspectSummary.commonRatio, imagesApprox, textOpsApprox, "
                "bulletsApprox, hasVideo, hasAudio, sourceType, format}. "
                "When uncertain, prefer pass=true with a short caution. "
                'Return JSON {"pass": boolean, "reasons": string[]} with short reasons.'
            ),
        ),
        AiCheck(
            id="ai-not-all-bullets",
            label="Not dominated by complex bullet points",
            prompt=(
                "Decide if the deck is NOT dominated by complex bullet points. "
                "Use ONLY metadata: {pageCount, bulletsApprox, imagesApprox, textOpsApprox}. "
                "Lenient thresholds: imagesApprox >= 1 => pass=true; "
                "else if bulletsApprox/max(pageCount,1) > 5 => fail; otherwise pass. "
                'Return JSON {"pass": boolean, "reasons": string[]} with short reasons.'
            ),
        ),
        AiCheck(
            id="ai-has-images",
            label="Contains images/diagrams",
            prompt=(
                "Decide if the deck contains images/diagrams on at least some slides. "
                "Use ONLY metadata: {pageCount, imagesApprox, textOpsApprox}. "
                "Lenient thresholds: imagesApprox >= 1 => pass; if imagesApprox = 0 but pageCount <= 5 => pass; "
                "else fail. "
                'Return JSON {"pass": boolean, "reasons": string[]} with short reasons.'
            ),
        ),
    ]


class Config(CamelModel):
    accepted_formats: list[DeckFormat] = Field(
        default_factory=lambda: [DeckFormat.pdf, DeckFormat.pptx, DeckFormat.keynote]
    )

    url_auto_export_to_pdf: bool = False
    url_lenient_when_unknown: bool = False

    enforce_size: bool = True
    max_size_mb: float = Field(default=100, gt=0, alias="maxSizeMB")

    enforce_slide_count: bool = True
    min_slides: int = Field(default=1, ge=0)
    max_slides: int = Field(default=100, ge=0)

    enforce_aspect: bool = True
    require_16by9: bool = Field(default=True, alias="require16by9")

    enforce_video_constraint: bool = True
    allow_video: bool = False

    enforce_audio_constraint: bool = True
    allow_audio: bool = False

    expected_decks: int | None = 30

    ai_checks: list[AiCheck] = Field(default_factory=_default_ai_checks)


def default_config() -> Config:
    return Config()
