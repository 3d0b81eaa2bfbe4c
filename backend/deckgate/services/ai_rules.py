"""AI-assisted rules.

A rule is sent to the reasoning service as a natural-language prompt plus a
metadata-only summary of the deck. Obvious cases are decided locally, and every
infrastructure failure resolves to a pass with a caution reason.
"""

import logging
import re
from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from deckgate.core.errors import LLMError, LLMQuotaError, LLMUnavailableError
from deckgate.schemas.ai_check import AiVerdict, DeckSummary
from deckgate.schemas.config import AiCheck
from deckgate.schemas.deck import Deck
from deckgate.services.llm import parse_json_object

logger = logging.getLogger(__name__)

MAX_REASONS = 3
MAX_REASON_LEN = 120

PASS_MARK = "✅"
WARN_MARK = "⚠️"

_IMAGES_RULE_RE = re.compile(r"image|diagram|visual", re.IGNORECASE)
_BULLETS_RULE_RE = re.compile(r"bullet|list", re.IGNORECASE)
_LEADING_GLYPH_RE = re.compile("^[\U0001F300-\U0001F9FF☀-➿]")

UNSTRUCTURED_REASON = "Model returned unstructured output; defaulting to pass with caution."
DISABLED_REASON = f"{WARN_MARK} AI disabled: reasoning service not configured. Using deterministic analysis."
QUOTA_REASON = f"{WARN_MARK} AI credits exhausted. Check provider billing/limits or use a lower-cost model."
FAILED_REASON = f"{WARN_MARK} AI check failed, defaulting to pass. Please review manually."


class ModelVerdict(BaseModel):
    """Shape of the reasoning service reply. Unknown keys are ignored."""

    model_config = ConfigDict(populate_by_name=True)

    passed: bool = Field(default=False, alias="pass")
    reasons: list = Field(default_factory=list)


class ReasoningClient(Protocol):
    configured: bool

    async def complete(self, system: str, user: str) -> str: ...


def build_deck_summary(deck: Deck, platform: str | None = None) -> DeckSummary:
    analysis = deck.analysis
    return DeckSummary(
        format=deck.format.value,
        platform=platform,
        page_count=analysis.page_count if analysis else None,
        has_video=bool(analysis and analysis.has_video),
        has_audio=bool(analysis and analysis.has_audio),
        aspect=analysis.aspect_summary if analysis else None,
        images_approx=analysis.images_approx if analysis else None,
        text_ops_approx=analysis.text_ops_approx if analysis else None,
        bullets_approx=analysis.bullets_approx if analysis else None,
        source_type=deck.source_type,
    )


def short_circuit(check: AiCheck, summary: DeckSummary) -> AiVerdict | None:
    """Decide rules that the metadata already answers, without a remote call."""
    images = summary.images_approx or 0
    if (check.id == "ai-has-images" or _IMAGES_RULE_RE.search(check.label)) and images >= 1:
        return AiVerdict(passed=True, reasons=[f"{PASS_MARK} Found {images} images via analysis"])

    if (check.id == "ai-no-bullets" or _BULLETS_RULE_RE.search(check.label)) and summary.bullets_approx == 0:
        return AiVerdict(passed=True, reasons=[f"{PASS_MARK} No bullet points detected via analysis"])

    return None


def _unknown(value) -> str:
    return "unknown" if value is None else str(value)


def build_prompts(check: AiCheck, summary: DeckSummary) -> tuple[str, str]:
    system_parts = [
        "You are an expert slide deck validator for a professional conference.",
        "Evaluate using ONLY the provided metadata. You do NOT see actual slide content.",
        "Consider the platform/format when making judgments.",
        "When uncertain, prefer pass=true with constructive feedback.",
        'Respond with strict JSON: {"pass": boolean, "reasons": string[]}.',
        "Keep reasons concise, actionable, and positive (max 2-3 items).",
    ]
    if summary.platform:
        system_parts.append(f"Platform: {summary.platform}")

    aspect = summary.aspect.common_ratio if summary.aspect else None
    user = "\n".join(
        [
            f"Validation Rule: {check.label}",
            f"Instructions: {check.prompt}",
            "Deck Analysis:",
            f"- Format: {summary.format or 'unknown'}",
            f"- Platform: {summary.platform or 'unknown'}",
            f"- Source: {summary.source_type or 'unknown'}",
            f"- Slides: {_unknown(summary.page_count)}",
            f"- Images: {_unknown(summary.images_approx)}",
            f"- Text elements: {_unknown(summary.text_ops_approx)}",
            f"- Bullet points: {_unknown(summary.bullets_approx)}",
            f"- Video: {'yes' if summary.has_video else 'no'}",
            f"- Audio: {'yes' if summary.has_audio else 'no'}",
            f"- Aspect ratio: {aspect or 'unknown'}",
            "",
            'Respond with JSON only: {"pass": boolean, "reasons": string[]}',
        ]
    )
    return " ".join(system_parts), user


def normalize_reasons(raw, passed: bool) -> list[str]:
    items = raw if isinstance(raw, list) else []
    mark = PASS_MARK if passed else WARN_MARK
    reasons: list[str] = []
    for item in items:
        if not isinstance(item, str):
            continue
        cleaned = item.strip()
        if not cleaned:
            continue
        if len(cleaned) > MAX_REASON_LEN:
            cleaned = cleaned[: MAX_REASON_LEN - 3] + "..."
        if not _LEADING_GLYPH_RE.match(cleaned):
            cleaned = f"{mark} {cleaned}"
        reasons.append(cleaned)
        if len(reasons) == MAX_REASONS:
            break
    if not reasons:
        reasons = [f"{PASS_MARK} Validation passed" if passed else f"{WARN_MARK} Validation failed"]
    return reasons


def fail_open(reason: str) -> AiVerdict:
    return AiVerdict(passed=True, reasons=[reason], fallback=True)


class AiRuleEvaluator:
    def __init__(self, client: ReasoningClient):
        self.client = client

    async def evaluate(self, check: AiCheck, summary: DeckSummary) -> AiVerdict:
        shortcut = short_circuit(check, summary)
        if shortcut is not None:
            logger.debug("ai rule %s decided locally", check.id)
            return shortcut

        if not self.client.configured:
            return fail_open(DISABLED_REASON)

        system, user = build_prompts(check, summary)
        try:
            raw = await self.client.complete(system, user)
        except LLMUnavailableError as exc:
            logger.warning("ai rule %s: reasoning service unavailable: %s", check.id, exc)
            return fail_open(DISABLED_REASON)
        except LLMQuotaError as exc:
            logger.warning("ai rule %s: quota exhausted: %s", check.id, exc)
            return fail_open(QUOTA_REASON)
        except Exception as exc:  # noqa: BLE001
            logger.warning("ai rule %s failed, defaulting to pass: %s", check.id, exc)
            return fail_open(FAILED_REASON)

        try:
            reply = ModelVerdict.model_validate(parse_json_object(raw))
        except (LLMError, ValidationError) as exc:
            logger.warning("ai rule %s: %s", check.id, exc)
            return fail_open(UNSTRUCTURED_REASON)

        return AiVerdict(passed=reply.passed, reasons=normalize_reasons(reply.reasons, reply.passed))
