import math
import re

from deckgate.schemas.analysis import AspectSummary, DeckAnalysis
from deckgate.services.pdf_heuristics import page_ratio, round_half_up, snap_ratio

MAX_HTML_BULLETS = 500

_IMG_TAG_RE = re.compile(r"<img\b")
_BG_IMAGE_RE = re.compile(r"background-image\s*:")
_LI_TAG_RE = re.compile(r"<li\b")
_P_TAG_RE = re.compile(r"<p\b")
_HEADING_RE = re.compile(r"<h[1-6]\b")
_SLIDE_CLASS_RE = re.compile(r"class=[\"'][^\"']*(?:slide|page)[^\"']*[\"']")
_VIDEO_RE = re.compile(r"<video\b|youtube\.com|vimeo\.com")
_AUDIO_RE = re.compile(r"<audio\b")
_ASPECT_RE = re.compile(r"aspect-ratio\s*:\s*([0-9.]+)\s*/\s*([0-9.]+)")


def _css_aspect(lower: str) -> AspectSummary | None:
    m = _ASPECT_RE.search(lower)
    if not m:
        return None
    try:
        width, height = float(m.group(1)), float(m.group(2))
    except ValueError:
        return None
    if not (math.isfinite(width) and math.isfinite(height)) or width <= 0 or height <= 0:
        return None
    ratio = page_ratio(width, height)
    return AspectSummary(common_ratio=snap_ratio(round_half_up(ratio, 2)), ratios=[ratio])


def analyze_html(html: str, url: str | None = None) -> DeckAnalysis:
    """Approximate deck metadata from a rendered web page.

    ``url`` is accepted for symmetry with the resolver; the counts only look at
    the markup. Fields that markup cannot support stay unset.
    """
    lower = html.lower()

    images = len(_IMG_TAG_RE.findall(lower)) + len(_BG_IMAGE_RE.findall(lower))
    bullets = min(len(_LI_TAG_RE.findall(lower)), MAX_HTML_BULLETS)
    text_ops = len(_P_TAG_RE.findall(lower)) + len(_HEADING_RE.findall(lower))
    slide_markers = len(_SLIDE_CLASS_RE.findall(lower))

    return DeckAnalysis(
        page_count=slide_markers or None,
        images_approx=images,
        bullets_approx=bullets,
        text_ops_approx=text_ops,
        has_video=True if _VIDEO_RE.search(lower) else None,
        has_audio=True if _AUDIO_RE.search(lower) else None,
        aspect_summary=_css_aspect(lower),
        analysis_method="html",
    )
