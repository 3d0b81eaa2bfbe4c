"""Pattern heuristics over the raw bytes of a PDF.

Everything here is an approximation computed from the document decoded 1:1
(latin-1), so match offsets equal byte offsets. None of these functions parse
document structure; page count and page sizes come from ``pdf_parser``.
"""

import math
import re
from collections import Counter

from deckgate.schemas.analysis import AspectSummary, PageSize

MAX_FONTS = 25

# Images smaller than this are icons or bullets; larger ones are degenerate values.
MIN_IMAGE_SIDE = 32
MAX_IMAGE_SIDE = 5000
# Calibration constant: share of bare image subtypes assumed to be content images.
IMAGE_FALLBACK_RATIO = 0.3

MAX_BULLETS_PER_PAGE = 15
MIN_BULLET_CLAMP = 50
# Calibration constant: an over-the-clamp bullet total is compressed to this share of the clamp.
BULLET_SOFT_CLAMP_RATIO = 0.8

ASPECT_TOLERANCE = 0.08
NAMED_RATIOS: tuple[tuple[str, float], ...] = (
    ("16:9", 16 / 9),
    ("4:3", 4 / 3),
    ("3:2", 3 / 2),
    ("1:1", 1.0),
)

_FONT_RES = (
    re.compile(r"/BaseFont\s*/([A-Za-z0-9\-\+_,\.]+)"),
    re.compile(r"/FontName\s*/([A-Za-z0-9\-\+_,\.]+)"),
)
_VIDEO_RE = re.compile(r"/RichMedia|/Movie", re.IGNORECASE)
_AUDIO_RE = re.compile(r"/Sound", re.IGNORECASE)

_IMAGE_DICT_RE = re.compile(r"/Subtype\s*/Image.*?/Width\s+(\d+).*?/Height\s+(\d+)")
_IMAGE_SUBTYPE_RE = re.compile(r"/Subtype\s*/Image\b")

_BEGIN_TEXT_RE = re.compile(r"[\s(]BT\s")

# Glyphs appear either as code points or as their UTF-8 bytes seen through latin-1.
_BULLET_RES = (
    re.compile("•|â\u0080¢"),
    re.compile("[‣◦⁃]|â\u0080£|â\u0097¦|â\u0081\u0083"),
    re.compile(r"^\s*[\-\*\+]\s", re.MULTILINE),
    re.compile(r"^\s*\d+[\.)\s]", re.MULTILINE),
    re.compile(r"^\s*[a-zA-Z][\.)\s]", re.MULTILINE),
)


def decode_bytes(data: bytes) -> str:
    return data.decode("latin-1")


def extract_font_names(text: str) -> list[str]:
    fonts: dict[str, None] = {}
    for pattern in _FONT_RES:
        for m in pattern.finditer(text):
            fonts.setdefault(m.group(1), None)
    return list(fonts)[:MAX_FONTS]


def detect_media(text: str) -> tuple[bool | None, bool | None]:
    """Return (has_video, has_audio); a missing marker leaves the flag undetermined."""
    has_video = True if _VIDEO_RE.search(text) else None
    has_audio = True if _AUDIO_RE.search(text) else None
    return has_video, has_audio


def count_images(text: str) -> int:
    seen: set[tuple[int, int, int]] = set()
    for m in _IMAGE_DICT_RE.finditer(text):
        width, height = int(m.group(1)), int(m.group(2))
        if MIN_IMAGE_SIDE <= width < MAX_IMAGE_SIDE and MIN_IMAGE_SIDE <= height < MAX_IMAGE_SIDE:
            seen.add((width, height, m.start()))
    if seen:
        return len(seen)
    subtypes = len(_IMAGE_SUBTYPE_RE.findall(text))
    return max(0, math.floor(subtypes * IMAGE_FALLBACK_RATIO))


def count_text_ops(text: str) -> int:
    return len(_BEGIN_TEXT_RE.findall(text))


def bullet_clamp(page_count: int) -> int:
    return max(MAX_BULLETS_PER_PAGE * page_count, MIN_BULLET_CLAMP)


def count_bullets(text: str, page_count: int) -> int:
    total = sum(len(pattern.findall(text)) for pattern in _BULLET_RES)
    clamp = bullet_clamp(page_count)
    if total > clamp:
        total = round(clamp * BULLET_SOFT_CLAMP_RATIO)
    return total


def round_half_up(value: float, digits: int) -> float:
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def _format_ratio(value: float) -> str:
    return f"{value:g}"


def snap_ratio(value: float) -> str:
    """Name a width/height ratio if a standard one is within tolerance, else print it raw."""
    best_name, best_delta = None, math.inf
    for name, target in NAMED_RATIOS:
        delta = abs(value - target)
        if delta < best_delta:
            best_name, best_delta = name, delta
    if best_name is not None and best_delta < ASPECT_TOLERANCE:
        return best_name
    return _format_ratio(value)


def page_ratio(width: float, height: float) -> float:
    if not height:
        return 0.0
    ratio = width / height
    return round(ratio, 3) if math.isfinite(ratio) else 0.0


def summarize_aspect(sizes: list[PageSize]) -> AspectSummary:
    if not sizes:
        return AspectSummary(common_ratio=None, ratios=[])

    ratios = [page_ratio(s.width, s.height) for s in sizes]
    counts = Counter(round_half_up(r, 2) for r in ratios)
    # Counter keeps first-seen order, and max() returns the first maximal entry.
    mode = max(counts.items(), key=lambda item: item[1])[0]

    common = snap_ratio(mode) if mode else None
    return AspectSummary(common_ratio=common, ratios=ratios)
