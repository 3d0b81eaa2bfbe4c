import logging
from dataclasses import dataclass

import pymupdf

from deckgate.core.errors import DeckParseError
from deckgate.schemas.analysis import DeckAnalysis, PageSize
from deckgate.services import pdf_heuristics as h

logger = logging.getLogger(__name__)


@dataclass
class ParsedPage:
    page: int
    width: float
    height: float


def parse_page_tree(data: bytes) -> list[ParsedPage]:
    """Walk the page tree and return the page boxes in points.

    This is the only step that needs real document structure; the counts in
    ``pdf_heuristics`` are read off the raw bytes.
    """
    if not data:
        raise DeckParseError("empty document")
    try:
        doc = pymupdf.open(stream=data, filetype="pdf")
    except Exception as exc:  # noqa: BLE001
        raise DeckParseError("invalid pdf") from exc

    try:
        if doc.page_count == 0:
            raise DeckParseError("empty pdf")
        pages: list[ParsedPage] = []
        for idx in range(doc.page_count):
            # MediaBox ignores /Rotate; sizes are reported as authored
            rect = doc[idx].mediabox
            pages.append(ParsedPage(page=idx + 1, width=float(rect.width), height=float(rect.height)))
    finally:
        doc.close()
    return pages


def analyze_pdf_bytes(data: bytes) -> DeckAnalysis:
    pages = parse_page_tree(data)
    page_count = len(pages)
    sizes = [PageSize(width=p.width, height=p.height) for p in pages]

    text = h.decode_bytes(data)
    has_video, has_audio = h.detect_media(text)

    analysis = DeckAnalysis(
        page_count=page_count,
        page_sizes_pt=sizes,
        aspect_summary=h.summarize_aspect(sizes),
        fonts_approx=h.extract_font_names(text),
        has_video=has_video,
        has_audio=has_audio,
        text_ops_approx=h.count_text_ops(text),
        images_approx=h.count_images(text),
        bullets_approx=h.count_bullets(text, page_count),
        analysis_method="pdf",
    )
    logger.debug(
        "pdf analyzed: pages=%d ratio=%s images=%s bullets=%s",
        page_count,
        analysis.aspect_summary.common_ratio,
        analysis.images_approx,
        analysis.bullets_approx,
    )
    return analysis
