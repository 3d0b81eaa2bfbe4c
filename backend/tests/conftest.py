import os

# Set default env vars for tests before any deckgate imports
os.environ.setdefault("LLM_PROVIDER", "mock")
os.environ.setdefault("DATABASE_DSN", "sqlite://")
os.environ.setdefault("LLM_API_KEY", "")

import pymupdf  # noqa: E402
import pytest  # noqa: E402

from deckgate.schemas.analysis import AspectSummary, DeckAnalysis, DeckFormat  # noqa: E402
from deckgate.schemas.deck import Deck, FileInfo  # noqa: E402


def build_pdf(page_sizes=((960, 540),), extra_objects=(), text=None, rotation=0) -> bytes:
    """Build a small PDF; ``extra_objects`` are raw dictionaries added as unreferenced objects."""
    doc = pymupdf.open()
    for width, height in page_sizes:
        page = doc.new_page(width=width, height=height)
        if rotation:
            page.set_rotation(rotation)
        if text:
            page.insert_text((40, 60), text, fontname="helv", fontsize=18)
    for source in extra_objects:
        xref = doc.get_new_xref()
        doc.update_object(xref, source)
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def pdf_factory():
    return build_pdf


@pytest.fixture
def sample_deck() -> Deck:
    return Deck(
        id="deck-1",
        name="talk.pdf",
        source_type="file",
        format=DeckFormat.pdf,
        file_info=FileInfo(file_name="talk.pdf", size_bytes=5 * 1024 * 1024, mime="application/pdf"),
        analysis=DeckAnalysis(
            page_count=10,
            aspect_summary=AspectSummary(common_ratio="16:9", ratios=[1.778] * 10),
            has_video=False,
            has_audio=False,
            images_approx=0,
            text_ops_approx=40,
            bullets_approx=12,
            analysis_method="pdf",
        ),
    )


@pytest.fixture
def url_deck() -> Deck:
    return Deck(
        id="deck-url",
        name="https://pitch.com/v/my-talk",
        source_type="url",
        format=DeckFormat.url,
        url="https://pitch.com/v/my-talk",
        analysis=DeckAnalysis(images_approx=3, bullets_approx=4, text_ops_approx=9, analysis_method="html"),
    )
