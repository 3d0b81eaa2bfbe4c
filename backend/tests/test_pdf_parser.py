import pytest

from deckgate.core.errors import DeckParseError
from deckgate.services.pdf_heuristics import bullet_clamp
from deckgate.services.pdf_parser import analyze_pdf_bytes, parse_page_tree


def test_page_tree_sizes(pdf_factory):
    pages = parse_page_tree(pdf_factory(page_sizes=[(960, 540), (720, 540)]))
    assert [(p.page, p.width, p.height) for p in pages] == [(1, 960.0, 540.0), (2, 720.0, 540.0)]


def test_rotated_pages_keep_media_box_size(pdf_factory):
    data = pdf_factory(page_sizes=[(960, 540)] * 2, rotation=90)
    pages = parse_page_tree(data)
    assert [(p.width, p.height) for p in pages] == [(960.0, 540.0), (960.0, 540.0)]
    assert analyze_pdf_bytes(data).aspect_summary.common_ratio == "16:9"


def test_analysis_of_widescreen_deck(pdf_factory):
    analysis = analyze_pdf_bytes(pdf_factory(page_sizes=[(960, 540)] * 3, text="Welcome"))

    assert analysis.analysis_method == "pdf"
    assert analysis.page_count == 3
    assert [(s.width, s.height) for s in analysis.page_sizes_pt] == [(960.0, 540.0)] * 3
    assert analysis.aspect_summary.common_ratio == "16:9"
    assert any("Helvetica" in f for f in analysis.fonts_approx)
    assert analysis.has_video is None
    assert analysis.has_audio is None
    assert analysis.bullets_approx <= bullet_clamp(analysis.page_count)


def test_analysis_is_deterministic(pdf_factory):
    data = pdf_factory(page_sizes=[(960, 540), (1024, 768)], text="1. Intro")
    first = analyze_pdf_bytes(data)
    second = analyze_pdf_bytes(data)
    assert first.model_dump() == second.model_dump()


def test_media_markers(pdf_factory):
    data = pdf_factory(
        extra_objects=[
            "<< /Type /Annot /Subtype /Movie >>",
            "<< /Type /Annot /Subtype /Sound >>",
        ]
    )
    analysis = analyze_pdf_bytes(data)
    assert analysis.has_video is True
    assert analysis.has_audio is True


def test_four_by_three_deck(pdf_factory):
    analysis = analyze_pdf_bytes(pdf_factory(page_sizes=[(1024, 768)] * 2))
    assert analysis.aspect_summary.common_ratio == "4:3"


@pytest.mark.parametrize("data", [b"", b"definitely not a pdf", b"\x00\x01\x02" * 50])
def test_unparseable_bytes_raise(data):
    with pytest.raises(DeckParseError) as info:
        analyze_pdf_bytes(data)
    assert info.value.code == "PARSE_FAILED"
