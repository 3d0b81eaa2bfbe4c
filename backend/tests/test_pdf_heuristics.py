from deckgate.schemas.analysis import PageSize
from deckgate.services import pdf_heuristics as h


def test_font_names_are_unique_and_capped():
    text = "/BaseFont /Helvetica /BaseFont /Helvetica /FontName /ABCDEF+Inter-Bold"
    assert h.extract_font_names(text) == ["Helvetica", "ABCDEF+Inter-Bold"]

    many = " ".join(f"/BaseFont /Font{i}" for i in range(40))
    assert len(h.extract_font_names(many)) == 25


def test_media_flags_absent_unless_marker_present():
    assert h.detect_media("<< /Type /Page >>") == (None, None)
    assert h.detect_media("<< /Subtype /RichMedia >>") == (True, None)
    assert h.detect_media("<< /S /Movie >> << /Subtype /Sound >>") == (True, True)


def test_image_size_filter():
    text = "\n".join(
        [
            "<< /Subtype /Image /Width 640 /Height 480 >>",
            "<< /Subtype /Image /Width 16 /Height 16 >>",
            "<< /Subtype /Image /Width 31 /Height 400 >>",
            "<< /Subtype /Image /Width 5000 /Height 200 >>",
            "<< /Subtype /Image /Width 1920 /Height 1080 >>",
        ]
    )
    assert h.count_images(text) == 2


def test_identical_images_at_different_offsets_count_separately():
    text = "<< /Subtype /Image /Width 100 /Height 100 >>\n<< /Subtype /Image /Width 100 /Height 100 >>"
    assert h.count_images(text) == 2


def test_image_fallback_uses_subtype_markers():
    # No size info on the same line, so only the 0.3 fallback applies.
    text = "\n".join(["/Subtype /Image"] * 10)
    assert h.count_images(text) == 3
    assert h.count_images("/Subtype /Image") == 0


def test_text_ops_count_begin_text_markers():
    assert h.count_text_ops("q BT /F1 12 Tf ET\nBTX\n(BT x) Tj") == 2


def test_bullets_summed_across_patterns():
    text = "\n• one\n- two\n* three\n1. four\na) five\n"
    assert h.count_bullets(text, page_count=1) == 5


def test_utf8_bullet_bytes_are_counted():
    text = "•".encode("utf-8").decode("latin-1") * 3
    assert h.count_bullets(text, page_count=1) == 3


def test_stray_bullet_bytes_are_not_counted():
    # compressed streams are full of these bytes outside a complete glyph
    text = h.decode_bytes(b"x\xe2y \xa2z \x80w \xe2\x80")
    assert h.count_bullets(text, page_count=1) == 0
    assert h.count_bullets(h.decode_bytes(b"x\xe2\x80\xa2y"), page_count=1) == 1


def test_bullet_soft_clamp():
    text = "\n- item" * 200
    assert h.count_bullets(text, page_count=1) == 40
    assert h.count_bullets(text, page_count=10) == 120
    assert h.count_bullets("\n- item" * 30, page_count=1) == 30


def test_bullets_never_exceed_clamp():
    text = "\n- x" * 1000
    for pages in (0, 1, 3, 7, 20):
        assert h.count_bullets(text, pages) <= h.bullet_clamp(pages)


def test_aspect_snaps_near_sixteen_nine():
    sizes = [PageSize(width=960, height=540), PageSize(width=1000, height=570), PageSize(width=960, height=540)]
    summary = h.summarize_aspect(sizes)
    assert summary.common_ratio == "16:9"
    assert summary.ratios == [1.778, 1.754, 1.778]


def test_aspect_named_and_raw_ratios():
    assert h.summarize_aspect([PageSize(width=1024, height=768)]).common_ratio == "4:3"
    assert h.summarize_aspect([PageSize(width=612, height=792)]).common_ratio == "0.77"
    assert h.summarize_aspect([PageSize(width=500, height=500)]).common_ratio == "1:1"


def test_aspect_mode_ties_go_to_first_seen():
    sizes = [PageSize(width=1024, height=768), PageSize(width=960, height=540)]
    assert h.summarize_aspect(sizes).common_ratio == "4:3"


def test_aspect_without_pages():
    summary = h.summarize_aspect([])
    assert summary.common_ratio is None
    assert summary.ratios == []


def test_zero_height_page_has_no_ratio():
    assert h.summarize_aspect([PageSize(width=100, height=0)]).common_ratio is None
