from deckgate.schemas.analysis import DeckFormat

# First match wins; specific platform paths are listed before their bare domains.
_SAAS_HINTS: tuple[tuple[str, DeckFormat], ...] = (
    ("docs.google.com/presentation", DeckFormat.google_slides),
    ("canva.com/design", DeckFormat.canva),
    ("figma.com/file", DeckFormat.figma),
    ("figma.com/proto", DeckFormat.figma),
    ("docs.google.com", DeckFormat.url),
    ("canva.com", DeckFormat.url),
    ("figma.com", DeckFormat.url),
    ("pitch.com", DeckFormat.url),
    ("slides.com", DeckFormat.url),
    ("prezi.com", DeckFormat.url),
)

_PDF_MARKERS = ("export/pdf", "format=pdf")
_PPTX_EXTENSIONS = (".pptx", ".ppt", ".odp")
_PPTX_MIME_MARKERS = ("powerpoint", "presentationml", "opendocument.presentation")
_KEYNOTE_MIME_MARKERS = ("keynote",)


def _strip_query(value: str) -> str:
    return value.split("?", 1)[0].split("#", 1)[0]


def detect_format(file_name: str | None = None, mime: str | None = None, url: str | None = None) -> DeckFormat:
    """Classify a submission by filename, MIME type or URL. Pure; never touches the network."""
    name_or_url = (file_name or url or "").strip().lower()
    mime = (mime or "").strip().lower()
    path = _strip_query(name_or_url)

    for marker, fmt in _SAAS_HINTS:
        if marker in name_or_url:
            return fmt

    if path.endswith(".pdf") or mime == "application/pdf" or any(m in name_or_url for m in _PDF_MARKERS):
        return DeckFormat.pdf
    if path.endswith(_PPTX_EXTENSIONS) or any(m in mime for m in _PPTX_MIME_MARKERS):
        return DeckFormat.pptx
    if path.endswith(".key") or any(m in mime for m in _KEYNOTE_MIME_MARKERS):
        return DeckFormat.keynote
    if name_or_url.startswith("http"):
        return DeckFormat.url

    return DeckFormat.unknown
