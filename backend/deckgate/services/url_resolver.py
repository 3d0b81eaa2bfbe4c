"""Turn a submission URL into something analyzable.

Attempts, in order, each tried once: direct PDF fetch, platform export,
PDF links discovered in the page, and finally heuristics over the page HTML.
"""

import asyncio
import base64
import logging
import re
from dataclasses import dataclass
from urllib.parse import unquote, urljoin, urlparse

import httpx

from deckgate.core.config import settings
from deckgate.core.errors import DeckGateError, ResolutionError
from deckgate.schemas.analysis import DeckAnalysis
from deckgate.schemas.resolve import PlatformHints, ResolveResult
from deckgate.services.html_analyzer import analyze_html
from deckgate.services.pdf_parser import analyze_pdf_bytes

logger = logging.getLogger(__name__)

_HREF_RE = re.compile(r"href\s*=\s*[\"']([^\"']+)[\"']", re.IGNORECASE)
_PDF_TOKEN_RE = re.compile(r"(https?://[^\s\"'<>]+\.pdf)", re.IGNORECASE)
_GOOGLE_EXPORT_RE = re.compile(
    r"(https?://docs\.google\.com/presentation/d/[^\"'\\]+/export/pdf[^\"'\\]*)", re.IGNORECASE
)

_GOOGLE_ID_RE = re.compile(r"/presentation/d/([^/]+)")
_FIGMA_ID_RE = re.compile(r"/(?:file|proto|design)/([^/]+)")
_CANVA_ID_RE = re.compile(r"/design/([^/]+)")

_COUNT_HINTS = {
    "google-slides": ("estimated_slides", re.compile(r"(\d+)\s*slides?", re.IGNORECASE)),
    "figma": ("estimated_frames", re.compile(r"(\d+)\s*frames?", re.IGNORECASE)),
    "canva": ("estimated_pages", re.compile(r"(\d+)\s*pages?", re.IGNORECASE)),
}
_AUTH_NOTES = {
    "figma": "Figma export requires API token",
    "canva": "Canva export requires authentication",
}


@dataclass
class FetchedDocument:
    file_name: str
    file_size: int
    document_base64: str
    analysis: DeckAnalysis


def detect_platform(url: str) -> str:
    u = url.lower()
    if "docs.google.com" in u:
        return "google-slides"
    if "figma.com" in u:
        return "figma"
    if "canva.com" in u:
        return "canva"
    if "slides.com" in u:
        return "slides-com"
    if "prezi.com" in u:
        return "prezi"
    return "unknown"


def is_likely_pdf_url(url: str) -> bool:
    u = url.lower()
    path = u.split("#", 1)[0].split("?", 1)[0]
    return path.endswith(".pdf") or "/export/pdf" in u or "format=pdf" in u


def filename_from_url(url: str) -> str:
    try:
        path = urlparse(url).path
    except ValueError:
        return "download.pdf"
    base = unquote([p for p in path.split("/") if p][-1]) if path.strip("/") else "download"
    return base if base.lower().endswith(".pdf") else f"{base}.pdf"


def google_slides_export_url(url: str) -> str | None:
    parsed = urlparse(url)
    if "docs.google.com" not in parsed.netloc:
        return None
    m = _GOOGLE_ID_RE.search(parsed.path)
    return f"https://docs.google.com/presentation/d/{m.group(1)}/export/pdf" if m else None


def figma_export_url(url: str) -> str | None:
    parsed = urlparse(url)
    if "figma.com" not in parsed.netloc:
        return None
    m = _FIGMA_ID_RE.search(parsed.path)
    return f"https://api.figma.com/v1/files/{m.group(1)}/export?format=pdf" if m else None


def canva_export_url(url: str) -> str | None:
    parsed = urlparse(url)
    if "canva.com" not in parsed.netloc:
        return None
    m = _CANVA_ID_RE.search(parsed.path)
    return f"https://www.canva.com/api/v1/designs/{m.group(1)}/export/pdf" if m else None


_EXPORTERS = {
    "google-slides": (google_slides_export_url, "google-slides-export"),
    "figma": (figma_export_url, "figma-export"),
    "canva": (canva_export_url, "canva-export"),
}


def platform_hints(platform: str, html: str) -> PlatformHints:
    hints = PlatformHints(platform=platform)
    if platform not in _COUNT_HINTS:
        return hints

    field, pattern = _COUNT_HINTS[platform]
    m = pattern.search(html)
    if m:
        setattr(hints, field, int(m.group(1)))
    hints.export_available = True
    hints.requires_auth = platform in _AUTH_NOTES
    hints.auth_note = _AUTH_NOTES.get(platform)
    return hints


def discover_pdf_links(html: str, base_url: str, limit: int = 5) -> list[str]:
    found: dict[str, None] = {}

    for m in _HREF_RE.finditer(html):
        try:
            full = urljoin(base_url, m.group(1).strip())
        except ValueError:
            continue
        if full.startswith(("http://", "https://")) and is_likely_pdf_url(full):
            found.setdefault(full, None)

    for pattern in (_PDF_TOKEN_RE, _GOOGLE_EXPORT_RE):
        for m in pattern.finditer(html):
            found.setdefault(m.group(1), None)

    return list(found)[:limit]


class UrlResolver:
    def __init__(self, client: httpx.AsyncClient | None = None):
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=settings.http_timeout_seconds,
                follow_redirects=True,
                headers={"User-Agent": settings.http_user_agent},
            )
            self._owns_client = True
        return self._client

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None and not self._client.is_closed:
            await self._client.aclose()

    async def fetch_document(self, url: str, headers: dict | None = None) -> FetchedDocument | None:
        """Fetch ``url`` and analyze it when the server really returns a PDF.

        Returns None for non-success statuses, non-PDF content types and bodies
        over the upload size limit.
        """
        limit = settings.max_upload_mb * 1024 * 1024
        async with self.client.stream("GET", url, headers=headers, follow_redirects=True) as resp:
            if not resp.is_success:
                logger.warning("document fetch %s returned %s", url, resp.status_code)
                return None
            content_type = resp.headers.get("content-type", "").lower()
            if "pdf" not in content_type:
                logger.warning("document fetch %s returned content-type %r", url, content_type)
                return None

            try:
                declared = int(resp.headers["content-length"])
            except (KeyError, ValueError):
                declared = None
            if declared is not None and declared > limit:
                logger.warning("document fetch %s declares %d bytes, over the limit", url, declared)
                return None

            chunks: list[bytes] = []
            received = 0
            async for chunk in resp.aiter_bytes():
                received += len(chunk)
                if received > limit:
                    logger.warning("document fetch %s exceeded %d bytes", url, limit)
                    return None
                chunks.append(chunk)

        data = b"".join(chunks)
        analysis = await asyncio.to_thread(analyze_pdf_bytes, data)
        return FetchedDocument(
            file_name=filename_from_url(url),
            file_size=declared if declared is not None else len(data),
            document_base64=base64.b64encode(data).decode("ascii"),
            analysis=analysis,
        )

    async def _try_document(self, url: str, stage: str, headers: dict | None = None) -> FetchedDocument | None:
        try:
            return await self.fetch_document(url, headers=headers)
        except (httpx.HTTPError, DeckGateError) as exc:
            logger.warning("%s attempt for %s failed: %s", stage, url, exc)
            return None

    async def _try_export(self, url: str) -> ResolveResult | None:
        platform = detect_platform(url)
        if platform not in _EXPORTERS:
            return None
        build, method = _EXPORTERS[platform]
        export_url = build(url)
        if not export_url:
            return None

        headers = None
        if platform == "figma" and settings.figma_api_token:
            headers = {"X-Figma-Token": settings.figma_api_token}

        doc = await self._try_document(export_url, f"{platform} export", headers=headers)
        if doc is None:
            return None
        return _document_result(method, doc, platform=platform)

    async def resolve(self, url: str, try_export_to_pdf: bool = False) -> ResolveResult:
        url = (url or "").strip()
        if not url:
            raise ResolutionError("Missing URL.")

        if is_likely_pdf_url(url):
            doc = await self._try_document(url, "direct")
            if doc is not None:
                return _document_result("pdf-direct", doc)

        if try_export_to_pdf:
            exported = await self._try_export(url)
            if exported is not None:
                return exported

        try:
            page = await self.client.get(url, follow_redirects=True)
        except httpx.HTTPError as exc:
            raise ResolutionError(f"Failed to fetch URL: {exc!s}", status_code=502) from exc
        if not page.is_success:
            raise ResolutionError(
                f"Failed to fetch URL: {page.status_code} {page.reason_phrase}".strip(),
                status_code=400,
                upstream_status=page.status_code,
            )

        html = page.text
        for link in discover_pdf_links(html, url, limit=settings.max_discovered_links):
            doc = await self._try_document(link, "discovered link")
            if doc is not None:
                result = _document_result("pdf-from-html", doc)
                result.discovered_from = url
                result.discovered_link = link
                return result

        platform = detect_platform(url)
        return ResolveResult(
            ok=True,
            method="html",
            analysis=analyze_html(html, url),
            platform=platform,
            platform_hints=platform_hints(platform, html),
        )


def _document_result(method: str, doc: FetchedDocument, platform: str | None = None) -> ResolveResult:
    return ResolveResult(
        ok=True,
        method=method,
        analysis=doc.analysis,
        file_name=doc.file_name,
        file_size=doc.file_size,
        document_base64=doc.document_base64,
        platform=platform,
    )
