from typing import Literal

from pydantic import ConfigDict

from deckgate.schemas.analysis import DeckAnalysis
from deckgate.schemas.base import CamelModel

ResolveMethod = Literal[
    "pdf-direct",
    "google-slides-export",
    "figma-export",
    "canva-export",
    "pdf-from-html",
    "html",
]


class ResolveRequest(CamelModel):
    url: str | None = None
    try_export_to_pdf: bool | None = None


class PlatformHints(CamelModel):
    model_config = ConfigDict(extra="allow")

    platform: str
    export_available: bool = False
    requires_auth: bool = False
    auth_note: str | None = None
    estimated_slides: int | None = None
    estimated_frames: int | None = None
    estimated_pages: int | None = None


class ResolveResult(CamelModel):
    ok: bool
    method: ResolveMethod | None = None
    analysis: DeckAnalysis | None = None
    file_name: str | None = None
    file_size: int | None = None
    document_base64: str | None = None
    message: str | None = None
    platform: str | None = None
    platform_hints: PlatformHints | None = None
    discovered_from: str | None = None
    discovered_link: str | None = None
    upstream_status: int | None = None
