import asyncio
import logging
import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import JSONResponse

from deckgate.api.deps import get_ai_evaluator, get_config_provider, get_pipeline, get_resolver
from deckgate.core.config import settings
from deckgate.core.errors import DeckParseError, ResolutionError
from deckgate.schemas.ai_check import AiCheckRequest
from deckgate.schemas.analysis import DeckFormat
from deckgate.schemas.config import AiCheck, Config
from deckgate.schemas.deck import Deck, FileInfo
from deckgate.schemas.resolve import ResolveRequest, ResolveResult
from deckgate.schemas.validation import ValidateRequest, ValidateResponse
from deckgate.services.ai_rules import AiRuleEvaluator
from deckgate.services.config_store import ConfigProvider
from deckgate.services.format_detector import detect_format
from deckgate.services.pdf_parser import analyze_pdf_bytes
from deckgate.services.pipeline import ValidationPipeline
from deckgate.services.url_resolver import UrlResolver

router = APIRouter()
logger = logging.getLogger(__name__)


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/health")
def health():
    return {"status": "ok", "app": settings.app_name}


@router.get("/config", response_model=Config)
def get_config(provider: ConfigProvider = Depends(get_config_provider)):
    return provider.load()


@router.put("/config", response_model=Config)
def put_config(payload: Config, provider: ConfigProvider = Depends(get_config_provider)):
    return provider.save(payload)


async def build_file_deck(file_name: str, mime: str, content: bytes) -> Deck:
    """Detect the format of an uploaded file and analyze it when it is a PDF."""
    fmt = detect_format(file_name=file_name, mime=mime)
    analysis = None
    if fmt == DeckFormat.pdf:
        analysis = await asyncio.to_thread(analyze_pdf_bytes, content)

    return Deck(
        id=str(uuid.uuid4()),
        name=file_name,
        source_type="file",
        format=fmt,
        file_info=FileInfo(file_name=file_name, size_bytes=len(content), mime=mime),
        file_data=content,
        analysis=analysis,
        created_at=_utcnow(),
    )


@router.post("/decks/analyze", response_model=Deck, response_model_exclude_none=True)
async def analyze_deck(file: UploadFile = File(...)):
    content = await file.read()
    if len(content) > settings.max_upload_mb * 1024 * 1024:
        raise HTTPException(status_code=413, detail="FILE_TOO_LARGE")

    try:
        return await build_file_deck(file.filename or "upload", file.content_type or "", content)
    except DeckParseError as exc:
        raise HTTPException(status_code=422, detail=f"{exc.code}: {exc.detail}") from exc


@router.post("/resolve-url", response_model=ResolveResult, response_model_exclude_none=True)
async def resolve_url(
    payload: ResolveRequest,
    resolver: UrlResolver = Depends(get_resolver),
    provider: ConfigProvider = Depends(get_config_provider),
):
    if not payload.url or not payload.url.strip():
        return JSONResponse(status_code=400, content={"ok": False, "message": "Missing URL."})

    try_export = payload.try_export_to_pdf
    if try_export is None:
        try_export = provider.load().url_auto_export_to_pdf

    try:
        return await resolver.resolve(payload.url, try_export_to_pdf=try_export)
    except ResolutionError as exc:
        result = ResolveResult(ok=False, message=exc.detail, upstream_status=exc.upstream_status)
        return JSONResponse(status_code=exc.status_code, content=result.to_wire())
    except Exception as exc:  # noqa: BLE001
        logger.exception("unexpected error resolving %s", payload.url)
        return JSONResponse(
            status_code=500,
            content={"ok": False, "message": str(exc) or "Unexpected error resolving URL."},
        )


@router.post("/ai-check")
async def ai_check(payload: AiCheckRequest, evaluator: AiRuleEvaluator = Depends(get_ai_evaluator)):
    # Always 200: degraded paths come back as pass=true with fallback=true.
    check = AiCheck(
        id=payload.rule_id or "ai-rule",
        label=payload.rule_label or payload.rule_id or "AI rule",
        prompt=payload.prompt,
    )
    verdict = await evaluator.evaluate(check, payload.deck_summary)
    return verdict.to_wire()


@router.post("/decks/validate", response_model=ValidateResponse)
async def validate_deck(
    payload: ValidateRequest,
    pipeline: ValidationPipeline = Depends(get_pipeline),
    provider: ConfigProvider = Depends(get_config_provider),
):
    config = payload.config or provider.load()
    run = await pipeline.run(payload.deck, config, platform=payload.platform)
    return ValidateResponse(
        run_id=run.run_id,
        deck_id=run.deck_id,
        tests=run.tests,
        passed=run.passed,
        stale=run.stale,
    )
