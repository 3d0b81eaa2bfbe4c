from deckgate.schemas.config import Config
from deckgate.schemas.deck import Deck, TestResult


def _fmt_mb(size_bytes: int) -> float:
    return round(size_bytes / (1024 * 1024), 1)


def _result(rule_id: str, label: str, passed: bool, details: list[str]) -> TestResult:
    return TestResult(
        id=rule_id,
        label=label,
        type="deterministic",
        status="pass" if passed else "fail",
        details=details,
    )


def _unknown_metric(metric: str, is_url: bool, lenient: bool, hint: str) -> tuple[bool, str]:
    """Policy for a metric the analysis could not determine."""
    if not is_url:
        return False, f"{metric} unavailable."
    if lenient:
        return True, f"{metric} unknown for URL. Passing by policy."
    return False, f"{metric} unknown for URL. {hint}"


def check_format(deck: Deck, config: Config) -> TestResult:
    accepted = deck.format in config.accepted_formats
    details = [f"Detected: {deck.format.value.upper()}"]
    if not accepted:
        details.append("Accepted: " + ", ".join(f.value.upper() for f in config.accepted_formats))
    return _result("det:format", f"Format is accepted ({deck.format.value.upper()})", accepted, details)


def check_size(deck: Deck, config: Config) -> TestResult:
    label = f"File size under {config.max_size_mb:g} MB"
    if deck.file_info is not None and deck.file_info.size_bytes is not None:
        mb = _fmt_mb(deck.file_info.size_bytes)
        return _result("det:size", label, mb <= config.max_size_mb, [f"Detected: {mb} MB"])

    passed, detail = _unknown_metric(
        "Size", deck.source_type == "url", config.url_lenient_when_unknown, "Upload a file for full checks."
    )
    return _result("det:size", label, passed, [detail])


def check_slide_count(deck: Deck, config: Config) -> TestResult:
    label = f"Slide count between {config.min_slides}-{config.max_slides}"
    page_count = deck.analysis.page_count if deck.analysis else None
    if page_count is not None:
        within = config.min_slides <= page_count <= config.max_slides
        return _result("det:slides", label, within, [f"Detected: {page_count}"])

    passed, detail = _unknown_metric(
        "Slide count", deck.source_type == "url", config.url_lenient_when_unknown, "Provide a PDF for full checks."
    )
    return _result("det:slides", label, passed, [detail])


def check_aspect(deck: Deck, config: Config) -> TestResult:
    summary = deck.analysis.aspect_summary if deck.analysis else None
    ratio = summary.common_ratio if summary else None

    label = "Slides are 16:9" if config.require_16by9 else "Aspect requirement"
    if ratio:
        passed = ratio == "16:9" or not config.require_16by9
        return _result("det:aspect", label, passed, [f"Detected: {ratio}"])

    lenient = deck.source_type == "url" and config.url_lenient_when_unknown
    detail = "Detected: unknown (passing by policy)" if lenient else "Detected: unknown"
    return _result("det:aspect", label, lenient, [detail])


def check_video(deck: Deck, config: Config) -> TestResult:
    has_video = bool(deck.analysis and deck.analysis.has_video)
    label = "Video allowed" if config.allow_video else "No embedded video"
    passed = config.allow_video or not has_video
    return _result("det:video", label, passed, [f"Detected: {'video present' if has_video else 'no video'}"])


def check_audio(deck: Deck, config: Config) -> TestResult:
    has_audio = bool(deck.analysis and deck.analysis.has_audio)
    label = "Audio allowed" if config.allow_audio else "No embedded audio"
    passed = config.allow_audio or not has_audio
    return _result("det:audio", label, passed, [f"Detected: {'audio present' if has_audio else 'no audio'}"])


def run_deterministic_checks(deck: Deck, config: Config) -> list[TestResult]:
    """Evaluate the organizer's fixed rules in their fixed order.

    The format rule always runs; every other rule runs only when its
    ``enforce_*`` toggle is on.
    """
    results = [check_format(deck, config)]
    if config.enforce_size:
        results.append(check_size(deck, config))
    if config.enforce_slide_count:
        results.append(check_slide_count(deck, config))
    if config.enforce_aspect:
        results.append(check_aspect(deck, config))
    if config.enforce_video_constraint:
        results.append(check_video(deck, config))
    if config.enforce_audio_constraint:
        results.append(check_audio(deck, config))
    return results
