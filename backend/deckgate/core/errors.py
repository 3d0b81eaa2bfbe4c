class DeckGateError(Exception):
    def __init__(self, code: str, detail: str):
        super().__init__(detail)
        self.code = code
        self.detail = detail


class DeckParseError(DeckGateError):
    """Raised when document bytes cannot be read as a structured document."""

    def __init__(self, detail: str):
        super().__init__("PARSE_FAILED", detail)


class ResolutionError(DeckGateError):
    """Raised when a submission URL cannot be resolved to anything analyzable."""

    def __init__(self, detail: str, status_code: int = 400, upstream_status: int | None = None):
        super().__init__("RESOLUTION_FAILED", detail)
        self.status_code = status_code
        self.upstream_status = upstream_status


class LLMError(DeckGateError):
    def __init__(self, detail: str, code: str = "LLM_API_ERROR"):
        super().__init__(code, detail)


class LLMUnavailableError(LLMError):
    def __init__(self, detail: str):
        super().__init__(detail, code="LLM_UNAVAILABLE")


class LLMQuotaError(LLMError):
    def __init__(self, detail: str):
        super().__init__(detail, code="LLM_QUOTA_EXCEEDED")
