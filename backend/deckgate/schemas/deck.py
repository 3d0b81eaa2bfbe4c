from typing import Literal

from pydantic import Field

from deckgate.schemas.analysis import DeckAnalysis, DeckFormat
from deckgate.schemas.base import CamelModel

SourceType = Literal["file", "url"]
TestStatus = Literal["pending", "running", "pass", "fail"]
TestType = Literal["deterministic", "ai"]


class TestResult(CamelModel):
    __test__ = False  # not a pytest class

    id: str
    label: str
    type: TestType
    status: TestStatus
    details: list[str] = Field(default_factory=list)


class FileInfo(CamelModel):
    file_name: str
    size_bytes: int
    mime: str = ""


class Deck(CamelModel):
    id: str
    name: str
    source_type: SourceType
    format: DeckFormat
    file_info: FileInfo | None = None
    file_data: bytes | None = Field(default=None, exclude=True, repr=False)
    url: str | None = None
    analysis: DeckAnalysis | None = None
    tests: list[TestResult] = Field(default_factory=list)
    submitter_name: str | None = None
    created_at: str | None = None
    submitted_at: str | None = None
