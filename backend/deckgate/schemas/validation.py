from pydantic import Field

from deckgate.schemas.base import CamelModel
from deckgate.schemas.config import Config
from deckgate.schemas.deck import Deck, TestResult


class ValidateRequest(CamelModel):
    deck: Deck
    config: Config | None = None
    platform: str | None = None


class ValidateResponse(CamelModel):
    run_id: str
    deck_id: str
    tests: list[TestResult] = Field(default_factory=list)
    passed: bool
    stale: bool = False
