import logging
from abc import ABC, abstractmethod
from collections.abc import Callable

from pydantic import ValidationError
from sqlalchemy.orm import Session

from deckgate.models import DEFAULT_CONFIG_KEY, OrganizerConfig
from deckgate.schemas.config import Config, default_config

logger = logging.getLogger(__name__)


def merge_with_defaults(stored: dict | None) -> Config:
    """Overlay stored keys on the defaults so configs saved by older versions stay loadable."""
    base = default_config().model_dump(by_alias=True, mode="json")
    if not stored or not isinstance(stored, dict):
        return Config.model_validate(base)
    try:
        return Config.model_validate({**base, **stored})
    except ValidationError as exc:
        logger.warning("stored organizer config is invalid, using defaults: %s", exc)
        return Config.model_validate(base)


class ConfigProvider(ABC):
    @abstractmethod
    def load(self) -> Config: ...

    @abstractmethod
    def save(self, config: Config) -> Config: ...


class InMemoryConfigProvider(ConfigProvider):
    def __init__(self, config: Config | None = None):
        self._config = config.model_copy(deep=True) if config else default_config()

    def load(self) -> Config:
        return self._config.model_copy(deep=True)

    def save(self, config: Config) -> Config:
        self._config = config.model_copy(deep=True)
        return self.load()


class SqlConfigProvider(ConfigProvider):
    def __init__(self, session_factory: Callable[[], Session], key: str = DEFAULT_CONFIG_KEY):
        self.session_factory = session_factory
        self.key = key

    def load(self) -> Config:
        db = self.session_factory()
        try:
            row = db.get(OrganizerConfig, self.key)
            return merge_with_defaults(row.payload if row else None)
        finally:
            db.close()

    def save(self, config: Config) -> Config:
        payload = config.model_dump(by_alias=True, mode="json")
        db = self.session_factory()
        try:
            row = db.get(OrganizerConfig, self.key)
            if row is None:
                row = OrganizerConfig(key=self.key, payload=payload)
            else:
                row.payload = payload
            db.add(row)
            db.commit()
        finally:
            db.close()
        return merge_with_defaults(payload)
