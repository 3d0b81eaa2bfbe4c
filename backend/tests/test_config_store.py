import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from deckgate.db.base import Base
from deckgate.models import DEFAULT_CONFIG_KEY, OrganizerConfig
from deckgate.schemas.analysis import DeckFormat
from deckgate.schemas.config import AiCheck, Config, default_config
from deckgate.services.config_store import InMemoryConfigProvider, SqlConfigProvider, merge_with_defaults


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    yield factory
    engine.dispose()


def test_defaults():
    config = default_config()
    assert config.accepted_formats == [DeckFormat.pdf, DeckFormat.pptx, DeckFormat.keynote]
    assert config.max_size_mb == 100
    assert config.require_16by9 is True
    assert config.url_auto_export_to_pdf is False
    assert [c.id for c in config.ai_checks] == ["ai-title", "ai-not-all-bullets", "ai-has-images"]


def test_wire_aliases():
    wire = default_config().model_dump(by_alias=True, mode="json")
    assert wire["maxSizeMB"] == 100
    assert wire["require16by9"] is True
    assert wire["acceptedFormats"] == ["pdf", "pptx", "keynote"]
    assert wire["aiChecks"][0]["id"] == "ai-title"


def test_merge_keeps_missing_keys_at_defaults():
    config = merge_with_defaults({"maxSizeMB": 50, "acceptedFormats": ["pdf", "url"], "legacyFlag": True})
    assert config.max_size_mb == 50
    assert config.accepted_formats == [DeckFormat.pdf, DeckFormat.url]
    assert config.max_slides == 100
    assert len(config.ai_checks) == 3


@pytest.mark.parametrize("stored", [None, {}, ["not", "a", "dict"], {"maxSizeMB": -1}])
def test_merge_falls_back_to_defaults(stored):
    assert merge_with_defaults(stored) == default_config()


def test_in_memory_provider_returns_copies():
    provider = InMemoryConfigProvider()
    loaded = provider.load()
    loaded.max_slides = 3
    assert provider.load().max_slides == 100

    provider.save(loaded)
    assert provider.load().max_slides == 3


def test_sql_provider_defaults_when_empty(session_factory):
    assert SqlConfigProvider(session_factory).load() == default_config()


def test_sql_provider_roundtrip(session_factory):
    provider = SqlConfigProvider(session_factory)
    config = default_config()
    config.enforce_aspect = False
    config.ai_checks = [AiCheck(id="ai-custom", label="Custom", prompt="Be nice.")]

    saved = provider.save(config)
    assert saved.enforce_aspect is False

    loaded = provider.load()
    assert loaded.enforce_aspect is False
    assert [c.id for c in loaded.ai_checks] == ["ai-custom"]

    config.enforce_aspect = True
    provider.save(config)
    assert provider.load().enforce_aspect is True

    db = session_factory()
    try:
        assert db.query(OrganizerConfig).count() == 1
        row = db.get(OrganizerConfig, DEFAULT_CONFIG_KEY)
        assert row.payload["enforceAspect"] is True
    finally:
        db.close()


def test_sql_provider_partial_payload(session_factory):
    db = session_factory()
    db.add(OrganizerConfig(key=DEFAULT_CONFIG_KEY, payload={"minSlides": 5}))
    db.commit()
    db.close()

    config = SqlConfigProvider(session_factory).load()
    assert config.min_slides == 5
    assert config.max_slides == 100


def test_config_keys_are_isolated(session_factory):
    SqlConfigProvider(session_factory, key="spring").save(Config(max_slides=20))
    assert SqlConfigProvider(session_factory).load().max_slides == 100
    assert SqlConfigProvider(session_factory, key="spring").load().max_slides == 20
