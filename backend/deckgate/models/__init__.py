from deckgate.models.entities import DEFAULT_CONFIG_KEY, OrganizerConfig

__all__ = [
    "DEFAULT_CONFIG_KEY",
    "OrganizerConfig",
]
