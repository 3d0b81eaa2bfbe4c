from datetime import datetime

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from deckgate.db.base import Base

DEFAULT_CONFIG_KEY = "default"


class OrganizerConfig(Base):
    __tablename__ = "organizer_configs"

    key: Mapped[str] = mapped_column(String(64), primary_key=True, default=DEFAULT_CONFIG_KEY)
    payload: Mapped[dict] = mapped_column(JSON, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
