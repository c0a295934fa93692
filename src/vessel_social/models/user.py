"""SQLAlchemy model for the identity store's user records."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from vessel_social.db.session import Base
from vessel_social.db.time import utcnow


def _new_user_id() -> str:
    return str(uuid.uuid4())


class User(Base):
    """Identity owned by the external identity store.

    This service only reads users; rows are written by the authentication
    service (and by fixtures in tests). Handles are stored lower case.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_user_id)
    handle: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    display_name: Mapped[str] = mapped_column(Text, nullable=False)
    photo_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
