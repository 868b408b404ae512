"""Database model for signed-in accounts."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import Field as ORMField, SQLModel

from ..core.time import utcnow


class User(SQLModel, table=True):
    """Account authenticated via an identity provider.

    The Garmin columns hold the long-lived OAuth 1.0a access token pair.
    They stay null until the connect flow completes and must never be
    returned to a client.
    """

    __tablename__ = "users"

    id: uuid.UUID = ORMField(default_factory=uuid.uuid4, primary_key=True, nullable=False)
    email: str = ORMField(index=True, unique=True)
    name: Optional[str] = None
    avatar_url: Optional[str] = None
    provider: str = ORMField(default="google")
    provider_sub: Optional[str] = ORMField(default=None, index=True)
    garmin_access_token: Optional[str] = None
    garmin_access_token_secret: Optional[str] = None
    created_at: datetime = ORMField(default_factory=utcnow)

    @property
    def garmin_connected(self) -> bool:
        return bool(self.garmin_access_token and self.garmin_access_token_secret)


__all__ = ["User"]
