"""SiteSetting model - generic key/value configuration store."""

from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import String, DateTime, Text, JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from storefront.database import Base


class SiteSetting(Base):
    """
    Key/value row edited from the admin panel.
    Gateway credentials are stored here under the gateway's key prefix.
    """

    __tablename__ = "site_settings"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)

    value: Mapped[Optional[Any]] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"),
        nullable=True,
    )

    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<SiteSetting {self.key}>"
