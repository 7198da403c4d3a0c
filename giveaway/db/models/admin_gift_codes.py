from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import BOOLEAN, DateTime, ForeignKey, Index, String, Text, text
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from giveaway.db.models.base import Base


class AdminGiftCode(Base):
    __tablename__ = "admin_gift_codes"
    __table_args__ = (Index("idx_admin_gift_codes_admin_campaign", "admin_id", "campaign_id"),)

    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True)
    admin_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("admin_users.id", ondelete="CASCADE"),
        nullable=False,
    )
    campaign_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("campaigns.id", ondelete="CASCADE"),
        nullable=False,
    )
    code: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    label: Mapped[str] = mapped_column(String(200), nullable=False)
    custom_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    custom_display_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    show_name: Mapped[bool] = mapped_column(BOOLEAN, nullable=False, server_default=text("true"))
    show_linkedin: Mapped[bool] = mapped_column(BOOLEAN, nullable=False, server_default=text("true"))
    show_bio: Mapped[bool] = mapped_column(BOOLEAN, nullable=False, server_default=text("false"))
    show_phone: Mapped[bool] = mapped_column(BOOLEAN, nullable=False, server_default=text("false"))
    show_email: Mapped[bool] = mapped_column(BOOLEAN, nullable=False, server_default=text("false"))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
