from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import BOOLEAN, CheckConstraint, DateTime, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from giveaway.db.models.base import Base


class Campaign(Base):
    __tablename__ = "campaigns"
    __table_args__ = (
        CheckConstraint(
            "capacity_total IS NULL OR capacity_total >= 0",
            name="capacity_total_non_negative",
        ),
        CheckConstraint("max_claims_per_email >= 0", name="max_claims_per_email_non_negative"),
        CheckConstraint(
            "max_claims_per_ip_per_day >= 0",
            name="max_claims_per_ip_per_day_non_negative",
        ),
        CheckConstraint(
            "starts_at IS NULL OR ends_at IS NULL OR starts_at < ends_at",
            name="window_ordered",
        ),
        Index("idx_campaigns_created_by", "created_by"),
        Index("idx_campaigns_is_active", "is_active"),
    )

    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True)
    slug: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    capacity_total: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_active: Mapped[bool] = mapped_column(BOOLEAN, nullable=False, server_default=text("true"))
    starts_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    ends_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    require_email: Mapped[bool] = mapped_column(BOOLEAN, nullable=False, server_default=text("true"))
    require_email_verification: Mapped[bool] = mapped_column(
        BOOLEAN, nullable=False, server_default=text("false")
    )
    require_invite_code: Mapped[bool] = mapped_column(
        BOOLEAN, nullable=False, server_default=text("false")
    )
    show_scarcity: Mapped[bool] = mapped_column(BOOLEAN, nullable=False, server_default=text("true"))
    test_mode: Mapped[bool] = mapped_column(BOOLEAN, nullable=False, server_default=text("false"))
    kiosk_mode: Mapped[bool] = mapped_column(BOOLEAN, nullable=False, server_default=text("false"))
    show_banner: Mapped[bool] = mapped_column(BOOLEAN, nullable=False, server_default=text("false"))
    show_logo: Mapped[bool] = mapped_column(BOOLEAN, nullable=False, server_default=text("true"))
    enable_questions: Mapped[bool] = mapped_column(
        BOOLEAN, nullable=False, server_default=text("false")
    )
    collect_company: Mapped[bool] = mapped_column(
        BOOLEAN, nullable=False, server_default=text("false")
    )
    collect_phone: Mapped[bool] = mapped_column(BOOLEAN, nullable=False, server_default=text("false"))
    collect_title: Mapped[bool] = mapped_column(BOOLEAN, nullable=False, server_default=text("false"))

    max_claims_per_email: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default=text("1")
    )
    max_claims_per_ip_per_day: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default=text("5")
    )
    max_claims_per_address: Mapped[int | None] = mapped_column(Integer, nullable=True)

    privacy_blurb: Mapped[str | None] = mapped_column(Text, nullable=True)
    contact_email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    current_version: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("1"))
    has_draft: Mapped[bool] = mapped_column(BOOLEAN, nullable=False, server_default=text("false"))

    created_by: Mapped[UUID | None] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("admin_users.id", ondelete="SET NULL"),
        nullable=True,
    )
    updated_by: Mapped[UUID | None] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("admin_users.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    @property
    def has_capacity_limit(self) -> bool:
        return bool(self.capacity_total and self.capacity_total > 0)
