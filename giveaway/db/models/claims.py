from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import BOOLEAN, CHAR, CheckConstraint, DateTime, ForeignKey, Index, String, Text, UniqueConstraint, text
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from giveaway.db.models.base import Base


class Claim(Base):
    __tablename__ = "claims"
    __table_args__ = (
        CheckConstraint("status IN ('pending','confirmed','shipped')", name="status"),
        UniqueConstraint(
            "campaign_id",
            "address_fingerprint",
            name="uq_claims_campaign_address_fingerprint",
        ),
        Index("idx_claims_campaign_status", "campaign_id", "status"),
        Index("idx_claims_campaign_ip_created", "campaign_id", "ip_hash", "created_at"),
        Index("idx_claims_campaign_email", "campaign_id", "email_normalized"),
        Index("idx_claims_campaign_location", "campaign_id", "location_fingerprint"),
        Index("idx_claims_address_fingerprint", "address_fingerprint"),
    )

    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True)
    campaign_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("campaigns.id"),
        nullable=False,
    )
    status: Mapped[str] = mapped_column(String(16), nullable=False)

    first_name: Mapped[str] = mapped_column(String(200), nullable=False, server_default=text("''"))
    last_name: Mapped[str] = mapped_column(String(200), nullable=False, server_default=text("''"))
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    email_normalized: Mapped[str | None] = mapped_column(String(320), nullable=True)
    company: Mapped[str | None] = mapped_column(String(200), nullable=True)
    title: Mapped[str | None] = mapped_column(String(200), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(64), nullable=True)

    address1: Mapped[str] = mapped_column(String(300), nullable=False, server_default=text("''"))
    address2: Mapped[str | None] = mapped_column(String(300), nullable=True)
    city: Mapped[str] = mapped_column(String(200), nullable=False, server_default=text("''"))
    region: Mapped[str] = mapped_column(String(200), nullable=False, server_default=text("''"))
    postal_code: Mapped[str] = mapped_column(String(32), nullable=False, server_default=text("''"))
    country: Mapped[str] = mapped_column(String(64), nullable=False, server_default=text("'US'"))

    address_fingerprint: Mapped[str] = mapped_column(CHAR(64), nullable=False)
    location_fingerprint: Mapped[str | None] = mapped_column(CHAR(64), nullable=True)
    ip_hash: Mapped[str | None] = mapped_column(CHAR(64), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(Text, nullable=True)
    invite_code: Mapped[str | None] = mapped_column(String(64), nullable=True)
    is_test_claim: Mapped[bool] = mapped_column(
        BOOLEAN, nullable=False, server_default=text("false")
    )
    consent_given: Mapped[bool] = mapped_column(
        BOOLEAN, nullable=False, server_default=text("false")
    )
    consent_timestamp: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    claim_token: Mapped[str | None] = mapped_column(String(64), unique=True, nullable=True)
    pre_created_by: Mapped[UUID | None] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("admin_users.id", ondelete="SET NULL"),
        nullable=True,
    )
    admin_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    confirmed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    shipped_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    @property
    def is_awaiting_address(self) -> bool:
        return bool(self.claim_token) and not self.address1
