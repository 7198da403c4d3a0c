"""initial_schema

Revision ID: 5c1e2a7d9b40
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "5c1e2a7d9b40"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "admin_users",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("role", sa.String(16), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("display_name", sa.String(200), nullable=True),
        sa.Column("linkedin_url", sa.String(500), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("phone", sa.String(64), nullable=True),
        sa.Column("created_by", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("updated_by", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("role IN ('super_admin','admin','viewer')", name="ck_admin_users_role"),
        sa.ForeignKeyConstraint(
            ["created_by"],
            ["admin_users.id"],
            name="fk_admin_users_created_by_admin_users",
            ondelete="SET NULL",
        ),
        sa.ForeignKeyConstraint(
            ["updated_by"],
            ["admin_users.id"],
            name="fk_admin_users_updated_by_admin_users",
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_admin_users"),
        sa.UniqueConstraint("email", name="uq_admin_users_email"),
    )

    op.create_table(
        "admin_sessions",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("admin_user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("session_token_hash", sa.CHAR(64), nullable=False),
        sa.Column("ip_hash", sa.CHAR(64), nullable=True),
        sa.Column("user_agent", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("revoked_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(
            ["admin_user_id"],
            ["admin_users.id"],
            name="fk_admin_sessions_admin_user_id_admin_users",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_admin_sessions"),
        sa.UniqueConstraint("session_token_hash", name="uq_admin_sessions_session_token_hash"),
    )
    op.create_index("idx_admin_sessions_admin_user", "admin_sessions", ["admin_user_id"])
    op.create_index("idx_admin_sessions_expires_at", "admin_sessions", ["expires_at"])

    op.create_table(
        "admin_otp_requests",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("otp_hash", sa.CHAR(64), nullable=False),
        sa.Column("ip_hash", sa.CHAR(64), nullable=True),
        sa.Column("attempts", sa.SmallInteger(), nullable=False, server_default=sa.text("0")),
        sa.Column("max_attempts", sa.SmallInteger(), nullable=False, server_default=sa.text("5")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("used_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("attempts >= 0", name="ck_admin_otp_requests_attempts_non_negative"),
        sa.CheckConstraint("max_attempts > 0", name="ck_admin_otp_requests_max_attempts_positive"),
        sa.PrimaryKeyConstraint("id", name="pk_admin_otp_requests"),
    )
    op.create_index(
        "idx_admin_otp_requests_email_created",
        "admin_otp_requests",
        ["email", "created_at"],
    )
    op.create_index(
        "idx_admin_otp_requests_ip_created",
        "admin_otp_requests",
        ["ip_hash", "created_at"],
    )

    op.create_table(
        "campaigns",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("slug", sa.String(128), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("capacity_total", sa.Integer(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("starts_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("ends_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("require_email", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column(
            "require_email_verification",
            sa.Boolean(),
            nullable=False,
            server_default=sa.text("false"),
        ),
        sa.Column("require_invite_code", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("show_scarcity", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("test_mode", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("kiosk_mode", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("show_banner", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("show_logo", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("enable_questions", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("collect_company", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("collect_phone", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("collect_title", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("max_claims_per_email", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("max_claims_per_ip_per_day", sa.Integer(), nullable=False, server_default=sa.text("5")),
        sa.Column("max_claims_per_address", sa.Integer(), nullable=True),
        sa.Column("privacy_blurb", sa.Text(), nullable=True),
        sa.Column("contact_email", sa.String(320), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("current_version", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("has_draft", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_by", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("updated_by", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "capacity_total IS NULL OR capacity_total >= 0",
            name="ck_campaigns_capacity_total_non_negative",
        ),
        sa.CheckConstraint(
            "max_claims_per_email >= 0",
            name="ck_campaigns_max_claims_per_email_non_negative",
        ),
        sa.CheckConstraint(
            "max_claims_per_ip_per_day >= 0",
            name="ck_campaigns_max_claims_per_ip_per_day_non_negative",
        ),
        sa.CheckConstraint(
            "starts_at IS NULL OR ends_at IS NULL OR starts_at < ends_at",
            name="ck_campaigns_window_ordered",
        ),
        sa.ForeignKeyConstraint(
            ["created_by"],
            ["admin_users.id"],
            name="fk_campaigns_created_by_admin_users",
            ondelete="SET NULL",
        ),
        sa.ForeignKeyConstraint(
            ["updated_by"],
            ["admin_users.id"],
            name="fk_campaigns_updated_by_admin_users",
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_campaigns"),
        sa.UniqueConstraint("slug", name="uq_campaigns_slug"),
    )
    op.create_index("idx_campaigns_created_by", "campaigns", ["created_by"])
    op.create_index("idx_campaigns_is_active", "campaigns", ["is_active"])

    op.create_table(
        "campaign_versions",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("campaign_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("version_number", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column(
            "data",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column("change_summary", sa.Text(), nullable=True),
        sa.Column("created_by", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("published_by", postgresql.UUID(as_uuid=True), nullable=True),
        sa.CheckConstraint("status IN ('draft','published')", name="ck_campaign_versions_status"),
        sa.ForeignKeyConstraint(
            ["campaign_id"],
            ["campaigns.id"],
            name="fk_campaign_versions_campaign_id_campaigns",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["created_by"],
            ["admin_users.id"],
            name="fk_campaign_versions_created_by_admin_users",
            ondelete="SET NULL",
        ),
        sa.ForeignKeyConstraint(
            ["published_by"],
            ["admin_users.id"],
            name="fk_campaign_versions_published_by_admin_users",
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_campaign_versions"),
        sa.UniqueConstraint(
            "campaign_id",
            "version_number",
            name="uq_campaign_versions_campaign_number",
        ),
    )
    op.create_index(
        "uq_campaign_versions_single_draft",
        "campaign_versions",
        ["campaign_id"],
        unique=True,
        postgresql_where=sa.text("status = 'draft'"),
    )

    op.create_table(
        "claims",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("campaign_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("first_name", sa.String(200), nullable=False, server_default=sa.text("''")),
        sa.Column("last_name", sa.String(200), nullable=False, server_default=sa.text("''")),
        sa.Column("email", sa.String(320), nullable=True),
        sa.Column("email_normalized", sa.String(320), nullable=True),
        sa.Column("company", sa.String(200), nullable=True),
        sa.Column("title", sa.String(200), nullable=True),
        sa.Column("phone", sa.String(64), nullable=True),
        sa.Column("address1", sa.String(300), nullable=False, server_default=sa.text("''")),
        sa.Column("address2", sa.String(300), nullable=True),
        sa.Column("city", sa.String(200), nullable=False, server_default=sa.text("''")),
        sa.Column("region", sa.String(200), nullable=False, server_default=sa.text("''")),
        sa.Column("postal_code", sa.String(32), nullable=False, server_default=sa.text("''")),
        sa.Column("country", sa.String(64), nullable=False, server_default=sa.text("'US'")),
        sa.Column("address_fingerprint", sa.CHAR(64), nullable=False),
        sa.Column("location_fingerprint", sa.CHAR(64), nullable=True),
        sa.Column("ip_hash", sa.CHAR(64), nullable=True),
        sa.Column("user_agent", sa.Text(), nullable=True),
        sa.Column("invite_code", sa.String(64), nullable=True),
        sa.Column("is_test_claim", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("consent_given", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("consent_timestamp", sa.DateTime(timezone=True), nullable=True),
        sa.Column("claim_token", sa.String(64), nullable=True),
        sa.Column("pre_created_by", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("admin_notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("confirmed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("shipped_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("status IN ('pending','confirmed','shipped')", name="ck_claims_status"),
        sa.ForeignKeyConstraint(
            ["campaign_id"],
            ["campaigns.id"],
            name="fk_claims_campaign_id_campaigns",
        ),
        sa.ForeignKeyConstraint(
            ["pre_created_by"],
            ["admin_users.id"],
            name="fk_claims_pre_created_by_admin_users",
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_claims"),
        sa.UniqueConstraint(
            "campaign_id",
            "address_fingerprint",
            name="uq_claims_campaign_address_fingerprint",
        ),
        sa.UniqueConstraint("claim_token", name="uq_claims_claim_token"),
    )
    op.create_index("idx_claims_campaign_status", "claims", ["campaign_id", "status"])
    op.create_index(
        "idx_claims_campaign_ip_created",
        "claims",
        ["campaign_id", "ip_hash", "created_at"],
    )
    op.create_index("idx_claims_campaign_email", "claims", ["campaign_id", "email_normalized"])
    op.create_index(
        "idx_claims_campaign_location",
        "claims",
        ["campaign_id", "location_fingerprint"],
    )
    op.create_index("idx_claims_address_fingerprint", "claims", ["address_fingerprint"])

    op.create_table(
        "email_verifications",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("claim_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("token_hash", sa.CHAR(64), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("used_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(
            ["claim_id"],
            ["claims.id"],
            name="fk_email_verifications_claim_id_claims",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_email_verifications"),
        sa.UniqueConstraint("token_hash", name="uq_email_verifications_token_hash"),
    )
    op.create_index("idx_email_verifications_claim", "email_verifications", ["claim_id"])

    op.create_table(
        "invite_codes",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("campaign_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("code", sa.String(64), nullable=False),
        sa.Column("uses", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("max_uses", sa.Integer(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_by", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("uses >= 0", name="ck_invite_codes_uses_non_negative"),
        sa.CheckConstraint(
            "max_uses IS NULL OR max_uses > 0",
            name="ck_invite_codes_max_uses_positive",
        ),
        sa.ForeignKeyConstraint(
            ["campaign_id"],
            ["campaigns.id"],
            name="fk_invite_codes_campaign_id_campaigns",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["created_by"],
            ["admin_users.id"],
            name="fk_invite_codes_created_by_admin_users",
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_invite_codes"),
        sa.UniqueConstraint("campaign_id", "code", name="uq_invite_codes_campaign_code"),
    )

    op.create_table(
        "admin_gift_codes",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("admin_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("campaign_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("code", sa.String(32), nullable=False),
        sa.Column("label", sa.String(200), nullable=False),
        sa.Column("custom_message", sa.Text(), nullable=True),
        sa.Column("custom_display_name", sa.String(200), nullable=True),
        sa.Column("show_name", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("show_linkedin", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("show_bio", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("show_phone", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("show_email", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["admin_id"],
            ["admin_users.id"],
            name="fk_admin_gift_codes_admin_id_admin_users",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["campaign_id"],
            ["campaigns.id"],
            name="fk_admin_gift_codes_campaign_id_campaigns",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_admin_gift_codes"),
        sa.UniqueConstraint("code", name="uq_admin_gift_codes_code"),
    )
    op.create_index(
        "idx_admin_gift_codes_admin_campaign",
        "admin_gift_codes",
        ["admin_id", "campaign_id"],
    )

    op.create_table(
        "campaign_questions",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("campaign_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("question_text", sa.Text(), nullable=False),
        sa.Column("question_type", sa.String(32), nullable=False),
        sa.Column("is_required", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("options", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "question_type IN ('text','multiple_choice','checkboxes')",
            name="ck_campaign_questions_question_type",
        ),
        sa.ForeignKeyConstraint(
            ["campaign_id"],
            ["campaigns.id"],
            name="fk_campaign_questions_campaign_id_campaigns",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_campaign_questions"),
    )
    op.create_index(
        "idx_campaign_questions_campaign_order",
        "campaign_questions",
        ["campaign_id", "display_order"],
    )

    op.create_table(
        "claim_answers",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("claim_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("question_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("answer_text", sa.Text(), nullable=True),
        sa.Column("answer_option", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["claim_id"],
            ["claims.id"],
            name="fk_claim_answers_claim_id_claims",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["question_id"],
            ["campaign_questions.id"],
            name="fk_claim_answers_question_id_campaign_questions",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_claim_answers"),
    )
    op.create_index("idx_claim_answers_claim", "claim_answers", ["claim_id"])
    op.create_index("idx_claim_answers_question", "claim_answers", ["question_id"])


def downgrade() -> None:
    op.drop_index("idx_claim_answers_question", table_name="claim_answers")
    op.drop_index("idx_claim_answers_claim", table_name="claim_answers")
    op.drop_table("claim_answers")

    op.drop_index("idx_campaign_questions_campaign_order", table_name="campaign_questions")
    op.drop_table("campaign_questions")

    op.drop_index("idx_admin_gift_codes_admin_campaign", table_name="admin_gift_codes")
    op.drop_table("admin_gift_codes")

    op.drop_table("invite_codes")

    op.drop_index("idx_email_verifications_claim", table_name="email_verifications")
    op.drop_table("email_verifications")

    op.drop_index("idx_claims_address_fingerprint", table_name="claims")
    op.drop_index("idx_claims_campaign_location", table_name="claims")
    op.drop_index("idx_claims_campaign_email", table_name="claims")
    op.drop_index("idx_claims_campaign_ip_created", table_name="claims")
    op.drop_index("idx_claims_campaign_status", table_name="claims")
    op.drop_table("claims")

    op.drop_index("uq_campaign_versions_single_draft", table_name="campaign_versions")
    op.drop_table("campaign_versions")

    op.drop_index("idx_campaigns_is_active", table_name="campaigns")
    op.drop_index("idx_campaigns_created_by", table_name="campaigns")
    op.drop_table("campaigns")

    op.drop_index("idx_admin_otp_requests_ip_created", table_name="admin_otp_requests")
    op.drop_index("idx_admin_otp_requests_email_created", table_name="admin_otp_requests")
    op.drop_table("admin_otp_requests")

    op.drop_index("idx_admin_sessions_expires_at", table_name="admin_sessions")
    op.drop_index("idx_admin_sessions_admin_user", table_name="admin_sessions")
    op.drop_table("admin_sessions")

    op.drop_table("admin_users")
