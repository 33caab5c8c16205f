"""initial: identities, store, vouchers, memberships

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19

"""

from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("role", sa.String(length=60), nullable=False, server_default="member"),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("email_confirmed", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("metadata_json", sa.Text(), nullable=False, server_default="{}"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_role", "users", ["role"], unique=False)

    op.create_table(
        "profiles",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False, server_default=""),
        sa.Column("surname", sa.String(length=120), nullable=False, server_default=""),
        sa.Column("telephone", sa.String(length=40), nullable=True),
        sa.Column("birthday", sa.String(length=10), nullable=True),
        sa.Column("street", sa.String(length=200), nullable=True),
        sa.Column("house_number", sa.String(length=20), nullable=True),
        sa.Column("zip", sa.String(length=20), nullable=True),
        sa.Column("city", sa.String(length=120), nullable=True),
        sa.Column("country", sa.String(length=80), nullable=True),
        sa.Column("emergency_contact_name", sa.String(length=200), nullable=True),
        sa.Column("emergency_contact_phone", sa.String(length=40), nullable=True),
        sa.Column("member_category", sa.String(length=40), nullable=True),
        sa.Column("custom_fields_json", sa.Text(), nullable=False, server_default="{}"),
        sa.Column("joined_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_profiles_email", "profiles", ["email"])

    op.create_table(
        "operation_days",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("operation_date", sa.Date(), nullable=False),
        sa.Column("notes", sa.String(length=500), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_operation_days_operation_date", "operation_days", ["operation_date"])

    op.create_table(
        "booking_timeframes",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("operation_day_id", sa.String(length=36), nullable=False),
        sa.Column("start_time", sa.String(length=5), nullable=False),
        sa.Column("end_time", sa.String(length=5), nullable=False),
        sa.Column("max_bookings", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("current_bookings", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("overbooking_allowed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_booking_timeframes_operation_day_id", "booking_timeframes", ["operation_day_id"])

    op.create_table(
        "voucher_types",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=True),
        sa.Column("price_eur", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("validity_months", sa.Integer(), nullable=True),
        sa.Column("code_prefix", sa.String(length=10), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "ticket_types",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("price_eur", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("code_prefix", sa.String(length=10), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "ticket_bookings",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("booking_code", sa.String(length=40), nullable=False),
        sa.Column("operation_day_id", sa.String(length=36), nullable=False),
        sa.Column("timeframe_id", sa.String(length=36), nullable=False),
        sa.Column("ticket_type_id", sa.String(length=36), nullable=True),
        sa.Column("voucher_type_id", sa.String(length=36), nullable=True),
        sa.Column("purchaser_name", sa.String(length=200), nullable=False),
        sa.Column("purchaser_email", sa.String(length=320), nullable=False),
        sa.Column("purchaser_phone", sa.String(length=40), nullable=True),
        sa.Column("price_paid_eur", sa.Numeric(10, 2), nullable=False),
        sa.Column("payment_intent_id", sa.String(length=120), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "(ticket_type_id IS NULL) <> (voucher_type_id IS NULL)", name="ck_ticket_bookings_one_product"
        ),
    )
    op.create_index("ix_ticket_bookings_booking_code", "ticket_bookings", ["booking_code"], unique=True)
    op.create_index("ix_ticket_bookings_operation_day_id", "ticket_bookings", ["operation_day_id"])
    op.create_index("ix_ticket_bookings_timeframe_id", "ticket_bookings", ["timeframe_id"])
    op.create_index("ix_ticket_bookings_purchaser_email", "ticket_bookings", ["purchaser_email"])

    op.create_table(
        "vouchers",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("voucher_code", sa.String(length=40), nullable=False),
        sa.Column("voucher_type_id", sa.String(length=36), nullable=False),
        sa.Column("purchaser_name", sa.String(length=200), nullable=False),
        sa.Column("purchaser_email", sa.String(length=320), nullable=False),
        sa.Column("purchaser_phone", sa.String(length=40), nullable=True),
        sa.Column("price_paid_eur", sa.Numeric(10, 2), nullable=False),
        sa.Column("payment_intent_id", sa.String(length=120), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="active"),
        sa.Column("valid_from", sa.DateTime(timezone=True), nullable=False),
        sa.Column("valid_until", sa.DateTime(timezone=True), nullable=True),
        sa.Column("notes", sa.String(length=500), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_vouchers_voucher_code", "vouchers", ["voucher_code"], unique=True)
    op.create_index("ix_vouchers_voucher_type_id", "vouchers", ["voucher_type_id"])
    op.create_index("ix_vouchers_purchaser_email", "vouchers", ["purchaser_email"])

    op.create_table(
        "membership_types",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("duration_value", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("duration_unit", sa.String(length=10), nullable=False, server_default="years"),
        sa.Column("member_number_prefix", sa.String(length=10), nullable=False),
        sa.Column("member_category", sa.String(length=40), nullable=True),
        sa.Column("auto_renew", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("price_eur", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "user_memberships",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("membership_type_id", sa.String(length=36), nullable=False),
        sa.Column("member_number", sa.String(length=30), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="active"),
        sa.Column("payment_status", sa.String(length=20), nullable=False, server_default="unpaid"),
        sa.Column("auto_renew", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("notes", sa.String(length=500), nullable=True),
        sa.Column("created_by", sa.String(length=36), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_user_memberships_user_id", "user_memberships", ["user_id"])
    op.create_index("ix_user_memberships_membership_type_id", "user_memberships", ["membership_type_id"])
    op.create_index("ix_user_memberships_member_number", "user_memberships", ["member_number"], unique=True)

    op.create_table(
        "payment_status_history",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("membership_id", sa.String(length=36), nullable=False),
        sa.Column("old_status", sa.String(length=20), nullable=True),
        sa.Column("new_status", sa.String(length=20), nullable=False),
        sa.Column("changed_by", sa.String(length=36), nullable=True),
        sa.Column("notes", sa.String(length=500), nullable=True),
        sa.Column("changed_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_payment_status_history_membership_id", "payment_status_history", ["membership_id"])

    op.create_table(
        "api_keys",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False, server_default=""),
        sa.Column("key_hash", sa.String(length=255), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("last_used_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_api_keys_key_hash", "api_keys", ["key_hash"], unique=True)

    op.create_table(
        "system_settings",
        sa.Column("key", sa.String(length=80), primary_key=True),
        sa.Column("value_json", sa.Text(), nullable=True),
        sa.Column("updated_by", sa.String(length=36), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )

def downgrade() -> None:
    op.drop_table("system_settings")
    op.drop_table("api_keys")
    op.drop_table("payment_status_history")
    op.drop_table("user_memberships")
    op.drop_table("membership_types")
    op.drop_table("vouchers")
    op.drop_table("ticket_bookings")
    op.drop_table("ticket_types")
    op.drop_table("voucher_types")
    op.drop_table("booking_timeframes")
    op.drop_table("operation_days")
    op.drop_table("profiles")
    op.drop_table("users")
