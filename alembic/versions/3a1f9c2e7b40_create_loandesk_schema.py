# This project was developed with assistance from AI tools.
"""create loandesk schema

Revision ID: 3a1f9c2e7b40
Revises:
Create Date: 2026-10-12 09:15:42.318204

"""

import sqlalchemy as sa
from alembic import op

revision = "3a1f9c2e7b40"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps(updated: bool = True) -> list[sa.Column]:
    cols = [
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False,
        ),
    ]
    if updated:
        cols.append(
            sa.Column(
                "updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False,
            )
        )
    return cols


def upgrade() -> None:
    op.create_table(
        "loan_categories",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("slug", sa.String(120), nullable=False),
        sa.Column("description", sa.String(500), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
        sa.UniqueConstraint("slug"),
    )
    op.create_index("ix_loan_categories_slug", "loan_categories", ["slug"])

    op.create_table(
        "loans",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("slug", sa.String(220), nullable=False),
        sa.Column("loan_type", sa.String(9), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("category_id", sa.Integer(), nullable=True),
        sa.Column("interest_rate_min", sa.Numeric(5, 2), nullable=False),
        sa.Column("interest_rate_max", sa.Numeric(5, 2), nullable=False),
        sa.Column("interest_rate_default", sa.Numeric(5, 2), nullable=True),
        sa.Column("min_loan_amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("max_loan_amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("min_tenure", sa.Integer(), nullable=False),
        sa.Column("max_tenure", sa.Integer(), nullable=False),
        sa.Column("features", sa.JSON(), nullable=False),
        sa.Column("benefits", sa.JSON(), nullable=False),
        sa.Column("eligibility_criteria", sa.JSON(), nullable=True),
        sa.Column("required_documents", sa.JSON(), nullable=False),
        sa.Column("repayment_options", sa.JSON(), nullable=False),
        sa.Column("image", sa.String(500), nullable=False, server_default=""),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.ForeignKeyConstraint(["category_id"], ["loan_categories.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
        sa.UniqueConstraint("slug"),
        sa.CheckConstraint("interest_rate_min <= interest_rate_max", name="ck_loans_rate_bounds"),
        sa.CheckConstraint(
            "interest_rate_default IS NULL OR "
            "(interest_rate_min <= interest_rate_default AND interest_rate_default <= interest_rate_max)",
            name="ck_loans_rate_default",
        ),
        sa.CheckConstraint("min_loan_amount <= max_loan_amount", name="ck_loans_amount_bounds"),
        sa.CheckConstraint("min_tenure <= max_tenure", name="ck_loans_tenure_bounds"),
    )
    op.create_index("ix_loans_slug", "loans", ["slug"])
    op.create_index("ix_loans_category_id", "loans", ["category_id"])

    op.create_table(
        "form_fields",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("category_id", sa.Integer(), nullable=True),
        sa.Column("loan_id", sa.Integer(), nullable=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("label", sa.String(200), nullable=False, server_default=""),
        sa.Column("kind", sa.String(8), nullable=False),
        sa.Column("options", sa.JSON(), nullable=False),
        sa.Column("required", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("placeholder", sa.String(200), nullable=True),
        sa.Column("width", sa.String(7), nullable=False),
        sa.Column("section", sa.String(50), nullable=False, server_default="additional"),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.ForeignKeyConstraint(["category_id"], ["loan_categories.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["loan_id"], ["loans.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("category_id", "name", name="uq_form_fields_category_name"),
        sa.UniqueConstraint("loan_id", "name", name="uq_form_fields_loan_name"),
        sa.CheckConstraint(
            "(category_id IS NULL AND loan_id IS NOT NULL) OR "
            "(category_id IS NOT NULL AND loan_id IS NULL)",
            name="ck_form_fields_single_scope",
        ),
    )
    op.create_index("ix_form_fields_category_id", "form_fields", ["category_id"])
    op.create_index("ix_form_fields_loan_id", "form_fields", ["loan_id"])

    op.create_table(
        "applications",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("application_number", sa.String(32), nullable=False),
        sa.Column("user_id", sa.String(255), nullable=False),
        sa.Column("user_email", sa.String(255), nullable=True),
        sa.Column("loan_id", sa.Integer(), nullable=False),
        sa.Column("loan_type", sa.String(9), nullable=False),
        sa.Column("personal_info", sa.JSON(), nullable=False),
        sa.Column("address", sa.JSON(), nullable=False),
        sa.Column("employment_info", sa.JSON(), nullable=False),
        sa.Column("loan_amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("tenure_months", sa.Integer(), nullable=False),
        sa.Column("interest_rate", sa.Numeric(5, 2), nullable=False),
        sa.Column("emi", sa.Integer(), nullable=False),
        sa.Column("loan_purpose", sa.String(255), nullable=True),
        sa.Column("dynamic_fields", sa.JSON(), nullable=False),
        sa.Column("status", sa.String(17), nullable=False, server_default="SUBMITTED"),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("approved_by", sa.String(255), nullable=True),
        sa.Column("rejected_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rejected_by", sa.String(255), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["loan_id"], ["loans.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("application_number"),
    )
    op.create_index("ix_applications_application_number", "applications", ["application_number"])
    op.create_index("ix_applications_user_id", "applications", ["user_id"])
    op.create_index("ix_applications_loan_id", "applications", ["loan_id"])
    op.create_index("ix_applications_status", "applications", ["status"])

    op.create_table(
        "application_documents",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("application_id", sa.Integer(), nullable=False),
        sa.Column("doc_type", sa.String(100), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("url", sa.String(500), nullable=False),
        sa.Column("content_type", sa.String(100), nullable=True),
        sa.Column("size_bytes", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(8), nullable=False, server_default="PENDING"),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(["application_id"], ["applications.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_application_documents_application_id", "application_documents", ["application_id"],
    )

    op.create_table(
        "otp_challenges",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(32), nullable=True),
        sa.Column("purpose", sa.String(12), nullable=False),
        sa.Column("code_hash", sa.String(64), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("consumed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(updated=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_otp_challenges_email", "otp_challenges", ["email"])
    op.create_index("ix_otp_challenges_phone", "otp_challenges", ["phone"])


def downgrade() -> None:
    op.drop_table("otp_challenges")
    op.drop_table("application_documents")
    op.drop_table("applications")
    op.drop_table("form_fields")
    op.drop_table("loans")
    op.drop_table("loan_categories")
