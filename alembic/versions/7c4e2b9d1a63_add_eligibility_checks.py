# This project was developed with assistance from AI tools.
"""add eligibility checks

Revision ID: 7c4e2b9d1a63
Revises: 3a1f9c2e7b40
Create Date: 2026-10-19 10:02:11.574310

"""

import sqlalchemy as sa
from alembic import op

revision = "7c4e2b9d1a63"
down_revision = "3a1f9c2e7b40"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "eligibility_checks",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("user_id", sa.String(255), nullable=True),
        sa.Column("loan_id", sa.Integer(), nullable=True),
        sa.Column("pan", sa.String(10), nullable=False),
        sa.Column("date_of_birth", sa.Date(), nullable=False),
        sa.Column("gender", sa.String(6), nullable=False),
        sa.Column("personal_email", sa.String(255), nullable=False),
        sa.Column("employment_type", sa.String(13), nullable=False),
        sa.Column("company_name", sa.String(200), nullable=True),
        sa.Column("next_salary_date", sa.Date(), nullable=True),
        sa.Column("net_monthly_income", sa.Numeric(14, 2), nullable=False),
        sa.Column("pin_code", sa.String(6), nullable=False),
        sa.Column("state", sa.String(100), nullable=True),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column("status", sa.String(7), nullable=False, server_default="PENDING"),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False,
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False,
        ),
        sa.ForeignKeyConstraint(["loan_id"], ["loans.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_eligibility_checks_email", "eligibility_checks", ["email"])
    op.create_index("ix_eligibility_checks_loan_id", "eligibility_checks", ["loan_id"])


def downgrade() -> None:
    op.drop_index("ix_eligibility_checks_loan_id", table_name="eligibility_checks")
    op.drop_index("ix_eligibility_checks_email", table_name="eligibility_checks")
    op.drop_table("eligibility_checks")
