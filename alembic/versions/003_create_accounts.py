"""003: create accounts table

Revision ID: 003
Revises: 002
Create Date: 2026-09-02
"""
from typing import Sequence, Union

from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Keyed by holder: a users.id in text form, or a system account name.
    # No FK to users: PROTOCOL_CUSTODY and PROTOCOL_TREASURY have no user row.
    op.execute("""
        CREATE TABLE accounts (
            user_id             VARCHAR(64) PRIMARY KEY,
            available_balance   BIGINT      NOT NULL DEFAULT 0,
            created_at          TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_accounts_balance_non_negative CHECK (available_balance >= 0)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_accounts_updated_at
            BEFORE UPDATE ON accounts
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS accounts CASCADE;")
