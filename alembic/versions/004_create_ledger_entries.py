"""004: create ledger_entries table

Revision ID: 004
Revises: 003
Create Date: 2026-09-02
"""
from typing import Sequence, Union

from alembic import op

from src.pm_common.enums import LedgerEntryType

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_ENTRY_TYPES = ", ".join(f"'{t.value}'" for t in LedgerEntryType)


def upgrade() -> None:
    # One row per posting; a transfer is two rows sharing a reference.
    op.execute(f"""
        CREATE TABLE ledger_entries (
            id              BIGSERIAL       PRIMARY KEY,
            user_id         VARCHAR(64)     NOT NULL REFERENCES accounts (user_id),
            entry_type      VARCHAR(30)     NOT NULL,
            amount          BIGINT          NOT NULL,
            balance_after   BIGINT          NOT NULL,
            reference_type  VARCHAR(16)     NOT NULL,
            reference_id    VARCHAR(64),
            description     VARCHAR(500),
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_ledger_entry_type     CHECK (entry_type IN ({_ENTRY_TYPES})),
            CONSTRAINT ck_ledger_reference_type CHECK (
                reference_type IN ('FUNDING', 'MARKET', 'TREASURY')
            ),
            CONSTRAINT ck_ledger_amount_nonzero CHECK (amount <> 0),
            CONSTRAINT ck_ledger_balance_after  CHECK (balance_after >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_ledger_user_recent ON ledger_entries (user_id, id DESC);")
    op.execute("""
        CREATE INDEX idx_ledger_market
        ON ledger_entries (reference_id)
        WHERE reference_type = 'MARKET';
    """)
    op.execute("""
        CREATE TRIGGER trg_ledger_entries_append_only
            BEFORE UPDATE OR DELETE ON ledger_entries
            FOR EACH ROW EXECUTE FUNCTION fn_reject_modification();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS ledger_entries CASCADE;")
