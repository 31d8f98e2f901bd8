"""005: create markets table

Revision ID: 005
Revises: 004
Create Date: 2026-09-02
"""
from typing import Sequence, Union

from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # id is allocated from protocol_config.next_market_id, never from a sequence.
    op.execute("""
        CREATE TABLE markets (
            id                  BIGINT      PRIMARY KEY,
            start_price         BIGINT      NOT NULL,
            end_price           BIGINT      NOT NULL DEFAULT 0,
            total_up_stake      BIGINT      NOT NULL DEFAULT 0,
            total_down_stake    BIGINT      NOT NULL DEFAULT 0,
            start_block         BIGINT      NOT NULL,
            end_block           BIGINT      NOT NULL,
            resolved            BOOLEAN     NOT NULL DEFAULT FALSE,
            fee_percentage      SMALLINT    NOT NULL,
            creator_id          VARCHAR(64) NOT NULL,
            resolved_by         VARCHAR(64),
            created_at          TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            resolved_at         TIMESTAMPTZ,
            CONSTRAINT ck_markets_id_gte_0          CHECK (id >= 0),
            CONSTRAINT ck_markets_start_price_gt_0  CHECK (start_price > 0),
            CONSTRAINT ck_markets_end_price_gte_0   CHECK (end_price >= 0),
            CONSTRAINT ck_markets_up_stake_gte_0    CHECK (total_up_stake >= 0),
            CONSTRAINT ck_markets_down_stake_gte_0  CHECK (total_down_stake >= 0),
            CONSTRAINT ck_markets_start_block_gte_0 CHECK (start_block >= 0),
            CONSTRAINT ck_markets_window            CHECK (end_block > start_block),
            CONSTRAINT ck_markets_fee_range         CHECK (fee_percentage BETWEEN 0 AND 100),
            CONSTRAINT ck_markets_resolved_price    CHECK (resolved = (end_price > 0))
        );
    """)
    op.execute("CREATE INDEX idx_markets_window ON markets (resolved, start_block, end_block);")
    op.execute("""
        CREATE TRIGGER trg_markets_updated_at
            BEFORE UPDATE ON markets
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE markets IS 'Binary UP/DOWN markets over a block window';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS markets CASCADE;")
