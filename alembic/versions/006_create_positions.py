"""006: create positions table

Revision ID: 006
Revises: 005
Create Date: 2026-09-02
"""
from typing import Sequence, Union

from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE positions (
            market_id   BIGINT      NOT NULL REFERENCES markets (id),
            user_id     VARCHAR(64) NOT NULL,
            side        VARCHAR(4)  NOT NULL,
            stake       BIGINT      NOT NULL,
            claimed     BOOLEAN     NOT NULL DEFAULT FALSE,
            payout      BIGINT,
            fee         BIGINT,
            created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            claimed_at  TIMESTAMPTZ,
            CONSTRAINT pk_positions              PRIMARY KEY (market_id, user_id),
            CONSTRAINT ck_positions_side         CHECK (side IN ('UP', 'DOWN')),
            CONSTRAINT ck_positions_stake_gt_0   CHECK (stake > 0),
            CONSTRAINT ck_positions_payout_gte_0 CHECK (payout IS NULL OR payout >= 0),
            CONSTRAINT ck_positions_fee_gte_0    CHECK (fee IS NULL OR fee >= 0),
            CONSTRAINT ck_positions_claim_fields CHECK (
                claimed = (claimed_at IS NOT NULL)
            )
        );
    """)
    op.execute("CREATE INDEX idx_positions_user ON positions (user_id);")
    op.execute("""
        CREATE TRIGGER trg_positions_updated_at
            BEFORE UPDATE ON positions
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE positions IS 'One row per (market, user); a single side per row';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS positions CASCADE;")
