"""007: create protocol_config table and seed it from settings

Revision ID: 007
Revises: 006
Create Date: 2026-09-02
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

from config.settings import settings

revision: str = "007"
down_revision: Union[str, None] = "006"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE protocol_config (
            id              SMALLINT    PRIMARY KEY DEFAULT 1,
            oracle_id       VARCHAR(64) NOT NULL,
            minimum_stake   BIGINT      NOT NULL,
            fee_percentage  SMALLINT    NOT NULL,
            next_market_id  BIGINT      NOT NULL DEFAULT 0,
            updated_at      TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_protocol_config_singleton   CHECK (id = 1),
            CONSTRAINT ck_protocol_config_min_stake   CHECK (minimum_stake > 0),
            CONSTRAINT ck_protocol_config_fee_range   CHECK (fee_percentage BETWEEN 0 AND 100),
            CONSTRAINT ck_protocol_config_next_id_gte CHECK (next_market_id >= 0)
        );
    """)
    op.execute(
        sa.text("""
            INSERT INTO protocol_config (id, oracle_id, minimum_stake, fee_percentage)
            VALUES (1, :oracle_id, :minimum_stake, :fee_percentage)
        """).bindparams(
            oracle_id=settings.INITIAL_ORACLE_ID,
            minimum_stake=settings.DEFAULT_MINIMUM_STAKE,
            fee_percentage=settings.DEFAULT_FEE_PERCENTAGE,
        )
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS protocol_config CASCADE;")
