"""008: seed protocol users and system accounts

The owner and initial oracle get user rows (so they can hold tokens and
receive withdrawn fees) with a placeholder hash no password matches.
PROTOCOL_CUSTODY and PROTOCOL_TREASURY are balance-only accounts.

Revision ID: 008
Revises: 007
Create Date: 2026-09-02
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

from config.settings import settings

revision: str = "008"
down_revision: Union[str, None] = "007"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_NO_LOGIN_HASH = "$2b$12$PROTOCOL.ROLE.ACCOUNT.NO.LOGIN.PLACEHOLDER.HASH.000"
_SYSTEM_ACCOUNTS = ("PROTOCOL_CUSTODY", "PROTOCOL_TREASURY")


def upgrade() -> None:
    for user_id, username in (
        (settings.PROTOCOL_OWNER_ID, "protocol_owner"),
        (settings.INITIAL_ORACLE_ID, "protocol_oracle"),
    ):
        op.execute(
            sa.text("""
                INSERT INTO users (id, username, email, password_hash, is_active)
                VALUES (CAST(:id AS UUID), :username, :email, :password_hash, TRUE)
                ON CONFLICT (id) DO NOTHING
            """).bindparams(
                id=user_id,
                username=username,
                email=f"{username}@system.internal",
                password_hash=_NO_LOGIN_HASH,
            )
        )
        op.execute(
            sa.text("""
                INSERT INTO accounts (user_id) VALUES (:user_id)
                ON CONFLICT (user_id) DO NOTHING
            """).bindparams(user_id=user_id)
        )

    for account_id in _SYSTEM_ACCOUNTS:
        op.execute(
            sa.text("""
                INSERT INTO accounts (user_id) VALUES (:user_id)
            """).bindparams(user_id=account_id)
        )


def downgrade() -> None:
    op.execute("DELETE FROM accounts WHERE user_id IN ('PROTOCOL_CUSTODY', 'PROTOCOL_TREASURY');")
    for user_id in (settings.PROTOCOL_OWNER_ID, settings.INITIAL_ORACLE_ID):
        op.execute(sa.text("DELETE FROM accounts WHERE user_id = :id").bindparams(id=user_id))
        op.execute(sa.text("DELETE FROM users WHERE id = CAST(:id AS UUID)").bindparams(id=user_id))
