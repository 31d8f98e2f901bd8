"""System account identifiers (rows in accounts, seeded by migration 008)."""

# Escrowed stakes of every market; credited by entries, debited by claims.
PROTOCOL_CUSTODY_ID = "PROTOCOL_CUSTODY"

# Accumulated protocol fees; credited by claims, debited by owner withdrawals.
PROTOCOL_TREASURY_ID = "PROTOCOL_TREASURY"

SYSTEM_ACCOUNT_IDS = (PROTOCOL_CUSTODY_ID, PROTOCOL_TREASURY_ID)
