"""Authorization gate: stateless role checks consulted before privileged transitions.

One identity per role: the owner comes from deployment settings, the oracle
from the protocol_config row. No hierarchy, no delegation.
"""

import logging

from config.settings import settings
from src.pm_common.errors import UnauthorizedError
from src.pm_governance.domain.models import ProtocolConfig

logger = logging.getLogger(__name__)


def require_owner(caller_id: str, owner_id: str | None = None) -> None:
    expected = owner_id if owner_id is not None else settings.PROTOCOL_OWNER_ID
    if caller_id != expected:
        logger.warning("Rejected owner-only call from %s", caller_id)
        raise UnauthorizedError("owner")


def require_oracle(caller_id: str, config: ProtocolConfig) -> None:
    if caller_id != config.oracle_id:
        logger.warning("Rejected oracle-only call from %s", caller_id)
        raise UnauthorizedError("oracle")
