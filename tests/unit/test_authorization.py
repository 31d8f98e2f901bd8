"""Tests for the owner/oracle role checks."""

import pytest

from src.pm_common.errors import UnauthorizedError
from src.pm_governance.domain.authorization import require_oracle, require_owner
from tests.factories import ORACLE, OWNER, make_config


class TestRequireOwner:
    def test_default_owner_from_settings(self) -> None:
        require_owner(OWNER)

    def test_explicit_owner(self) -> None:
        require_owner("deployer", owner_id="deployer")

    def test_other_caller_rejected(self) -> None:
        with pytest.raises(UnauthorizedError, match="owner"):
            require_owner(ORACLE)


class TestRequireOracle:
    def test_current_oracle(self) -> None:
        require_oracle(ORACLE, make_config())

    def test_follows_config_changes(self) -> None:
        config = make_config(oracle_id="new-oracle")
        require_oracle("new-oracle", config)
        with pytest.raises(UnauthorizedError, match="oracle"):
            require_oracle(ORACLE, config)

    def test_owner_has_no_oracle_rights(self) -> None:
        with pytest.raises(UnauthorizedError):
            require_oracle(OWNER, make_config())
