"""Tests for the Result outcome type."""

import pytest

from medvault.core.result import Result
from medvault.errors import NotFoundError, VaultLockedError


class TestResult:
    def test_success_unwraps_value(self):
        result = Result.success([1, 2])
        assert result.ok
        assert result.error is None
        assert result.unwrap() == [1, 2]

    def test_success_without_value(self):
        result: Result[None] = Result.success(None)
        assert result.ok
        assert result.unwrap() is None

    def test_failure_raises_carried_error(self):
        error = VaultLockedError()
        result: Result[int] = Result.failure(error)
        assert not result.ok
        with pytest.raises(VaultLockedError) as exc_info:
            result.unwrap()
        assert exc_info.value is error

    def test_error_kinds_are_stable(self):
        assert VaultLockedError().kind == "vault_locked"
        assert NotFoundError().kind == "not_found"
        assert str(VaultLockedError()) == "Vault is locked, verify a one-time code first"
