"""Shared fixtures for lock file tests."""

from __future__ import annotations

import pytest

from depsmith.core.declaration import Scope
from depsmith.core.lockfile import LockFile
from tests.helpers import make_locked


@pytest.fixture
def populated_lock() -> LockFile:
    lock = LockFile()
    lock.set(Scope.PRODUCTION, make_locked("zeta", source="file:../zeta",
                                           install_path="dependencies/zeta"))
    lock.set(Scope.PRODUCTION, make_locked("alpha", git_commit="abc123",
                                           resolved="https://github.com/org/fw1.git#v4.3.0"))
    lock.set(Scope.DEVELOPMENT, make_locked("testbox", version="5.0.0",
                                            source="file:../testbox",
                                            install_path="dependencies/testbox"))
    return lock
