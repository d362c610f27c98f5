"""Tests for LockFile entry management, serialization and disk I/O.

Validates the camelCase on-disk schema, deterministic ordering, atomic
writes, read-or-empty semantics and lock file diffs.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

import pytest

from depsmith import LOCKFILE_NAME, __version__
from depsmith.core.declaration import Scope
from depsmith.core.lockfile import LockedDependency, LockFile
from depsmith.exceptions import LockfileError, LockWriteError

from tests.helpers import make_locked


# ===========================================================================
# Serialization
# ===========================================================================


class TestSerialization:
    """Validate the on-disk document shape."""

    def test_top_level_keys(self, populated_lock: LockFile) -> None:
        data = populated_lock.to_dict()
        assert data["lockfileVersion"] == 1
        assert data["toolVersion"] == __version__
        assert "generatedAt" in data
        assert set(data["dependencies"]) == {"alpha", "zeta"}
        assert set(data["devDependencies"]) == {"testbox"}

    def test_entries_use_camel_case_and_omit_nones(self) -> None:
        entry = make_locked(git_commit="abc", sub_path="src").to_dict()
        assert entry["installPath"] == "dependencies/fw1"
        assert entry["gitCommit"] == "abc"
        assert entry["subPath"] == "src"
        assert entry["type"] == "library"
        assert "id" not in entry
        assert "integrity" not in entry

    def test_entries_sorted_by_name(self, populated_lock: LockFile) -> None:
        data = json.loads(populated_lock.to_json())
        assert list(data["dependencies"]) == ["alpha", "zeta"]

    def test_round_trip_preserves_entries(self, populated_lock: LockFile) -> None:
        restored = LockFile.from_json(populated_lock.to_json())
        assert restored.dependencies == populated_lock.dependencies
        assert restored.dev_dependencies == populated_lock.dev_dependencies
        assert restored.generated_at == populated_lock.generated_at

    def test_from_dict_tolerates_missing_optional_fields(self) -> None:
        lock = LockFile.from_dict({
            "lockfileVersion": 1,
            "dependencies": {"x": {"version": "1", "source": "file:x"}},
        })
        entry = lock.get(Scope.PRODUCTION, "x")
        assert entry is not None
        assert entry.install_path is None
        assert entry.kind == "library"
        assert lock.dev_dependencies == {}

    def test_invalid_json_raises(self) -> None:
        with pytest.raises(LockfileError):
            LockFile.from_json("{broken")

    def test_wrong_shape_raises(self) -> None:
        with pytest.raises(LockfileError):
            LockFile.from_dict({"dependencies": ["x"]})


# ===========================================================================
# Disk I/O
# ===========================================================================


class TestReadWrite:
    """Validate atomic writes and read-or-empty semantics."""

    def test_write_then_read(self, populated_lock: LockFile, project_dir: Path) -> None:
        path = populated_lock.write(project_dir)
        assert path == project_dir / LOCKFILE_NAME
        assert LockFile.read(project_dir).dependencies == populated_lock.dependencies

    def test_write_leaves_no_temp_files(self, populated_lock: LockFile, project_dir: Path) -> None:
        populated_lock.write(project_dir)
        assert sorted(p.name for p in project_dir.iterdir()) == [LOCKFILE_NAME]

    def test_read_or_empty_missing(self, project_dir: Path) -> None:
        assert LockFile.read_or_empty(project_dir).is_empty()

    def test_read_or_empty_unreadable_logs_warning(
        self, project_dir: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        (project_dir / LOCKFILE_NAME).write_text("not json")
        with caplog.at_level(logging.WARNING):
            lock = LockFile.read_or_empty(project_dir)
        assert lock.is_empty()
        assert "empty lock" in caplog.text

    @pytest.mark.skipif(
        not hasattr(os, "geteuid") or os.geteuid() == 0,
        reason="needs a non-root POSIX user for permission checks",
    )
    def test_write_failure_raises_lock_write_error(
        self, populated_lock: LockFile, project_dir: Path
    ) -> None:
        project_dir.chmod(0o500)
        try:
            with pytest.raises(LockWriteError):
                populated_lock.write(project_dir)
        finally:
            project_dir.chmod(0o700)


# ===========================================================================
# Diffing
# ===========================================================================


class TestDiff:
    def test_added_removed_changed(self, populated_lock: LockFile) -> None:
        other = LockFile()
        for name, entry in populated_lock.dependencies.items():
            other.set(Scope.PRODUCTION, entry)
        other.set(Scope.PRODUCTION, make_locked("alpha", version="v5.0.0"))
        other.set(Scope.PRODUCTION, make_locked("beta"))

        diff = populated_lock.diff(other)
        assert diff["added"] == ["dependencies/beta"]
        assert diff["removed"] == ["devDependencies/testbox"]
        assert diff["changed"] == [{
            "name": "dependencies/alpha",
            "field": "version",
            "old": "v4.3.0",
            "new": "v5.0.0",
        }]

    def test_identical_locks_have_no_diff(self, populated_lock: LockFile) -> None:
        diff = populated_lock.diff(LockFile.from_json(populated_lock.to_json()))
        assert diff == {"added": [], "removed": [], "changed": []}


def test_len_counts_both_scopes(populated_lock: LockFile) -> None:
    assert len(populated_lock) == 3
    assert isinstance(populated_lock.get(Scope.PRODUCTION, "alpha"), LockedDependency)
