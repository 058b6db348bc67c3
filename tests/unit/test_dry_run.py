"""Tests for the mutation guard."""

import logging
from unittest.mock import MagicMock

from docker_updater.utils.dry_run import MutationGuard


def test_executes_when_not_dry_run():
    """Test operations run and their result is returned."""
    func = MagicMock(return_value="done")
    guard = MutationGuard(dry_run=False)

    assert guard.execute("docker rm web", func, "web", force=True) == "done"
    func.assert_called_once_with("web", force=True)
    assert guard.recorded == []


def test_dry_run_records_instead_of_executing(caplog):
    """Test dry-run logs and records the action without calling it."""
    func = MagicMock()
    guard = MutationGuard(dry_run=True)

    with caplog.at_level(logging.INFO):
        assert guard.execute("docker rm web", func, "web") is None

    func.assert_not_called()
    assert guard.recorded == ["docker rm web"]
    assert "[DRY-RUN] docker rm web" in caplog.text


def test_errors_propagate():
    """Test the guard does not swallow operation errors."""
    guard = MutationGuard()
    func = MagicMock(side_effect=RuntimeError("boom"))

    try:
        guard.execute("op", func)
    except RuntimeError as e:
        assert str(e) == "boom"
    else:
        raise AssertionError("RuntimeError not raised")
