"""Tests for the MCP server, health tool and CLI."""

import sys
from pathlib import Path

import pytest

from gbfs_map import __version__
from gbfs_map.server import health, main
from gbfs_map.tools import map_tools


@pytest.fixture(autouse=True)
def reset_tools():
    map_tools.reset_service()
    yield
    map_tools.reset_service()


def test_health_returns_ok_status():
    """Health check should return status ok."""
    response = health()
    assert response.status == "ok"


def test_health_returns_version():
    """Health check should return the current version."""
    response = health()
    assert response.version == __version__


def test_health_returns_timestamp():
    """Health check should return a valid ISO timestamp."""
    response = health()
    assert response.timestamp is not None
    assert "T" in response.timestamp


def test_health_reports_no_system_loaded():
    """Health is reported before any load."""
    assert health().system_loaded is False


def test_summary_command(sample_gbfs_dir: Path, monkeypatch, capsys):
    """`gbfs-map summary <dir>` prints the load summary."""
    monkeypatch.setattr(sys, "argv", ["gbfs-map", "summary", str(sample_gbfs_dir)])

    main()

    out = capsys.readouterr().out
    assert "Test Bikes" in out
    assert "operator: Test Operator" in out
    assert "Loaded 7 of 7 feeds" in out
    assert "stations: 2 (1 virtual)" in out
    assert "geofencing zones: 2" in out
    assert "no-ride: 1" in out


def test_summary_command_reports_load_errors(tmp_path: Path, monkeypatch, capsys):
    """A bad source exits with status 1."""
    monkeypatch.setattr(sys, "argv", ["gbfs-map", "summary", str(tmp_path / "missing")])

    with pytest.raises(SystemExit) as exc_info:
        main()

    assert exc_info.value.code == 1
    assert "Error: No such file or directory" in capsys.readouterr().out
