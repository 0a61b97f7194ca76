import ast
import sys

import pytest

from app.jobs import run_next_trains, run_refresh
from conftest import write_tables


@pytest.fixture
def local_config(monkeypatch, settings, weekday_tables):
    write_tables(settings.local_dir, weekday_tables)
    monkeypatch.setattr(run_refresh, "load_config", lambda: settings)
    monkeypatch.setattr(run_next_trains, "load_config", lambda: settings)
    return settings


def last_dict(output: str) -> dict:
    return ast.literal_eval(output.strip().splitlines()[-1])


def test_refresh_reports_local_dataset(monkeypatch, capsys, local_config):
    monkeypatch.setattr(sys, "argv", ["run_refresh", "--local-only"])
    run_refresh.main()

    status = last_dict(capsys.readouterr().out)
    assert status["loaded"] is True
    assert status["source"] == "local"
    assert status["trips"] == 1
    assert status["stale"] is False


def test_refresh_exits_nonzero_without_data(monkeypatch, capsys, settings):
    monkeypatch.setattr(run_refresh, "load_config", lambda: settings)
    monkeypatch.setattr(sys, "argv", ["run_refresh"])

    with pytest.raises(SystemExit) as exc:
        run_refresh.main()
    assert exc.value.code == 1
    assert last_dict(capsys.readouterr().out)["loaded"] is False


def test_next_trains_prints_board(monkeypatch, capsys, local_config):
    monkeypatch.setattr(
        sys,
        "argv",
        ["run_next_trains", "--origin", "SF", "--destination", "SJ", "--at", "2026-10-20T07:00:00-07:00", "--no-realtime"],
    )
    run_next_trains.main()

    lines = capsys.readouterr().out.strip().splitlines()
    assert "101" in lines[0]
    assert "08:00 -> 08:45" in lines[0]
    summary = ast.literal_eval(lines[-1])
    assert summary["count"] == 1
    assert summary["dataset_source"] == "local"
    assert summary["realtime_sources"] == []
