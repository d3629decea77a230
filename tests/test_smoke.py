from __future__ import annotations

import itertools
import logging

import app_cli.run_test as run_test
import tools.validate_bank as validate_bank
from sjt_core.history import MemoryStore
from sjt_core.smoke import run_smoke_session


def test_smoke_session_logs_history_stats(caplog):
    with caplog.at_level(logging.INFO):
        run_smoke_session(runs=3, noise=1.0)
    assert any("History: tests=3" in r.getMessage() for r in caplog.records)


def test_validate_bank_reports_categories(capsys):
    validate_bank.main()
    out = capsys.readouterr().out
    assert "Professional Boundaries: catalog=10" in out
    assert "within one scenario of balance" in out


def test_cli_runs_a_short_test(monkeypatch, capsys):
    picks = itertools.cycle(["0", "1", "2", "3", "4"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(picks))

    class _Store(MemoryStore):
        @classmethod
        def for_user(cls, user_id):
            return cls()

    monkeypatch.setattr(run_test, "JsonHistoryStore", _Store)
    run_test.main(["--count", "2", "--seed", "3", "--user", "tester"])

    out = capsys.readouterr().out
    assert "SJT practice: 2 scenarios" in out
    assert "Total:" in out
    assert "Saved to history" in out
