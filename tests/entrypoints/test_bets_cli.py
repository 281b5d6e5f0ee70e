"""Tests for the reftrends-bets command line."""

from __future__ import annotations

import json

import pytest

from reftrends.entrypoints import bets as bets_cli


@pytest.fixture
def cli(monkeypatch, tmp_path, capsys):
    """Run the CLI against a temporary ledger and return its parsed output."""
    monkeypatch.setenv("REFTRENDS_TEST_MODE", "true")
    monkeypatch.setattr(bets_cli, "setup_logging", lambda *args, **kwargs: None)
    ledger = tmp_path / "bets.json"

    def _run(*argv):
        bets_cli.main(["--file", str(ledger), *argv])
        return json.loads(capsys.readouterr().out)

    _run.ledger = ledger
    return _run


class TestBetsCli:
    """End to end runs of the bets entrypoint."""

    def test_add_settle_stats(self, cli):
        """A settled winning bet shows up in the stats."""
        bet = cli("add", "Arsenal vs Chelsea", "--odds", "2.5", "--stake", "10")
        assert bet["result"] == "pending"
        assert cli.ledger.exists()

        settled = cli("settle", bet["id"], "won")
        assert settled["actual_win"] == 25.0

        stats = cli("stats")
        assert stats["won_bets"] == 1
        assert stats["profit"] == 15.0

    def test_list_and_delete(self, cli):
        """Deleted bets drop out of the listing."""
        bet = cli("add", "Arsenal vs Chelsea", "--odds", "2.0", "--stake", "5")
        assert [b["id"] for b in cli("list")] == [bet["id"]]
        assert cli("delete", bet["id"]) == {"deleted": bet["id"]}
        assert cli("list") == []

    def test_export_and_import(self, cli, tmp_path):
        """An export file can be imported back."""
        cli("add", "Arsenal vs Chelsea", "--odds", "2.0", "--stake", "5")
        out = tmp_path / "export.json"
        assert cli("export", str(out))["exported"] == 1
        cli("delete", json.loads(out.read_text())[0]["id"])
        assert cli("import", str(out)) == {"imported": 1}
        assert len(cli("list")) == 1

    def test_errors_exit_nonzero(self, cli):
        """Application errors exit with status 1."""
        with pytest.raises(SystemExit) as exc:
            cli("settle", "missing", "won")
        assert exc.value.code == 1

    def test_market_choices(self):
        """Unknown markets are rejected by the parser."""
        with pytest.raises(SystemExit):
            bets_cli.build_parser().parse_args(["add", "A vs B", "--odds", "2", "--stake", "1", "--market", "Corners"])
