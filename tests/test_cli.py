"""Tests for the terminal client's table setup and argument checks."""
import sys

import pytest

import cli


def _run_main(monkeypatch, *argv):
    monkeypatch.setattr(sys, "argv", ["cli.py", *argv])
    cli.main()


class TestShortTable:
    @pytest.mark.parametrize("num_bots", [0, 1])
    def test_watching_too_few_bots_stops_cleanly(self, num_bots, capsys):
        game = cli.CLIGame(num_bots=num_bots, watch=True, seed=1)
        assert game.table.awaiting == "players"
        game.run()
        assert "At least two players are needed" in capsys.readouterr().out
        assert game.table.state.hand_number == 0


class TestArguments:
    @pytest.mark.parametrize("argv", [
        ["--bots", "0"],
        ["--bots", "6"],
        ["--watch", "--bots", "1"],
        ["--watch", "--bots", "7"],
    ])
    def test_seat_count_out_of_range(self, monkeypatch, capsys, argv):
        with pytest.raises(SystemExit) as info:
            _run_main(monkeypatch, *argv)
        assert info.value.code == 2
        assert "the table seats 2-6 players" in capsys.readouterr().err

    def test_watch_plays_requested_hands(self, monkeypatch, capsys):
        _run_main(monkeypatch, "--watch", "--bots", "3", "--hands", "2", "--seed", "4", "--difficulty", "easy")
        out = capsys.readouterr().out
        assert "HAND #1" in out
        assert "CHIP COUNTS" in out
