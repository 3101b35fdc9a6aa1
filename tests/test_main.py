"""
Tests for the text client entry point (main.py)
Tests board rendering, command parsing, the CLI loop and the coverage runner
"""

import os
import random
import sys
from unittest.mock import patch

import pytest

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from main import human_turn, main, render
from run_coverage import build_command, run_coverage
from ai.game_api import HazardChessAPI
from hazard.board import PlayerColor, Square
from hazard.move import Move
from hazard.snapshot import load_game, save_game


def squares(r1, c1, r2, c2):
    return Square(r1, c1), Square(r2, c2)


def cell_text(text, row, col):
    """Character drawn for a cell in render output"""
    line = text.splitlines()[row + 1]
    return line[3 + 2 * col]


@pytest.fixture
def api():
    return HazardChessAPI(mine_count=0, rng=random.Random(2))


class TestRender:
    """Test cases for the board drawing"""

    def test_start_position(self, api):
        lines = render(api).splitlines()
        assert lines[0].split() == [str(col) for col in range(8)]
        assert lines[1].split()[1:] == list("rnbqkbnr")
        assert lines[4].split()[1:] == ["."] * 8
        assert "To move: white" in render(api)

    def test_revealed_and_flagged_cells(self, api):
        api.toggle_flag(4, 4)
        assert cell_text(render(api), 4, 4) == "F"
        api.undo()
        api.make_move(*squares(6, 4, 4, 4))
        assert cell_text(render(api), 3, 3) == " "


class TestHumanTurn:
    """Test cases for command parsing"""

    def test_move_command(self, api):
        with patch('builtins.input', return_value="6 4 4 4"):
            assert human_turn(api) is True
        assert api.state.to_move == PlayerColor.BLACK

    def test_flag_command(self, api):
        with patch('builtins.input', return_value="f 2 3"):
            assert human_turn(api) is True
        assert api.state.minefield.is_flagged(2, 3, PlayerColor.WHITE)

    def test_quit(self, api):
        with patch('builtins.input', return_value="q"):
            assert human_turn(api) is False

    def test_end_of_input(self, api):
        with patch('builtins.input', side_effect=EOFError):
            assert human_turn(api) is False

    def test_bad_then_illegal_then_quit(self, api, capsys):
        with patch('builtins.input', side_effect=["a b", "6 4 3 4", "q"]):
            assert human_turn(api) is False
        output = capsys.readouterr().out
        assert "Could not read command" in output
        assert "Illegal move" in output

    def test_undo_skips_bot_reply(self, api):
        api.make_move(*squares(6, 4, 4, 4))
        api.bot_turn()
        with patch('builtins.input', return_value="u"):
            assert human_turn(api) is True
        assert api.state.move_history == []
        assert api.state.to_move == PlayerColor.WHITE


class TestMain:
    """Test cases for the CLI loop"""

    def test_watch_and_save(self, tmp_path, capsys):
        path = str(tmp_path / "game.json")
        argv = ['main.py', '--seed', '3', '--mines', '6', '--max-plies', '6', '--save', path]
        with patch.object(sys, 'argv', argv):
            main()

        assert f"Game saved to {path}" in capsys.readouterr().out
        state = load_game(path)
        assert state is not None
        assert len(state.move_history) <= 6

    def test_loaded_game_without_bot_continues(self, make_state, tmp_path, capsys):
        """Test black is still played by the opponent after loading a hot-seat save"""
        state = make_state()
        state.apply_move(Move(Square(6, 4), Square(4, 4)))
        state.bot_enabled = False
        source = str(tmp_path / "hotseat.json")
        target = str(tmp_path / "after.json")
        assert save_game(state, source)

        argv = ['main.py', '--seed', '4', '--max-plies', '1', '--load', source, '--save', target]
        with patch.object(sys, 'argv', argv):
            main()

        assert "Bot is disabled" not in capsys.readouterr().out
        resumed = load_game(target)
        assert len(resumed.move_history) == 2
        assert resumed.to_move == PlayerColor.WHITE
        assert resumed.bot_enabled is True

    def test_missing_load_file(self, tmp_path, capsys):
        argv = ['main.py', '--seed', '1', '--max-plies', '0', '--load', str(tmp_path / "none.json")]
        with patch.object(sys, 'argv', argv):
            main()
        assert "starting fresh" in capsys.readouterr().out

    def test_human_quits(self, capsys):
        with patch.object(sys, 'argv', ['main.py', '--human', '--seed', '1']), \
                patch('builtins.input', return_value="q"):
            main()
        assert "To move: white" in capsys.readouterr().out


class TestCoverageRunner:
    """Test cases for the coverage helper script"""

    def test_command_covers_every_package(self):
        cmd = build_command(html=True, fail_under=80, extra=["-k", "engine"])

        assert "--cov=hazard" in cmd and "--cov=ai" in cmd and "--cov=main" in cmd
        assert "--cov-report=html:htmlcov" in cmd
        assert "--cov-fail-under=80" in cmd
        assert cmd[-2:] == ["-k", "engine"]

    def test_failed_run_reported(self, capsys):
        with patch('run_coverage.subprocess.run') as run:
            run.return_value.returncode = 1
            assert run_coverage() is False
        assert "failed" in capsys.readouterr().out
