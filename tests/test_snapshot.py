"""
Unit tests for GameSnapshot and save/load
Tests deep copies, JSON round trips and recovery from malformed data
"""

import json

import numpy as np
import pytest
from hazard.board import Piece, PieceType, PlayerColor, Square
from hazard.engine import MoveEngine
from hazard.move import Move
from hazard.snapshot import GameSnapshot, load_game, move_from_dict, piece_from_dict, save_game

W, B = PlayerColor.WHITE, PlayerColor.BLACK


@pytest.fixture
def played_state(make_state):
    """A game a few plies in, with an armed mine, flags and captures"""
    state = make_state(mines=[(4, 0), (2, 7)])
    for r1, c1, r2, c2 in [(6, 4, 4, 4), (1, 3, 3, 3), (4, 4, 3, 3), (1, 0, 3, 0)]:
        state.apply_move(Move(Square(r1, c1), Square(r2, c2)))
    state.minefield.arm_mine(4, 0)
    state.minefield.toggle_flag(2, 7, W)
    state.minefield.toggle_flag(4, 0, B)
    state.set_elapsed_seconds(95)
    state.bot_enabled = False
    state.undo()
    return state


def assert_same_game(restored, original):
    assert restored.board == original.board
    for name in ("mines", "revealed", "exploded", "flagged_white", "flagged_black", "armed_turns"):
        assert np.array_equal(getattr(restored.minefield, name), getattr(original.minefield, name))
    assert restored.to_move == original.to_move
    assert restored.castling_rights == original.castling_rights
    assert restored.en_passant_target == original.en_passant_target
    assert restored.move_history == original.move_history
    assert restored.redo_stack == original.redo_stack
    assert restored.captured_white == original.captured_white
    assert restored.mined_black == original.mined_black
    assert restored.halfmove_clock == original.halfmove_clock
    assert restored.elapsed_seconds == original.elapsed_seconds
    assert restored.bot_enabled == original.bot_enabled
    assert restored.position_history == original.position_history


class TestSnapshotCopy:
    """Test cases for in-memory snapshots"""

    def test_round_trip(self, played_state):
        restored = GameSnapshot.from_state(played_state).to_game_state()
        assert_same_game(restored, played_state)
        assert restored.position_hash() == played_state.position_hash()
        engine = MoveEngine()
        assert set(engine.legal_moves(restored)) == set(engine.legal_moves(played_state))

    def test_snapshot_is_independent(self, played_state):
        """Test later play never leaks into an earlier snapshot"""
        snapshot = GameSnapshot.from_state(played_state)
        expected = snapshot.to_game_state().position_hash()

        played_state.redo()
        played_state.apply_move(Move(Square(7, 3), Square(3, 7)))
        played_state.minefield.toggle_flag(6, 6, W)

        assert snapshot.to_game_state().position_hash() == expected

    def test_restored_states_are_independent(self, played_state):
        snapshot = GameSnapshot.from_state(played_state)
        first = snapshot.to_game_state()
        second = snapshot.to_game_state()
        first.board.remove_piece(7, 4)
        first.minefield.reveal(6, 6)
        assert second.board.get_piece(7, 4) is not None
        assert second.minefield.revealed[6, 6] == played_state.minefield.revealed[6, 6]

    def test_adjacency_recomputed(self, played_state):
        restored = GameSnapshot.from_state(played_state).to_game_state()
        assert np.array_equal(restored.minefield.adjacent_counts,
                              played_state.minefield.adjacent_counts)


class TestSnapshotSerialization:
    """Test cases for dictionary conversion"""

    def test_json_round_trip(self, played_state):
        data = json.loads(json.dumps(GameSnapshot.from_state(played_state).to_dict()))
        restored = GameSnapshot.from_dict(data).to_game_state()
        assert_same_game(restored, played_state)

    def test_dict_keys(self, played_state):
        data = GameSnapshot.from_state(played_state).to_dict()
        assert data["to_move"] == played_state.to_move.value
        assert data["elapsed_seconds"] == 95
        assert data["bot_enabled"] is False
        assert len(data["redo_stack"]) == 1

    def test_empty_dict_gives_blank_game(self):
        state = GameSnapshot.from_dict({}).to_game_state()
        assert list(state.board.pieces()) == []
        assert state.minefield.mine_count() == 0
        assert state.to_move == W
        assert state.castling_rights.key() == "KQkq"
        assert len(state.position_history) == 1

    def test_malformed_grids_default(self, played_state):
        """Test a bad grid is replaced by a blank one without touching the rest"""
        data = GameSnapshot.from_state(played_state).to_dict()
        data["flagged_black"] = [[True] * 3]
        data["armed_turns"] = "broken"
        snapshot = GameSnapshot.from_dict(data)

        assert not snapshot.flagged_black.any()
        assert not snapshot.armed_turns.any()
        assert snapshot.flagged_white[2, 7]
        assert snapshot.mines[4, 0]

    def test_mine_layout_needs_complete_set(self, played_state):
        data = GameSnapshot.from_state(played_state).to_dict()
        data["exploded"] = None
        snapshot = GameSnapshot.from_dict(data)
        assert not snapshot.mines.any()
        assert not snapshot.revealed.any()

    def test_legacy_flag_grid(self):
        flags = [[False] * 8 for _ in range(8)]
        flags[3][3] = True
        snapshot = GameSnapshot.from_dict({"flagged": flags})
        assert snapshot.flagged_white[3, 3]
        assert not snapshot.flagged_black.any()

    def test_bad_entries_dropped(self):
        data = {
            "to_move": "purple",
            "captured_white": [{"color": "black", "type": "rook"}, {"color": "x"}, 7],
            "move_history": [{"from_row": 6, "from_col": 4, "to_row": 4, "to_col": 4},
                             {"from_row": 9, "from_col": 0, "to_row": 0, "to_col": 0}],
            "halfmove_clock": "abc",
            "elapsed_seconds": -4,
            "en_passant_row": 12,
            "en_passant_col": 0,
        }
        snapshot = GameSnapshot.from_dict(data)

        assert snapshot.to_move == W
        assert snapshot.captured_white == [Piece(B, PieceType.ROOK)]
        assert snapshot.move_history == [Move(Square(6, 4), Square(4, 4))]
        assert snapshot.halfmove_clock == 0
        assert snapshot.elapsed_seconds == 0
        assert snapshot.en_passant_target is None

    def test_missing_castling_keys_default_true(self):
        snapshot = GameSnapshot.from_dict({"white_king_side": False})
        assert snapshot.castling_rights.key() == "-Qkq"

    def test_helpers_reject_garbage(self):
        assert piece_from_dict(None) is None
        assert piece_from_dict({"color": "white", "type": "dragon"}) is None
        assert move_from_dict("e2e4") is None
        assert move_from_dict({"from_row": 6, "from_col": 4, "to_row": 4, "to_col": 4,
                               "promotion": "dragon"}) is None


class TestSaveLoad:
    """Test cases for JSON files on disk"""

    def test_save_and_load(self, played_state, tmp_path):
        path = tmp_path / "saves" / "game.json"
        assert save_game(played_state, str(path))
        assert path.exists()

        restored = load_game(str(path))
        assert restored is not None
        assert_same_game(restored, played_state)

    def test_load_missing_file(self, tmp_path):
        assert load_game(str(tmp_path / "nope.json")) is None

    def test_load_corrupt_file(self, tmp_path, capsys):
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        assert load_game(str(path)) is None
        assert "Error loading game" in capsys.readouterr().out

    def test_load_non_object(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[1, 2, 3]")
        assert load_game(str(path)) is None

    def test_save_to_directory_fails(self, played_state, tmp_path, capsys):
        assert save_game(played_state, str(tmp_path)) is False
        assert "Error saving game" in capsys.readouterr().out
