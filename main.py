"""
Hazard Chess - Main Entry Point
Text client: watch the scripted opponent play itself, or play white against it
"""

import argparse
import os
import random
import sys
import time

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))

from ai.game_api import GameStatus, HazardChessAPI
from ai.opponent import AIDifficulty, ScriptedOpponent
from hazard.board import Board, PlayerColor, Square
from hazard.snapshot import load_game, save_game


def render(api: HazardChessAPI) -> str:
    """Draw pieces, with the mine layer shown on empty cells"""
    state = api.state
    minefield = state.minefield
    owner = api.flag_owner()
    lines = ["   " + " ".join(str(col) for col in range(Board.SIZE))]
    for row in range(Board.SIZE):
        cells = []
        for col in range(Board.SIZE):
            piece = state.board.get_piece(row, col)
            if piece is not None:
                cells.append(piece.symbol)
            elif minefield.is_exploded(row, col):
                cells.append('*')
            elif minefield.is_armed(row, col):
                cells.append('!')
            elif minefield.is_flagged(row, col, owner):
                cells.append('F')
            elif minefield.is_revealed(row, col):
                count = minefield.adjacent_mines(row, col)
                cells.append(str(count) if count else ' ')
            else:
                cells.append('.')
        lines.append(f"{row}  " + " ".join(cells))

    info = api.get_game_state()
    lines.append("")
    lines.append(f"To move: {info['to_move']}   Status: {info['status']}   Time: {info['elapsed']}")
    lines.append(f"Captured by white: {' '.join(info['captured_white']) or '-'}   "
                 f"by black: {' '.join(info['captured_black']) or '-'}")
    lines.append(f"Mined white: {' '.join(info['mined_white']) or '-'}   "
                 f"black: {' '.join(info['mined_black']) or '-'}")
    return "\n".join(lines)


def human_turn(api: HazardChessAPI) -> bool:
    """
    Read one command for white. Returns False when the player quits.

    Commands: "r1 c1 r2 c2" move, "f r c" flag, "u" undo, "redo", "q" quit
    """
    while True:
        try:
            command = input("white> ").strip().lower().split()
        except EOFError:
            return False
        if not command:
            continue
        if command[0] == 'q':
            return False
        if command[0] == 'u':
            # Undo back to white's turn, skipping the bot's reply
            api.undo()
            if api.state.to_move != PlayerColor.WHITE:
                api.undo()
            return True
        if command[0] == 'redo':
            api.redo()
            return True
        values = command[1:] if command[0] == 'f' else command
        try:
            numbers = [int(value) for value in values]
        except ValueError:
            print("Could not read command")
            continue

        if command[0] == 'f' and len(numbers) == 2:
            result = api.toggle_flag(*numbers)
        elif len(numbers) == 4 and all(Board.is_inside(numbers[i], numbers[i + 1]) for i in (0, 2)):
            result = api.make_move(Square(numbers[0], numbers[1]), Square(numbers[2], numbers[3]))
        else:
            print("Could not read command")
            continue

        if not result['success']:
            print(result['error'])
            continue
        return True


def main():
    """Main entry point for the text client"""
    parser = argparse.ArgumentParser(
        description="Hazard Chess - chess on top of a hidden minefield",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py --seed 7 --max-plies 80
  python main.py --human --difficulty hard --mines 14
  python main.py --load game.json --save game.json
        """
    )
    parser.add_argument('--mines', type=int, default=HazardChessAPI.DEFAULT_MINES,
                        help=f'Number of mines (default: {HazardChessAPI.DEFAULT_MINES})')
    parser.add_argument('--difficulty',
                        choices=[level.value for level in AIDifficulty],
                        default=AIDifficulty.NORMAL.value,
                        help='Opponent strength (default: normal)')
    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed for a reproducible game')
    parser.add_argument('--max-plies', type=int, default=200,
                        help='Stop after this many half-moves (default: 200)')
    parser.add_argument('--human', action='store_true',
                        help='Play white yourself instead of watching')
    parser.add_argument('--save', type=str, default=None,
                        help='Write the final position to this JSON file')
    parser.add_argument('--load', type=str, default=None,
                        help='Continue from a saved JSON file')
    args = parser.parse_args()

    rng = random.Random(args.seed)
    api = HazardChessAPI(args.mines, AIDifficulty(args.difficulty), bot_enabled=True, rng=rng)
    if args.load:
        state = load_game(args.load)
        if state is None:
            print(f"No saved game at {args.load}, starting fresh")
        else:
            # This client always plays black with the scripted opponent
            state.bot_enabled = True
            api.load_state(state)

    # Watching mode lets the same scripted opponent drive white
    white_bot = ScriptedOpponent(rng, engine=api.engine)
    started = time.time() - api.state.elapsed_seconds

    try:
        plies = 0
        while not api.is_game_over() and plies < args.max_plies:
            print(render(api))
            print()
            if api.state.to_move == PlayerColor.BLACK:
                result = api.bot_turn()
            elif args.human:
                if not human_turn(api):
                    break
                api.set_elapsed_seconds(int(time.time() - started))
                continue
            else:
                move = white_bot.choose_move(api.state, api.difficulty)
                if move is None:
                    break
                result = api.make_move(move.start, move.end, move.promotion)
            if not result['success']:
                print(result['error'])
                break
            api.set_elapsed_seconds(int(time.time() - started))
            plies += 1

        print(render(api))
        status = api.get_status()
        if status == GameStatus.WHITE_WINS:
            print("\nWhite wins!")
        elif status == GameStatus.BLACK_WINS:
            print("\nBlack wins!")
        elif status == GameStatus.DRAW:
            print("\nDraw.")
    except KeyboardInterrupt:
        print("\nGame interrupted by user")

    if args.save:
        if save_game(api.state, args.save):
            print(f"Game saved to {args.save}")


if __name__ == "__main__":
    main()
