from pathlib import Path
import argparse
import logging
import sys

from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler

# Ensure the src directory is on sys.path when running as a script
_SRC_DIR = Path(__file__).resolve().parents[1]
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))

from heromom.bootstrap import create_game_service, log_level_from_env
from heromom.presentation.autoplay import autoplay
from heromom.presentation.status_view import render_status

load_dotenv()

_CONSOLE = Console()


def _print_help_surface() -> None:
    _CONSOLE.print("\nHelp:")
    _CONSOLE.print("- Run with --ticks N to advance N game ticks, --seed S to replay a session.")
    _CONSOLE.print("- HEROMOM_TICK_SECONDS, HEROMOM_REFINING_EXP_OVERFLOW and HEROMOM_LOG_LEVEL tune the session.")


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="heromom", description="Raise a hero from the kitchen.")
    parser.add_argument("--ticks", type=int, default=30, help="number of ticks to play")
    parser.add_argument("--seed", type=int, default=None, help="session seed")
    parser.add_argument("--every", type=int, default=10, help="render the household every N ticks")
    return parser.parse_args(argv)


def main(argv=None):
    args = _parse_args(argv)
    logging.basicConfig(
        level=log_level_from_env(),
        format="%(message)s",
        handlers=[RichHandler(console=_CONSOLE, show_path=False)],
    )
    try:
        game_service = create_game_service(seed=args.seed)
        every = max(1, args.every)
        played = {"count": 0}

        def _on_tick(result):
            played["count"] += 1
            if played["count"] % every == 0 or result.adventure_result is not None:
                render_status(_CONSOLE, game_service.snapshot(), game_service.adventure_status_intent(), result)

        autoplay(game_service, args.ticks, on_tick=_on_tick)
        render_status(_CONSOLE, game_service.snapshot(), game_service.adventure_status_intent())
    except KeyboardInterrupt:
        _CONSOLE.print("\nSession ended.")
    except Exception as exc:
        _CONSOLE.print("An unexpected error occurred. The game closed safely.")
        _CONSOLE.print(f"Reason: {exc}")
        _print_help_surface()


if __name__ == "__main__":
    main()
