"""
Application Initialization
==========================
This module wires the application together and starts the Qt Event Loop.

Why is this file needed?
------------------------
It acts as the "Dependency Injection" root. It:
1. Configures logging.
2. Loads the bubble network (bundled default or a user supplied file).
3. Instantiates the Main Window (View), which owns the view-state store.
"""
import argparse
import logging
import sys
from typing import Optional, Sequence

from bubblemap.app.application import create_app
from bubblemap.config import DEFAULT_BUBBLES_PATH
from bubblemap.logging_config import setup_logging
from bubblemap.model.io import BubbleDataError, BubbleLoader
from bubblemap.view.main_window import MainWindow

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="bubblemap", description="Explore a bubble network on a 2D map.")
    parser.add_argument("bubbles", nargs="?", default=None,
                        help="Bubble network JSON file (defaults to the bundled network).")
    parser.add_argument("--debug", action="store_true", help="Shortcut for --log-level DEBUG.")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        type=str.upper, help="Logging verbosity (default: INFO).")
    parser.add_argument("--log-file", default=None, help="Also write logs to this file.")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)

    # 1. Setup Logging (Console + Optional File)
    setup_logging(level=logging.DEBUG if args.debug else args.log_level, log_file=args.log_file)

    # 2. Load the network before any window exists, so a bad file fails fast
    path = args.bubbles or DEFAULT_BUBBLES_PATH
    try:
        bubbles = BubbleLoader.load_bubbles(path)
    except BubbleDataError as e:
        logger.error(str(e))
        return 1

    # 3. Create the Qt Application and the Main Window
    app = create_app([sys.argv[0]])
    window = MainWindow(bubbles, filepath=args.bubbles)
    window.show()

    # 4. Start Event Loop
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
