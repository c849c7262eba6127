"""Main application entry point for Nolo."""

import sys
import argparse
import logging
from pathlib import Path
from typing import List, Optional

from . import __version__
from .auto_mode import run_auto_mode
from .config import NoloConfig, get_config
from .ui.conversation_screen import ConversationScreen

logger = logging.getLogger(__name__)


def setup_logging(config: NoloConfig, level: Optional[str] = None) -> None:
    """Set up logging configuration from YAML config."""
    level = level or config.get('logging.level', 'INFO')
    log_file_path = config.get('logging.file_path', 'logs/nolo.log')
    console_output = config.get('logging.console_output', True)

    log_dir = Path(log_file_path).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    )
    file_handler.setFormatter(file_formatter)
    handlers.append(file_handler)

    # Console handler - only if enabled in config
    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.WARNING)  # Only show warnings and above on console
        console_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger.info("=" * 50)
    logger.info("Nolo starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("=" * 50)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nolo",
        description="Nolo - your gentle voice companion",
        epilog="Commands: 1=Start/stop recording, 2=Play voice, 3=New conversation, q=Quit"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file (default: looks for nolo.yaml)"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (overrides config)"
    )

    parser.add_argument(
        "--auto",
        action="store_true",
        help="Run one round without the interactive screen: record, send, print, play"
    )

    parser.add_argument(
        "--duration",
        type=int,
        default=5,
        help="Recording duration in seconds for auto mode (default: 5)"
    )

    parser.add_argument(
        "--input",
        type=str,
        help="Send this WAV file instead of recording (implies --auto)"
    )

    parser.add_argument(
        "--no-play",
        action="store_true",
        help="Do not play the synthesized reply in auto mode"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"Nolo v{__version__}"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for Nolo application."""
    args = build_parser().parse_args(argv)

    try:
        config = get_config(args.config)
        setup_logging(config, args.log_level)

        if args.auto or args.input:
            exit_code = run_auto_mode(
                config,
                duration_seconds=args.duration,
                input_path=args.input,
                play=not args.no_play,
            )
            sys.exit(exit_code)

        ConversationScreen(config).run()
        print("\n👋 Goodbye!")
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
    except Exception as e:
        print(f"❌ Error: {e}")
        logging.error(f"Application error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
