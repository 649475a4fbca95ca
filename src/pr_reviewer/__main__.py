"""Command line entry point for pr-reviewer."""

import argparse
import asyncio
from datetime import datetime, timezone
import glob
import logging
from logging.handlers import RotatingFileHandler
import os
import sys
from types import TracebackType
from typing import List

from diff import DiffError
from pr_reviewer import __version__
from pr_reviewer.pr_reviewer import PRReviewer, ReviewOptions
from pr_reviewer.review_exceptions import ReviewError
from pr_reviewer.review_prompts import ReviewLanguage, ReviewMode
from pr_reviewer.review_settings import OutputFormat, ReviewSettings
from report import ReportError
from vcs import VCSError


LOG_DIR = os.path.expanduser("~/.pr-reviewer/logs")
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(verbose: bool, log_dir: str = LOG_DIR) -> None:
    """
    Configure logging to a rotating file and to stderr.

    The log file always records debug output; stderr shows info and above,
    or everything when verbose is set.

    Args:
        verbose: Show debug output on stderr
        log_dir: Directory for log files
    """
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(logging.DEBUG if verbose else logging.INFO)
    handlers: List[logging.Handler] = [console]

    try:
        os.makedirs(log_dir, exist_ok=True)
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d-%H-%M-%S-%f")[:23]

        # Keep up to 20 log files, max 1MB each
        file_handler = RotatingFileHandler(
            os.path.join(log_dir, f"{timestamp}.log"),
            maxBytes=1024*1024,
            backupCount=19,
            encoding='utf-8'
        )
        file_handler.setLevel(logging.DEBUG)
        handlers.append(file_handler)

    except OSError as e:
        print(f"Unable to write log files to {log_dir}: {e}", file=sys.stderr)

    logging.basicConfig(
        level=logging.DEBUG,
        format=LOG_FORMAT,
        handlers=handlers,
        force=True
    )

    cleanup_old_logs(log_dir, max_logs=20)


def cleanup_old_logs(log_dir: str, max_logs: int) -> None:
    """Remove oldest log files if we exceed maximum count."""
    log_files = glob.glob(os.path.join(log_dir, "*.log*"))
    log_files.sort(key=os.path.getctime)

    while len(log_files) > max_logs:
        try:
            os.remove(log_files.pop(0))

        except OSError:
            pass  # Ignore errors removing old logs


def install_global_exception_handler() -> None:
    """Install a global exception handler for uncaught exceptions."""
    logger = logging.getLogger('GlobalExceptionHandler')

    def handle_exception(
        exc_type: type[BaseException],
        exc_value: BaseException,
        exc_traceback: TracebackType | None
    ) -> None:
        """Handle uncaught exceptions and log them."""
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return

        logger.critical(
            "Uncaught exception",
            exc_info=(exc_type, exc_value, exc_traceback)
        )

    sys.excepthook = handle_exception


def parse_arguments(argv: List[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="pr-reviewer",
        description="Automated pull request reviews using a language model",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Review a feature branch against development
  pr-reviewer --branch feature/login

  # Describe a branch against main, in English, as an HTML report
  pr-reviewer --branch feature/login --target-branch main --mode description --lang en --format html

  # Review uncommitted local changes
  pr-reviewer --local
        """
    )

    parser.add_argument(
        '-b', '--branch',
        help='Branch to review'
    )

    parser.add_argument(
        '-l', '--local',
        action='store_true',
        help='Review uncommitted local changes (git diff HEAD)'
    )

    parser.add_argument(
        '-m', '--mode',
        choices=[mode.value for mode in ReviewMode],
        default=ReviewMode.REVIEW.value,
        help='Review mode (default: review)'
    )

    parser.add_argument(
        '-t', '--target-branch',
        default='development',
        help='Branch to compare against (default: development)'
    )

    parser.add_argument(
        '-o', '--output',
        default='',
        help='Output folder (default: a new temporary folder)'
    )

    parser.add_argument(
        '-f', '--format',
        choices=[output_format.value for output_format in OutputFormat],
        default=None,
        help='Report format (default: txt, or the settings file value)'
    )

    parser.add_argument(
        '--model',
        default=None,
        help='Model name (default: gpt-4o-mini, or the settings file value)'
    )

    parser.add_argument(
        '--lang',
        default='zh',
        help='Reply language, zh or en (default: zh)'
    )

    parser.add_argument(
        '--open',
        action='store_true',
        help='Open the HTML report in a browser'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose logging'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    return parser.parse_args(argv)


def build_settings(args: argparse.Namespace) -> ReviewSettings:
    """
    Combine the settings file, the environment and command line flags.

    Args:
        args: Parsed command line

    Returns:
        Settings for the review
    """
    settings = ReviewSettings.load_default()
    settings.apply_environment()

    if args.model:
        settings.model = args.model

    if args.format:
        settings.output_format = OutputFormat(args.format)

    return settings


def main(argv: List[str] | None = None) -> int:
    """Main entry point."""
    args = parse_arguments(argv)
    setup_logging(args.verbose)
    install_global_exception_handler()
    logger = logging.getLogger("PRReviewerCLI")

    if not args.branch and not args.local:
        logger.error("Must specify either --branch or --local")
        return 1

    if args.branch and args.local:
        logger.error("--branch and --local are mutually exclusive")
        return 1

    language = ReviewLanguage.from_code(args.lang)
    if language.value != args.lang.strip().lower():
        logger.warning("Unknown language '%s', using %s", args.lang, language.value)

    options = ReviewOptions(
        branch=args.branch,
        local=args.local,
        mode=ReviewMode(args.mode),
        target_branch=args.target_branch,
        output=args.output,
        language=language,
        open_browser=args.open
    )

    reviewer = PRReviewer(options, build_settings(args), __version__)

    try:
        report_path = asyncio.run(reviewer.run())

    except (VCSError, DiffError, ReviewError, ReportError) as e:
        logger.error("Review failed: %s", str(e))
        logger.debug("Error details: %s", getattr(e, "error_details", {}))
        return 1

    except KeyboardInterrupt:
        logger.warning("Review interrupted")
        return 130

    if report_path is None:
        return 0

    print(f"\n[{options.mode.value}] Output:\n\n{reviewer.review_text}\n")
    print(f"Review saved to {report_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
