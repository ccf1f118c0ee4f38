"""
PitchCoach - Communication Practice Coach

CLI entry point for feedback, topic generation and progress reports.
"""

import argparse
import asyncio
import json
import logging
import sys

import config.settings as settings
from src.models.errors import PracticeError, SubmissionValidationError
from src.practice.service import LocalIdentityResolver, PracticeService
from src.router import create_router
from src.utils.storage import JsonSessionStore


def setup_logging(log_level: str = "INFO"):
    """Configure logging for the entire application."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format=settings.LOG_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stderr),
            logging.FileHandler(settings.LOG_FILE)
        ]
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="PitchCoach - AI feedback for communication practice",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Score a pitch
  python main.py feedback --topic "Q3 results" \\
                          --goal "Increase marketing budget" \\
                          --point "Targets exceeded by 15%" \\
                          --point "Acquisition cost down 20%" \\
                          --pitch "Good morning everyone. Our Q3 results..."

  # Generate a practice topic
  python main.py topic --role "Product Manager"

  # Show progress and export history
  python main.py progress
  python main.py history --page 2 --min-score 7 --date-from 2024-06-01
  python main.py export-history --output output/history.csv

Note: Set ANTHROPIC_API_KEY and/or GEMINI_API_KEY before running.
        """
    )

    parser.add_argument(
        "--data-root",
        default=str(settings.DATA_ROOT),
        help=f"Data directory (default: {settings.DATA_ROOT})"
    )

    parser.add_argument(
        "--log-level",
        default=settings.LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help=f"Logging level (default: {settings.LOG_LEVEL})"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    feedback = subparsers.add_parser("feedback", help="Get scored feedback for a pitch")
    feedback.add_argument("--topic", required=True)
    feedback.add_argument("--goal", required=True)
    feedback.add_argument(
        "--point",
        dest="points",
        action="append",
        required=True,
        help="Main point (repeat for several)"
    )
    feedback.add_argument("--pitch", required=True)

    topic = subparsers.add_parser("topic", help="Generate a practice topic")
    topic.add_argument("--role", required=True)

    subparsers.add_parser("progress", help="Show practice progress")

    history = subparsers.add_parser("history", help="List past sessions (paginated, filterable)")
    history.add_argument("--page", type=int, default=1)
    history.add_argument("--limit", type=int, default=settings.HISTORY_DEFAULT_LIMIT)
    history.add_argument("--date-from", help="Earliest date (YYYY-MM-DD)")
    history.add_argument("--date-to", help="Latest date, inclusive (YYYY-MM-DD)")
    history.add_argument("--min-score", type=int)
    history.add_argument("--max-score", type=int)

    export = subparsers.add_parser("export-history", help="Export session history to CSV")
    export.add_argument(
        "--output",
        default=str(settings.OUTPUT_ROOT / "history.csv"),
        help="Destination CSV path"
    )

    return parser


async def run_command(args: argparse.Namespace, service: PracticeService) -> dict:
    """Dispatch a parsed CLI command to the practice service."""
    if args.command == "feedback":
        return await service.submit_practice(
            None,
            {
                "topic": args.topic,
                "goal": args.goal,
                "mainPoints": args.points,
                "pitch": args.pitch
            }
        )
    if args.command == "topic":
        return await service.generate_topic(None, args.role)
    if args.command == "progress":
        return service.get_progress(None)
    if args.command == "history":
        return service.list_history(
            None,
            page=args.page,
            limit=args.limit,
            date_from=args.date_from,
            date_to=args.date_to,
            min_score=args.min_score,
            max_score=args.max_score
        )
    if args.command == "export-history":
        return {"output": service.export_history(None, args.output)}
    raise ValueError(f"Unknown command: {args.command}")


def main():
    """Main CLI entry point."""
    args = build_parser().parse_args()

    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    needs_provider = args.command in ("feedback", "topic")
    if needs_provider and not (settings.ANTHROPIC_API_KEY or settings.GEMINI_API_KEY):
        logger.error(
            "No provider credential configured. "
            "Set ANTHROPIC_API_KEY or GEMINI_API_KEY before running PitchCoach."
        )
        sys.exit(1)

    try:
        router = create_router() if needs_provider else None
        service = PracticeService(
            router=router,
            store=JsonSessionStore(args.data_root),
            identity=LocalIdentityResolver()
        )

        result = asyncio.run(run_command(args, service))
        print(json.dumps(result, indent=2))
        sys.exit(0)

    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        sys.exit(1)

    except SubmissionValidationError as e:
        logger.error(f"Invalid input data: {'; '.join(e.details)}")
        sys.exit(1)

    except PracticeError as e:
        logger.error(f"{e} ({getattr(e, 'details', '')})")
        sys.exit(1)

    except Exception as e:
        logger.error(f"PitchCoach failed: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
