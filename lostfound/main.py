"""Command-line entry point: run the matching engine for a stored item."""

from dotenv import load_dotenv
load_dotenv()

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence, Tuple

from lostfound.config.environment import EnvironmentConfig
from lostfound.config.exceptions import ConfigurationError
from lostfound.config.loader import load_config
from lostfound.config.models import AppConfig
from lostfound.domain.models import ItemType
from lostfound.logging import get_logger
from lostfound.logging.config import configure_logging
from lostfound.persistence.database import close_database, get_session, init_database
from lostfound.persistence.repositories import ItemRepository
from lostfound.pipeline.runner import create_pipeline

logger = get_logger(__name__, component="cli")


def load_runtime_config(
    config_path: Optional[Path], log_level_override: Optional[str]
) -> Tuple[AppConfig, EnvironmentConfig]:
    """
    Load configuration and resolve the effective log level.

    Log level priority: CLI > LOG_LEVEL environment variable > config file.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    app_config, env_config = load_config(config_path)

    if log_level_override:
        env_config.log_level = log_level_override
    elif not env_config.log_level:
        env_config.log_level = app_config.logging.level or "INFO"

    return app_config, env_config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Lost & Found smart matching - match a posted item against the opposite inventory"
    )
    parser.add_argument("--item-id", required=True, help="Id of the stored item to match")
    parser.add_argument(
        "--item-type",
        default=None,
        choices=[item_type.value for item_type in ItemType],
        help="Expected item type; the run fails if the stored item is of the other type",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.yaml, then config/config.yaml)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config and environment)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Rank matches and log them without creating notifications or sending email",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Run one matching pass synchronously.

    Returns:
        Exit code: 0 on success, 1 on configuration error, missing item,
        item type mismatch or fatal error
    """
    args = build_parser().parse_args(argv)

    try:
        app_config, env_config = load_runtime_config(args.config, args.log_level)
        configure_logging(
            level=env_config.log_level,
            format_type=app_config.logging.format,
            environment=env_config.environment,
        )

        logger.info(
            "Lost & Found matching starting",
            extra={
                "event": "service.starting",
                "item_id": args.item_id,
                "item_type": args.item_type,
                "dry_run": args.dry_run,
                "email_configured": env_config.smtp_configured,
            },
        )

        init_database(env_config.database_url)
        try:
            with get_session() as session:
                items = ItemRepository(session)
                item = items.get_by_id(args.item_id)
                if item is None:
                    logger.error(
                        f"Item {args.item_id} not found",
                        extra={"event": "service.item_not_found", "item_id": args.item_id},
                    )
                    return 1

                item_type = items.get_item_type(args.item_id)
                if args.item_type and ItemType(args.item_type) != item_type:
                    logger.error(
                        f"Item {args.item_id} is stored as {item_type.value}, not {args.item_type}",
                        extra={
                            "event": "service.item_type_mismatch",
                            "item_id": args.item_id,
                            "stored_item_type": item_type.value,
                        },
                    )
                    return 1

                pipeline = create_pipeline(app_config, env_config, session)
                result = pipeline.run(item, item_type, dry_run=args.dry_run)
        finally:
            close_database()

        for rank, match in enumerate(result.matches, start=1):
            logger.info(
                f"#{rank} {match.item.display_title} ({match.item.id}): {match.score}% "
                f"[{match.match_quality}] {'; '.join(match.reasons())}",
                extra={"event": "service.match", "candidate_id": match.item.id, "match_score": match.score},
            )

        logger.info(
            f"Matching completed: {result.match_count} matches, "
            f"{result.notifications_created} notifications, {result.emails_sent} emails",
            extra={
                "event": "service.completed",
                "run_id": result.run_id,
                "had_errors": result.had_errors,
            },
        )
        return 1 if result.error else 0

    except ConfigurationError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        logger.critical(
            "Fatal error during matching",
            extra={"event": "service.failed", "error_type": type(e).__name__},
            exc_info=True,
        )
        return 1


if __name__ == "__main__":
    sys.exit(main())
