"""Main entry point for the Channel Digest service."""

from dotenv import load_dotenv
load_dotenv()

import argparse
import json
import sys
import time
from pathlib import Path
from typing import Optional, Tuple

from channel_digest.adapters import get_adapter
from channel_digest.api import create_app
from channel_digest.config.environment import EnvironmentConfig
from channel_digest.config.exceptions import ConfigurationError
from channel_digest.config.loader import load_config
from channel_digest.config.models import AppConfig
from channel_digest.domain.models import JobStatus
from channel_digest.events import EventBus
from channel_digest.events.bus import Message
from channel_digest.logging import get_logger
from channel_digest.logging.config import configure_logging
from channel_digest.persistence import SqlJobStore, close_database, init_database
from channel_digest.pipeline import JobPipeline

logger = get_logger(__name__, component="cli")


def load_runtime_config(
    config_path: Optional[Path], log_level_override: Optional[str]
) -> Tuple[AppConfig, EnvironmentConfig]:
    """
    Load configuration and resolve the effective log level.

    Log level priority: CLI > environment > config file > INFO.

    Args:
        config_path: Path to configuration file (None = default locations)
        log_level_override: Log level from CLI

    Returns:
        Tuple of (AppConfig, EnvironmentConfig) with env_config.log_level set

    Raises:
        ConfigurationError: If configuration is invalid
    """
    app_config, env_config = load_config(config_path)

    if log_level_override:
        env_config.log_level = log_level_override
    elif env_config.log_level:
        pass
    elif app_config.logging and app_config.logging.level:
        env_config.log_level = app_config.logging.level
    else:
        env_config.log_level = "INFO"

    return app_config, env_config


def log_outcome(message: Message) -> None:
    """Terminal-topic subscriber used in place of the e-mail notifier."""
    if message.get("items"):
        logger.info(
            f"Job {message.get('jobID')} finished with {len(message['items'])} items",
            extra={"event": "job.completed", "job_id": message.get("jobID")},
        )
    else:
        logger.warning(
            f"Job {message.get('jobID')} failed: {message.get('error', 'Channel not found')}",
            extra={"event": "job.failed", "job_id": message.get("jobID")},
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Channel Digest - resolves YouTube channel handles and lists their latest videos"
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
    parser.add_argument("--host", default=None, help="Interface to bind (overrides config)")
    parser.add_argument("--port", type=int, default=None, help="Port to listen on (overrides config)")
    parser.add_argument(
        "--manual-run",
        action="store_true",
        help="Submit one job, wait for it to finish, print the record and exit",
    )
    parser.add_argument("--channel", help="Channel reference for --manual-run, e.g. @acme")
    parser.add_argument("--email", help="Recipient e-mail for --manual-run")
    return parser


def run_manual(pipeline: JobPipeline, bus: EventBus, channel: str, email: str) -> int:
    """Run one job to completion. Returns 0 if it ended items-fetched, 1 otherwise."""
    logger.info("Executing manual run", extra={"event": "service.manual_run.starting"})

    response = pipeline.submission.submit({"channel": channel, "email": email})
    if not response.accepted:
        print(json.dumps(response.body, indent=2))
        return 1

    bus.join()
    record = pipeline.store.get(response.job_id)
    if record is None:
        print(json.dumps({"error": "Job not found", "jobID": response.job_id}, indent=2))
        return 1

    print(json.dumps(record.to_document(), indent=2, ensure_ascii=False))
    logger.info(
        f"Manual run finished: {record.status.value}",
        extra={"event": "service.manual_run.completed", "status": record.status.value},
    )
    return 0 if record.status is JobStatus.ITEMS_FETCHED else 1


def main(argv=None) -> int:
    """
    Main entry point for Channel Digest.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    start_time = time.time()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.manual_run and not (args.channel and args.email):
        parser.error("--manual-run requires --channel and --email")

    bus = None
    try:
        # Configuration first so logging can use its format
        app_config, env_config = load_runtime_config(args.config, args.log_level)
        configure_logging(
            level=env_config.log_level,
            format_type=app_config.logging.format if app_config.logging else "key-value",
            environment=env_config.environment,
        )

        logger.info(
            "Channel Digest starting",
            extra={
                "event": "service.starting",
                "config_path": str(args.config) if args.config else None,
                "log_level": env_config.log_level,
                "manual_run": args.manual_run,
                "has_api_key": env_config.has_api_key,
            },
        )
        if not env_config.has_api_key:
            logger.warning(
                "YOUTUBE_API_KEY is not set; every job will fail until it is configured",
                extra={"event": "config.api_key_missing"},
            )

        init_database(env_config.database_url)
        store = SqlJobStore()
        bus = EventBus(worker_count=app_config.bus.worker_count)
        adapter = get_adapter(app_config.youtube)

        pipeline = JobPipeline(
            app_config=app_config,
            env_config=env_config,
            bus=bus,
            store=store,
            adapter=adapter,
            outcome_handler=log_outcome,
        )
        pipeline.register()

        if args.manual_run:
            return run_manual(pipeline, bus, args.channel, args.email)

        host = args.host or app_config.server.host
        port = args.port or app_config.server.port
        logger.info(
            f"Serving on http://{host}:{port}. Press Ctrl+C to stop",
            extra={"event": "service.serving", "host": host, "port": port},
        )
        create_app(pipeline.submission, store).run(host=host, port=port, threaded=True)
        return 0

    except ConfigurationError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        logger.error(
            f"Configuration error: {e}",
            extra={"event": "config.error", "error_type": "ConfigurationError"},
        )
        return 1
    except KeyboardInterrupt:
        print("\nShutdown requested by user", file=sys.stderr)
        return 0
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        logger.critical(
            "Fatal error during startup",
            extra={
                "event": "service.startup.failed",
                "error_type": type(e).__name__,
                "error": str(e),
            },
            exc_info=True,
        )
        return 1
    finally:
        if bus is not None:
            bus.shutdown(wait=True)
        close_database()
        logger.info(
            "Channel Digest stopped",
            extra={"event": "service.stopping", "uptime_seconds": round(time.time() - start_time, 2)},
        )


if __name__ == "__main__":
    sys.exit(main())
