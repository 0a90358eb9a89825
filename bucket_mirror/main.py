"""
Main entry point for the bucket mirror service.
"""
import json
import os
import sys
from pathlib import Path

from loguru import logger

from .models.config import MirrorConfig
from .models.errors import MirrorError
from .services.mirror_service import MirrorService


def setup_logging():
    """Configure logging for the mirror service."""
    # Remove default logger
    logger.remove()

    # Add console logger with appropriate format
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        level=os.getenv('LOG_LEVEL', 'INFO').upper()
    )

    log_file = os.getenv('LOG_FILE', 'logs/bucket_mirror.log')
    if log_file.lower() in ('', 'none', 'off'):
        return

    # Add file logger for debugging
    Path(log_file).parent.mkdir(parents=True, exist_ok=True)

    logger.add(
        log_file,
        rotation="10 MB",
        retention="7 days",
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
        level="DEBUG"
    )


def run_reconcile() -> bool:
    """Run a single reconciliation pass. Returns True if every transfer succeeded."""
    logger.info("Starting Bucket Mirror - Reconcile Mode")

    config = MirrorConfig.from_env()
    logger.info(f"Loaded configuration - Bucket: {config.storage.bucket}, local root: {config.local_root}")

    service = MirrorService(config)
    service.check_connection()

    report = service.run_reconcile()
    logger.info(f"Reconcile Results: {json.dumps(report.to_dict(), indent=2, default=str)}")

    return report.failed == 0


def run_watch_mode():
    """Reconcile, then mirror local changes until interrupted."""
    logger.info("Starting Bucket Mirror - Watch Mode")

    config = MirrorConfig.from_env()
    logger.info(f"Loaded configuration - Bucket: {config.storage.bucket}, local root: {config.local_root}")
    logger.info(f"Watch poll interval: {config.poll_interval} seconds")

    service = MirrorService(config)
    stats = service.run()

    logger.info(f"Watch session ended - handled: {stats.events_handled}, "
                f"suppressed writes: {stats.writes_suppressed}, "
                f"succeeded: {stats.operations_succeeded}, failed: {stats.operations_failed}")


def print_help():
    """Print help information for the CLI."""
    help_text = """
Bucket Mirror - Command Line Interface

USAGE:
    python -m bucket_mirror.main [COMMAND]

COMMANDS:
    watch        Reconcile, then mirror local changes to the bucket (default)
    reconcile    Run one reconciliation pass and exit
    status       Test the bucket connection and show configuration
    help         Show this help message

ENVIRONMENT VARIABLES:
    MIRROR_S3_BUCKET         Bucket to mirror (required)
    MIRROR_S3_REGION         Bucket region (default: us-east-2)
    MIRROR_S3_ENDPOINT       Endpoint URL for S3-compatible stores
    MIRROR_S3_ACCESS_KEY     Access key (default: boto3 credential chain)
    MIRROR_S3_SECRET_KEY     Secret key (default: boto3 credential chain)
    MIRROR_LOCAL_ROOT        Local directory to mirror (default: test)
    MIRROR_POLL_INTERVAL     Watch poll interval in seconds (default: 0.1)
    MIRROR_RECURSIVE         Watch subdirectories too (default: true)
    MIRROR_USE_POLLING       Use the polling observer (default: false)
    MIRROR_FAIL_FAST         Stop on the first failed transfer (default: false)
    MIRROR_QUEUE_SIZE        Maximum queued watch events (default: 1000)
    MIRROR_REQUEST_TIMEOUT   Per-request timeout in seconds (default: 30)
    MIRROR_MAX_RETRIES       Attempts per storage call (default: 3)
    LOG_LEVEL                Console log level (default: INFO)
    LOG_FILE                 Log file path, or 'off' (default: logs/bucket_mirror.log)
"""
    print(help_text)


def main():
    """Main entry point with command line argument handling."""
    setup_logging()

    command = sys.argv[1].lower() if len(sys.argv) > 1 else "watch"

    try:
        if command in ["help", "--help", "-h"]:
            print_help()
        elif command == "watch":
            run_watch_mode()
        elif command == "reconcile":
            if not run_reconcile():
                logger.error("Reconcile finished with failed transfers")
                sys.exit(1)
            logger.info("Reconcile command completed successfully")
        elif command == "status":
            config = MirrorConfig.from_env()
            service = MirrorService(config)
            status = service.get_status()
            logger.info(f"Service Status: {json.dumps(status, indent=2)}")
        else:
            logger.error(f"Unknown command: {command}")
            logger.error("Use 'help' to see available commands")
            print_help()
            sys.exit(1)

    except KeyboardInterrupt:
        logger.info("Received interrupt signal, shutting down gracefully")
        sys.exit(0)
    except MirrorError as e:
        logger.error(f"Command failed: {e}")
        sys.exit(1)
    except Exception as e:
        logger.exception(f"Command failed: {str(e)}")
        sys.exit(1)


if __name__ == "__main__":
    main()
