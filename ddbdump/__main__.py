# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Command-line entry point: ``python -m ddbdump``.

Everything is configured through environment variables, see
ddbdump.env.create_config_from_env.
"""

import asyncio
import logging
import os
import sys

import structlog

from ddbdump.core import initialize_dump_state, run
from ddbdump.env import create_config_from_env
from ddbdump.exceptions import DumpError

logger = structlog.get_logger()


def configure_logging(log_format: str | None = None) -> None:
    """Console output by default; DDBDUMP_LOG_FORMAT=json for one JSON object per line."""
    log_format = log_format or os.environ.get("DDBDUMP_LOG_FORMAT", "console")
    renderer = (
        structlog.processors.JSONRenderer()
        if log_format.lower() == "json"
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.INFO),
        cache_logger_on_first_use=True,
    )


async def _main() -> None:
    config = create_config_from_env()
    state = initialize_dump_state(config)
    await run(config, state)


def main() -> int:
    configure_logging()
    try:
        asyncio.run(_main())
    except DumpError as e:
        logger.error("run_failed", error=e.message, details=e.details)
        return 1
    except KeyboardInterrupt:
        logger.warning("run_interrupted")
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
