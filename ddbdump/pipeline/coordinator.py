# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
ddbdump Pipeline Coordinator - Run a producer and a consumer side by side.

Both coroutines share one RecordChannel. The caller waits on a single
completion barrier; if either side fails, the other is cancelled and the
failure is re-raised (producer first, as it is usually the root cause).
"""

import asyncio
from typing import Any, Coroutine, Tuple

import structlog

logger = structlog.get_logger()


async def run_pipeline(
    producer: Coroutine[Any, Any, Any],
    consumer: Coroutine[Any, Any, Any],
    name: str = "pipeline",
) -> Tuple[Any, Any]:
    """
    Run producer and consumer concurrently and wait for both.

    Args:
        producer: Coroutine that sends records and closes the channel
        consumer: Coroutine that drains the channel
        name: Label used for task names and log events

    Returns:
        Tuple of (producer_result, consumer_result)
    """
    producer_task = asyncio.create_task(producer, name=f"{name}-producer")
    consumer_task = asyncio.create_task(consumer, name=f"{name}-consumer")
    tasks = {producer_task, consumer_task}

    try:
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
    except asyncio.CancelledError:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise

    if pending:
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)

    # Retrieve every failure so none is reported later as never retrieved
    errors = []
    for task in (producer_task, consumer_task):
        if task in done and not task.cancelled() and task.exception() is not None:
            logger.error(
                "pipeline_task_failed",
                pipeline=name,
                task=task.get_name(),
                error=str(task.exception()),
            )
            errors.append(task.exception())

    if errors:
        raise errors[0]

    return producer_task.result(), consumer_task.result()
