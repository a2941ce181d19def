"""Application orchestration for push task dispatch.

Mental model refresher:
- Application layer coordinates the use-case flow across domain modules.
- In this project it:
  1) partitions tasks by platform
  2) groups each platform's tasks into content batches
  3) sends one request per batch through the platform sender
  4) writes the single batch outcome back onto every task
- Sender failures never escape: they become `fail_reason` on the tasks.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from ..domain.grouping import DEFAULT_BATCH_SIZE, group_by_task_content, partition_by_platform
from ..domain.message import build_push_message
from ..domain.outcome import propagate_batch_outcome
from ..domain.tasks import MessagingTask, Platform
from ..types import BatchResult, ProcessingResult, SendBatchFn, SendResult

logger = logging.getLogger(__name__)

MISSING_REGISTRATION_ID = "missing registration id"


def send_push_tasks(
    tasks: Sequence[MessagingTask],
    senders: Mapping[Platform, SendBatchFn],
    *,
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> ProcessingResult:
    """Dispatch tasks in content batches and mutate each task's outcome in place."""
    by_platform, unrouted = partition_by_platform(tasks)
    for task in unrouted:
        logger.warning("no platform prefix, task skipped. client_id=%r", task.push_task.client_id)

    batch_results: list[BatchResult] = []
    for platform in (Platform.ANDROID, Platform.IOS):
        batch_results.extend(
            flush_platform_tasks(
                platform,
                by_platform[platform],
                senders.get(platform),
                batch_size=batch_size,
            )
        )

    return {
        "batch_results": batch_results,
        "unrouted_client_ids": [task.push_task.client_id for task in unrouted],
        "all_dispatched_succeeded": all(item["success"] for item in batch_results),
    }


def flush_platform_tasks(
    platform: Platform,
    tasks: Sequence[MessagingTask],
    send_batch: SendBatchFn | None,
    *,
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> list[BatchResult]:
    """Send one platform's tasks, one request per content batch."""
    if not tasks:
        return []

    if send_batch is None:
        reason = f"no sender configured for platform {platform.value}"
        propagate_batch_outcome(tasks, reason)
        return [_batch_result(platform, tasks, reason)]

    results: list[BatchResult] = []
    sendable: list[MessagingTask] = []
    for task in tasks:
        if task.registration_id:
            sendable.append(task)
        else:
            propagate_batch_outcome([task], MISSING_REGISTRATION_ID)
            results.append(_batch_result(platform, [task], MISSING_REGISTRATION_ID))

    for batch in group_by_task_content(sendable, batch_size):
        # Grouped tasks share content, so the first one stands for the batch.
        message = build_push_message(platform, batch[0].push_task)
        registration_ids = [task.registration_id for task in batch]
        fail_reason = _send_batch(send_batch, message, registration_ids, platform=platform)
        propagate_batch_outcome(batch, fail_reason)
        results.append(_batch_result(platform, batch, fail_reason))

    return results


def describe_send_failure(result: SendResult | Any) -> str | None:
    """Return a failure reason for a provider result, or None when it succeeded.

    Anything that is not a mapping with a zero `code` counts as a failure.
    """
    if not isinstance(result, Mapping):
        return f"invalid provider result: {type(result).__name__}"
    raw_code = result.get("code") or 0
    try:
        code: int | None = int(raw_code)
    except (TypeError, ValueError):
        code = None
    if code == 0:
        return None
    reason = result.get("reason") or result.get("description")
    if reason:
        return str(reason)
    return f"xiaomi push error code {raw_code}"


def _send_batch(
    send_batch: SendBatchFn,
    message: Mapping[str, str],
    registration_ids: list[str],
    *,
    platform: Platform,
) -> str | None:
    logger.debug(
        "send request. platform=%s message=%s recipients=%d",
        platform.value,
        message,
        len(registration_ids),
    )
    try:
        result = send_batch(message=dict(message), registration_ids=registration_ids)
        logger.debug("send finished. platform=%s result=%s", platform.value, result)
        fail_reason = describe_send_failure(result)
    except Exception as exc:
        logger.warning(
            "push send raised. platform=%s recipients=%d",
            platform.value,
            len(registration_ids),
            exc_info=True,
        )
        return str(exc) or exc.__class__.__name__

    if fail_reason is not None:
        logger.warning(
            "push send rejected. platform=%s recipients=%d reason=%s",
            platform.value,
            len(registration_ids),
            fail_reason,
        )
    return fail_reason


def _batch_result(
    platform: Platform,
    tasks: Sequence[MessagingTask],
    fail_reason: str | None,
) -> dict[str, Any]:
    return {
        "platform": platform.value,
        "size": len(tasks),
        "success": fail_reason is None,
        "error": fail_reason,
    }
