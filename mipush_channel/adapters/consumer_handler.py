"""Consumer-handler adapter functions (Kafka-like flow without Kafka).

Mental model refresher:
- This is the controller-like entrypoint for one polled record.
- Flow:
  record -> parse adapter -> channel send -> commit/no-commit decision
- Outcomes are read back from the mutated tasks; tasks left without a
  platform are reported but do not block the commit.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, Sequence

from ..domain.tasks import MessagingTask
from ..types import Payload
from .payload import parse_push_tasks_payload

Record = Mapping[str, Any]
CommitFn = Callable[[Record], None]
RejectFn = Callable[[Record, str], None]
SendTasksFn = Callable[[Sequence[MessagingTask]], None]


def handle_message(
    record: Record,
    *,
    send_tasks: SendTasksFn,
    commit: CommitFn,
    reject: RejectFn | None = None,
) -> dict[str, Any]:
    """Handle one incoming record and decide commit/no-commit.

    Commit policy:
    - Commit only when every dispatched task succeeded.
    - Do not commit on parse failures or push failures.
    """
    try:
        tasks = parse_push_tasks_payload(_get_record_payload(record))
    except Exception as exc:
        error = f"parse_failed: {exc}"
        if reject is not None:
            reject(record, error)
        return {
            "status": "parse_failed",
            "record_meta": _record_meta(record),
            "task_results": [],
            "unrouted_client_ids": [],
            "should_commit": False,
            "error": error,
        }

    send_tasks(tasks)

    dispatched = [task for task in tasks if task.success is not None]
    should_commit = all(task.success for task in dispatched)

    if should_commit:
        commit(record)
        status = "processed_and_committed"
        error = None
    else:
        status = "processed_not_committed"
        error = "one_or_more_push_tasks_failed"
        if reject is not None:
            reject(record, error)

    return {
        "status": status,
        "record_meta": _record_meta(record),
        "task_results": [task.as_result() for task in tasks],
        "unrouted_client_ids": [
            task.push_task.client_id for task in tasks if task.success is None
        ],
        "should_commit": should_commit,
        "error": error,
    }


def handle_batch(
    records: Sequence[Record],
    *,
    send_tasks: SendTasksFn,
    commit: CommitFn,
    reject: RejectFn | None = None,
) -> list[dict[str, Any]]:
    """Handle a batch of records sequentially using `handle_message`."""
    return [
        handle_message(record, send_tasks=send_tasks, commit=commit, reject=reject)
        for record in records
    ]


def _get_record_payload(record: Record) -> Payload:
    payload = record.get("value")
    if not isinstance(payload, dict):
        raise ValueError("record.value must be a dict payload")
    return payload


def _record_meta(record: Record) -> dict[str, Any]:
    return {
        "topic": record.get("topic"),
        "partition": record.get("partition"),
        "offset": record.get("offset"),
    }
