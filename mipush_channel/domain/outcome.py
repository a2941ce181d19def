"""Batch outcome propagation."""

from __future__ import annotations

from typing import Iterable

from .tasks import MessagingTask


def propagate_batch_outcome(tasks: Iterable[MessagingTask], fail_reason: str | None) -> None:
    """Write one batch outcome onto every task in the batch."""
    for task in tasks:
        task.fail_reason = fail_reason
        task.success = fail_reason is None
