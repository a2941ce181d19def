"""Task partitioning and content grouping.

Mental model refresher:
- Domain modules hold the batching rules, nothing here talks to a provider.
- Partition by platform first, then group equal content, then cut each group
  into provider-sized batches.
"""

from __future__ import annotations

from typing import Any, Iterable, Sequence

from .tasks import MessagingTask, Platform

# Xiaomi accepts up to 1000 registration ids per request.
MAX_BATCH_SIZE = 1000
DEFAULT_BATCH_SIZE = 800


def partition_by_platform(
    tasks: Iterable[MessagingTask],
) -> tuple[dict[Platform, list[MessagingTask]], list[MessagingTask]]:
    """Split tasks into per-platform lists plus the tasks with no platform."""
    by_platform: dict[Platform, list[MessagingTask]] = {platform: [] for platform in Platform}
    unrouted: list[MessagingTask] = []
    for task in tasks:
        if task.platform is None:
            unrouted.append(task)
        else:
            by_platform[task.platform].append(task)
    return by_platform, unrouted


def group_by_task_content(
    tasks: Sequence[MessagingTask],
    batch_size: int,
) -> list[list[MessagingTask]]:
    """Group tasks with equal push content into batches of at most `batch_size`.

    Groups keep the order in which their content was first seen, and tasks keep
    their order inside each group.
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")

    groups: dict[tuple[Any, ...], list[list[MessagingTask]]] = {}
    for task in tasks:
        chunks = groups.setdefault(task.push_task.content_key(), [[]])
        if len(chunks[-1]) >= batch_size:
            chunks.append([])
        chunks[-1].append(task)

    return [chunk for chunks in groups.values() for chunk in chunks]
