"""Application layer: push dispatch orchestration."""

from .dispatch import describe_send_failure, flush_platform_tasks, send_push_tasks

__all__ = [
    "describe_send_failure",
    "flush_platform_tasks",
    "send_push_tasks",
]
