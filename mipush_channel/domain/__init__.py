"""Domain layer: push task model and batching rules."""

from .grouping import (
    DEFAULT_BATCH_SIZE,
    MAX_BATCH_SIZE,
    group_by_task_content,
    partition_by_platform,
)
from .message import build_android_message, build_ios_message, build_push_message
from .outcome import propagate_batch_outcome
from .tasks import LandingType, MessagingTask, Platform, PushTask, platform_from_client_id

__all__ = [
    "DEFAULT_BATCH_SIZE",
    "MAX_BATCH_SIZE",
    "LandingType",
    "MessagingTask",
    "Platform",
    "PushTask",
    "build_android_message",
    "build_ios_message",
    "build_push_message",
    "group_by_task_content",
    "partition_by_platform",
    "platform_from_client_id",
    "propagate_batch_outcome",
]
