"""Xiaomi push channel: relays batched push tasks and reports per-task outcomes."""

from .channels import (
    LandingType,
    MessagingTask,
    Platform,
    PushTask,
    XiaomiChannelClient,
    XiaomiChannelConfig,
    XiaomiSender,
    build_push_message,
    group_by_task_content,
    handle_batch,
    handle_message,
    parse_push_task,
    parse_push_tasks_payload,
    partition_by_platform,
    propagate_batch_outcome,
    publish_push_tasks_event,
    run_push_worker_forever,
    send_batch_via_console,
    send_push_tasks,
)

__all__ = [
    "LandingType",
    "MessagingTask",
    "Platform",
    "PushTask",
    "XiaomiChannelClient",
    "XiaomiChannelConfig",
    "XiaomiSender",
    "build_push_message",
    "group_by_task_content",
    "handle_batch",
    "handle_message",
    "parse_push_task",
    "parse_push_tasks_payload",
    "partition_by_platform",
    "propagate_batch_outcome",
    "publish_push_tasks_event",
    "run_push_worker_forever",
    "send_batch_via_console",
    "send_push_tasks",
]
