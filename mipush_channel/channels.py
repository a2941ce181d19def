"""Compatibility facade for push channel functions.

Module layout by abstraction layer:
- adapters: payload mapping, Xiaomi sender and channel client, Kafka glue
- domain: task model, grouping, message construction
- application: dispatch orchestration across platforms and batches
"""

from .adapters.config import XiaomiChannelConfig
from .adapters.consumer_handler import handle_batch, handle_message
from .adapters.fake_senders import send_batch_via_console
from .adapters.kafka_runtime import publish_push_tasks_event, run_push_worker_forever
from .adapters.payload import parse_push_task, parse_push_tasks_payload
from .adapters.real_senders import XiaomiSender
from .adapters.xiaomi_client import XiaomiChannelClient
from .application.dispatch import send_push_tasks
from .domain.grouping import group_by_task_content, partition_by_platform
from .domain.message import build_push_message
from .domain.outcome import propagate_batch_outcome
from .domain.tasks import LandingType, MessagingTask, Platform, PushTask

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
