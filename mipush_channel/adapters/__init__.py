"""Adapter layer: payload mapping, provider senders and transport glue."""

from .config import XiaomiChannelConfig, load_env_file
from .consumer_handler import handle_batch, handle_message
from .fake_senders import send_batch_via_console
from .kafka_runtime import publish_push_tasks_event, run_push_worker_forever
from .payload import parse_push_task, parse_push_tasks_payload
from .real_senders import XiaomiSender
from .xiaomi_client import XiaomiChannelClient

__all__ = [
    "XiaomiChannelClient",
    "XiaomiChannelConfig",
    "XiaomiSender",
    "handle_batch",
    "handle_message",
    "load_env_file",
    "parse_push_task",
    "parse_push_tasks_payload",
    "publish_push_tasks_event",
    "run_push_worker_forever",
    "send_batch_via_console",
]
