"""Xiaomi push channel client.

Mental model refresher:
- This adapter owns the lifecycle of the two platform senders.
- `init_channel_client` must run before `send`; `close` releases both senders.
- `send` reports outcomes only through the task objects it is given.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Sequence

from ..application.dispatch import send_push_tasks
from ..domain.grouping import DEFAULT_BATCH_SIZE
from ..domain.tasks import MessagingTask, Platform
from .config import XiaomiChannelConfig
from .real_senders import XiaomiSender

logger = logging.getLogger(__name__)

SenderFactory = Callable[..., Any]


class XiaomiChannelClient:
    def __init__(self, *, sender_factory: SenderFactory = XiaomiSender) -> None:
        self._sender_factory = sender_factory
        self._senders: dict[Platform, Any] = {}
        self._batch_size = DEFAULT_BATCH_SIZE

    @property
    def initialized(self) -> bool:
        return bool(self._senders)

    def init_channel_client(self, config: XiaomiChannelConfig) -> None:
        self.close()
        common = {
            "base_url": config.base_url,
            "timeout_seconds": config.timeout_seconds,
            "retries": config.retries,
        }
        self._senders = {
            Platform.ANDROID: self._sender_factory(
                config.android_app_secret,
                restricted_package_name=config.android_package_name,
                **common,
            ),
            Platform.IOS: self._sender_factory(config.ios_app_secret, **common),
        }
        self._batch_size = config.batch_size
        logger.info("xiaomi channel client initialised. base_url=%s", config.base_url)

    def send(self, messaging_tasks: Sequence[MessagingTask]) -> None:
        if not messaging_tasks:
            return
        if not self._senders:
            raise RuntimeError("init_channel_client must be called before send")

        senders = {platform: sender.send_batch for platform, sender in self._senders.items()}
        send_push_tasks(messaging_tasks, senders, batch_size=self._batch_size)

    def close(self) -> None:
        senders, self._senders = self._senders, {}
        for sender in senders.values():
            sender.close()
