"""Push task model.

Mental model refresher:
- A `MessagingTask` is one unit of outbound work owned by the caller.
- The nested `PushTask` is the message content. Tasks with equal content can
  share a single provider request.
- `success`/`fail_reason` start unset and are written exactly once by the
  dispatcher.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Platform(str, Enum):
    ANDROID = "android"
    IOS = "ios"


class LandingType(str, Enum):
    """Post-tap behaviour of a notification."""

    OPEN_APP = "OPEN_APP"
    LINK = "LINK"
    CUSTOMIZED = "CUSTOMIZED"


@dataclass
class PushTask:
    client_id: str
    msg_title: str = ""
    msg_content: str = ""
    landing_type: LandingType = LandingType.OPEN_APP
    link_url: str | None = None
    customized: dict[str, str] = field(default_factory=dict)
    sf_data: str | None = None

    def content_key(self) -> tuple[Any, ...]:
        """Key shared by tasks that can go out in one request."""
        return (
            self.msg_title,
            self.msg_content,
            self.landing_type,
            self.link_url,
            tuple(sorted(self.customized.items())),
            self.sf_data,
        )


@dataclass
class MessagingTask:
    push_task: PushTask
    platform: Platform | None = None
    success: bool | None = None
    fail_reason: str | None = None

    @classmethod
    def for_push_task(
        cls,
        push_task: PushTask,
        platform: Platform | None = None,
    ) -> MessagingTask:
        """Create a task, deriving the platform from the client id when not given."""
        if platform is None:
            platform = platform_from_client_id(push_task.client_id)
        return cls(push_task=push_task, platform=platform)

    @property
    def registration_id(self) -> str:
        client_id = (self.push_task.client_id or "").strip()
        if self.platform is not None:
            prefix = f"{self.platform.value}_"
            if client_id.startswith(prefix):
                return client_id[len(prefix):].strip()
        return client_id

    def as_result(self) -> dict[str, Any]:
        return {
            "client_id": self.push_task.client_id,
            "platform": self.platform.value if self.platform is not None else None,
            "success": self.success,
            "fail_reason": self.fail_reason,
        }


def platform_from_client_id(client_id: str | None) -> Platform | None:
    """Return the platform named by a `android_` / `ios_` client id prefix."""
    text = (client_id or "").strip()
    for platform in Platform:
        if text.startswith(f"{platform.value}_"):
            return platform
    return None
