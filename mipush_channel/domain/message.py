"""Xiaomi push message construction.

Mental model refresher:
- This module decides what one outbound request looks like for a batch.
- The message is a flat dict of Xiaomi form fields, the adapter only encodes it.
- `extra.notify_effect` picks the tap behaviour:
  "1" opens the launcher activity, "3" opens `extra.web_uri` in a browser.
"""

from __future__ import annotations

from ..types import PushMessage
from .tasks import LandingType, Platform, PushTask

EXTRA_PREFIX = "extra."
EXTRA_NOTIFY_EFFECT = "extra.notify_effect"
EXTRA_WEB_URI = "extra.web_uri"
EXTRA_SF_DATA = "extra.sf_data"

# Custom keys that would clash with extras set from the task itself.
RESERVED_EXTRA_KEYS = frozenset({"notify_effect", "web_uri", "intent_uri", "sf_data"})

NOTIFY_LAUNCHER_ACTIVITY = "1"
NOTIFY_WEB = "3"


def build_push_message(platform: Platform, push_task: PushTask) -> PushMessage:
    if platform is Platform.ANDROID:
        return build_android_message(push_task)
    return build_ios_message(push_task)


def build_android_message(push_task: PushTask) -> PushMessage:
    message: PushMessage = {
        "title": push_task.msg_title,
        "description": push_task.msg_content,
        "pass_through": "0",
        "notify_type": "-1",
    }
    message.update(_landing_extras(push_task))
    return message


def build_ios_message(push_task: PushTask) -> PushMessage:
    message: PushMessage = {
        "description": push_task.msg_content,
        "aps_proper_fields.title": push_task.msg_title,
        "aps_proper_fields.body": push_task.msg_content,
    }
    message.update(_landing_extras(push_task))
    return message


def _landing_extras(push_task: PushTask) -> PushMessage:
    extras: PushMessage = {}
    if push_task.landing_type is LandingType.OPEN_APP:
        extras[EXTRA_NOTIFY_EFFECT] = NOTIFY_LAUNCHER_ACTIVITY
    elif push_task.landing_type is LandingType.LINK:
        extras[EXTRA_NOTIFY_EFFECT] = NOTIFY_WEB
        extras[EXTRA_WEB_URI] = push_task.link_url or ""
    elif push_task.landing_type is LandingType.CUSTOMIZED:
        for key, value in push_task.customized.items():
            name = key.strip()
            if name and name not in RESERVED_EXTRA_KEYS and value is not None:
                extras[f"{EXTRA_PREFIX}{name}"] = str(value)

    if push_task.sf_data is not None:
        extras[EXTRA_SF_DATA] = push_task.sf_data
    return extras
