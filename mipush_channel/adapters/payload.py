"""Payload adapter functions.

Mental model refresher:
- This is an adapter/edge module.
- It translates transport-shaped data (Kafka message payload) into the
  `MessagingTask` objects used by application/domain code.
- The platform is fixed here, at task creation: an explicit `platform` field
  wins, otherwise the `android_` / `ios_` client id prefix decides.
"""

from __future__ import annotations

from typing import Any

from ..domain.tasks import LandingType, MessagingTask, Platform, PushTask
from ..types import Payload


def parse_push_tasks_payload(payload: Payload) -> list[MessagingTask]:
    """Normalize a Kafka-style push event into messaging tasks."""
    raw_tasks = payload.get("tasks")
    if not isinstance(raw_tasks, list):
        raise ValueError("Missing required field: tasks")
    return [
        parse_push_task(item, field_name=f"tasks[{index}]")
        for index, item in enumerate(raw_tasks)
    ]


def parse_push_task(item: Any, *, field_name: str = "task") -> MessagingTask:
    if not isinstance(item, dict):
        raise ValueError(f"{field_name} must be an object")

    push_task = PushTask(
        client_id=_as_required_str(item.get("client_id"), f"{field_name}.client_id"),
        msg_title=str(item.get("title") or ""),
        msg_content=str(item.get("content") or ""),
        landing_type=_as_landing_type(item.get("landing_type"), f"{field_name}.landing_type"),
        link_url=_as_optional_str(item.get("link_url")),
        customized=_as_str_map(item.get("customized"), f"{field_name}.customized"),
        sf_data=_as_opaque_str(item.get("sf_data"), f"{field_name}.sf_data"),
    )
    platform = _as_platform(item.get("platform"), f"{field_name}.platform")
    return MessagingTask.for_push_task(push_task, platform)


def _as_required_str(value: Any, field_name: str) -> str:
    text = str(value).strip() if value is not None else ""
    if not text:
        raise ValueError(f"Missing required field: {field_name}")
    return text


def _as_optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _as_landing_type(value: Any, field_name: str) -> LandingType:
    if value is None:
        return LandingType.OPEN_APP
    try:
        return LandingType(str(value).strip().upper())
    except ValueError as exc:
        raise ValueError(f"Invalid {field_name}: {value!r}") from exc


def _as_platform(value: Any, field_name: str) -> Platform | None:
    if value is None or not str(value).strip():
        return None
    try:
        return Platform(str(value).strip().lower())
    except ValueError as exc:
        raise ValueError(f"Invalid {field_name}: {value!r}") from exc


def _as_opaque_str(value: Any, field_name: str) -> str | None:
    """Pass an opaque string through byte-for-byte."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"{field_name} must be a string, got {type(value).__name__}")
    return value


def _as_str_map(value: Any, field_name: str) -> dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{field_name} must be an object")
    result: dict[str, str] = {}
    for key, item in value.items():
        text = _as_opaque_str(item, f"{field_name}.{key}")
        if text is not None:
            result[str(key)] = text
    return result
