"""Shared type aliases for the push channel package."""

from __future__ import annotations

from typing import Any, Callable, Mapping

Payload = Mapping[str, Any]
PushMessage = dict[str, str]
SendResult = dict[str, Any]
BatchResult = dict[str, Any]
ProcessingResult = dict[str, Any]

SendBatchFn = Callable[..., SendResult]
