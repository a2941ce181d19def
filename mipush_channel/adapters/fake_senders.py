"""Fake sender adapters for local smoke tests.

Mental model refresher:
- This is outbound adapter code with the same shape as `XiaomiSender.send_batch`.
- The dispatcher cannot tell it apart from the real provider.
"""

from __future__ import annotations

from typing import Mapping, Sequence

from ..types import SendResult


def send_batch_via_console(
    *,
    message: Mapping[str, str],
    registration_ids: Sequence[str],
) -> SendResult:
    print("[PUSH]")
    print(f"recipients={len(registration_ids)} registration_ids={','.join(registration_ids)}")
    for key, value in message.items():
        print(f"{key}={value}")
    return {"code": 0, "result": "ok", "reason": None, "message_id": None, "trace_id": None}
