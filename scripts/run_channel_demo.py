#!/usr/bin/env python3
"""Run push dispatch locally against the console sender.

Shows partitioning, content grouping and batch splitting without Xiaomi
credentials or Kafka.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Allow running this file directly from repository root.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from mipush_channel.channels import (  # noqa: E402
    Platform,
    parse_push_tasks_payload,
    send_batch_via_console,
    send_push_tasks,
)


def main() -> int:
    args = parse_args()
    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s %(message)s")
    payload = load_payload(args.payload_file)
    tasks = parse_push_tasks_payload(payload)
    result = send_push_tasks(
        tasks,
        {Platform.ANDROID: send_batch_via_console, Platform.IOS: send_batch_via_console},
        batch_size=args.batch_size,
    )

    print("")
    print("[SUMMARY]")
    for item in result["batch_results"]:
        print(
            f"platform={item['platform']} size={item['size']} "
            f"success={item['success']} error={item['error']}"
        )
    for task in tasks:
        print(
            f"client_id={task.push_task.client_id} success={task.success} "
            f"fail_reason={task.fail_reason}"
        )
    print(f"unrouted={result['unrouted_client_ids']}")
    print(f"all_dispatched_succeeded={result['all_dispatched_succeeded']}")
    return 0 if result["all_dispatched_succeeded"] else 1


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Dispatch sample push tasks to the console.")
    parser.add_argument(
        "--payload-file",
        type=Path,
        default=None,
        help="Optional JSON file matching the push.tasks event shape.",
    )
    parser.add_argument("--batch-size", type=int, default=2)
    parser.add_argument("--log-level", default="INFO")
    return parser.parse_args()


def load_payload(payload_file: Path | None) -> dict[str, Any]:
    if payload_file is None:
        return sample_payload()
    with payload_file.open("r", encoding="utf-8") as file_handle:
        return json.load(file_handle)


def sample_payload() -> dict[str, Any]:
    promo = {"title": "Weekend sale", "content": "Everything 20% off", "landing_type": "OPEN_APP"}
    return {
        "event_id": "evt-demo-1",
        "tasks": [
            {"client_id": "android_reg-1", **promo},
            {"client_id": "android_reg-2", **promo},
            {"client_id": "android_reg-3", **promo},
            {
                "client_id": "ios_reg-4",
                "title": "Order shipped",
                "content": "Track your parcel",
                "landing_type": "LINK",
                "link_url": "https://example.com/orders/42",
                "sf_data": '{"plan_id":"42"}',
            },
            {"client_id": "web_reg-5", **promo},
        ],
    }


if __name__ == "__main__":
    sys.exit(main())
