#!/usr/bin/env python3
"""Publish one push-task event to Kafka for local testing."""

from __future__ import annotations

import argparse
import sys
import uuid
from pathlib import Path
from typing import Any

# Allow running this file directly from repository root.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from mipush_channel.adapters.config import load_env_file  # noqa: E402
from mipush_channel.adapters.kafka_runtime import publish_push_tasks_event  # noqa: E402


def main() -> int:
    load_env_file(REPO_ROOT / ".env")
    args = parse_args()
    payload = build_payload(args)
    metadata = publish_push_tasks_event(payload, topic=args.topic)

    print("[PUBLISHED]")
    print(f"topic={metadata['topic']}")
    print(f"partition={metadata['partition']}")
    print(f"offset={metadata['offset']}")
    print(f"event_id={payload['event_id']}")
    print(f"tasks={len(payload['tasks'])}")
    return 0


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Publish a push-task event to Kafka.")
    parser.add_argument("--topic", default=None, help="Defaults to KAFKA_TOPIC_PUSH_TASKS.")
    parser.add_argument("--event-id", default=None)
    parser.add_argument(
        "--client-id",
        action="append",
        required=True,
        help="Prefixed client id, e.g. android_<regid> or ios_<regid>. Repeatable.",
    )
    parser.add_argument("--title", default="Hello")
    parser.add_argument("--content", default="Push from mipush-channel")
    parser.add_argument("--link-url", default=None, help="Use LINK landing with this URL.")
    parser.add_argument("--sf-data", default=None)
    return parser.parse_args()


def build_payload(args: argparse.Namespace) -> dict[str, Any]:
    task: dict[str, Any] = {
        "title": args.title,
        "content": args.content,
        "landing_type": "LINK" if args.link_url else "OPEN_APP",
        "link_url": args.link_url,
        "sf_data": args.sf_data,
    }
    return {
        "event_id": args.event_id or f"evt-{uuid.uuid4()}",
        "tasks": [{"client_id": client_id, **task} for client_id in args.client_id],
    }


if __name__ == "__main__":
    sys.exit(main())
