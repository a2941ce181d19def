#!/usr/bin/env python3
"""Run the Kafka push worker.

Consumes push-task events and relays them to Xiaomi push. Credentials come
from the environment or a `.env` file at the repository root.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

# Allow running this file directly from repository root.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from mipush_channel.adapters.config import load_env_file  # noqa: E402
from mipush_channel.adapters.kafka_runtime import run_push_worker_forever  # noqa: E402


def main() -> int:
    args = parse_args()
    logging.basicConfig(level=args.log_level, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    load_env_file(REPO_ROOT / ".env")
    return run_push_worker_forever()


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run Kafka consumer loop for Xiaomi push tasks.")
    parser.add_argument("--log-level", default="INFO")
    return parser.parse_args()


if __name__ == "__main__":
    sys.exit(main())
