"""Environment-variable configuration for the push channel.

Mental model refresher:
- Credentials and provider knobs come from the process environment.
- Scripts may seed the environment from a local `.env` file first; values
  already exported win.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from ..domain.grouping import DEFAULT_BATCH_SIZE, MAX_BATCH_SIZE

XIAOMI_OFFICIAL_BASE_URL = "https://api.xmpush.xiaomi.com"
XIAOMI_SANDBOX_BASE_URL = "https://sandbox.xmpush.xiaomi.com"


@dataclass(frozen=True)
class XiaomiChannelConfig:
    android_app_secret: str
    ios_app_secret: str
    android_package_name: str | None = None
    base_url: str = XIAOMI_OFFICIAL_BASE_URL
    timeout_seconds: float = 10.0
    retries: int = 3
    batch_size: int = DEFAULT_BATCH_SIZE

    @classmethod
    def from_env(cls) -> XiaomiChannelConfig:
        use_sandbox = env_bool("XIAOMI_PUSH_USE_SANDBOX", default=False)
        default_base_url = XIAOMI_SANDBOX_BASE_URL if use_sandbox else XIAOMI_OFFICIAL_BASE_URL
        base_url = os.getenv("XIAOMI_PUSH_API_BASE_URL", default_base_url).rstrip("/")

        retries = int(os.getenv("XIAOMI_PUSH_RETRIES", "3"))
        if retries < 0:
            raise RuntimeError("XIAOMI_PUSH_RETRIES must be >= 0")

        batch_size = int(os.getenv("XIAOMI_PUSH_BATCH_SIZE", str(DEFAULT_BATCH_SIZE)))
        if not 1 <= batch_size <= MAX_BATCH_SIZE:
            raise RuntimeError(f"XIAOMI_PUSH_BATCH_SIZE must be between 1 and {MAX_BATCH_SIZE}")

        package_name = (os.getenv("XIAOMI_ANDROID_PACKAGE_NAME") or "").strip() or None

        return cls(
            android_app_secret=required_env("XIAOMI_ANDROID_APP_SECRET"),
            ios_app_secret=required_env("XIAOMI_IOS_APP_SECRET"),
            android_package_name=package_name,
            base_url=base_url,
            timeout_seconds=float(os.getenv("XIAOMI_PUSH_TIMEOUT_SECONDS", "10")),
            retries=retries,
            batch_size=batch_size,
        )


def required_env(name: str) -> str:
    value = os.getenv(name)
    if value is None or not value.strip():
        raise RuntimeError(f"Missing required environment variable: {name}")
    return value.strip()


def env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    normalized = raw.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    raise RuntimeError(f"Invalid boolean value for {name}: {raw!r}")


def load_env_file(path: Path) -> None:
    """Seed `os.environ` from a KEY=VALUE file without overriding exported values."""
    if not path.exists():
        return

    for line in path.read_text(encoding="utf-8").splitlines():
        text = line.strip()
        if not text or text.startswith("#") or "=" not in text:
            continue
        key, value = (part.strip() for part in text.split("=", 1))
        if not key:
            continue
        if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
            value = value[1:-1]
        os.environ.setdefault(key, value)
