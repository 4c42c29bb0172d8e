"""Configuration constants and .env parsing."""

from __future__ import annotations

import os
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def read_env_file(keys: list[str]) -> dict[str, str]:
    """Parse .env file and return values for requested keys.

    Does NOT load into os.environ; callers decide what to do with values.
    This keeps secrets (like the inject secret) out of the process
    environment so they don't leak to child processes.
    """
    env_file = Path.cwd() / ".env"
    try:
        content = env_file.read_text()
    except OSError:
        return {}

    result: dict[str, str] = {}
    wanted = set(keys)

    for line in content.splitlines():
        trimmed = line.strip()
        if not trimmed or trimmed.startswith("#"):
            continue
        eq_idx = trimmed.find("=")
        if eq_idx == -1:
            continue
        key = trimmed[:eq_idx].strip()
        if key not in wanted:
            continue
        value = trimmed[eq_idx + 1 :].strip()
        if (value.startswith('"') and value.endswith('"')) or (value.startswith("'") and value.endswith("'")):
            value = value[1:-1]
        if value:
            result[key] = value

    return result


_env_config = read_env_file([
    "INJECT_HOST",
    "INJECT_PORT",
    "INJECT_SECRET",
    "IPC_USE_WATCHFILES",
])


def _setting(key: str, default: str = "") -> str:
    return os.environ.get(key) or _env_config.get(key, default)


# Absolute paths
PROJECT_ROOT: Path = Path.cwd()
STORE_DIR: Path = (PROJECT_ROOT / "store").resolve()
GROUPS_DIR: Path = (PROJECT_ROOT / "groups").resolve()
DATA_DIR: Path = (PROJECT_ROOT / "data").resolve()
IPC_DIR: Path = DATA_DIR / "ipc"
IPC_ERRORS_DIR_NAME: str = "errors"
MAIN_GROUP_FOLDER: str = "main"

IPC_POLL_INTERVAL: float = 1.0  # seconds
IPC_USE_WATCHFILES: bool = _setting("IPC_USE_WATCHFILES", "true").lower() != "false"

# Inject endpoint is only started when all three are set
INJECT_HOST: str = _setting("INJECT_HOST")
INJECT_PORT: int = int(_setting("INJECT_PORT", "0") or "0")
INJECT_SECRET: str = _setting("INJECT_SECRET")
INJECT_MAX_BODY_BYTES: int = 64 * 1024


def _resolve_timezone() -> str:
    tz = os.environ.get("TZ", "")
    if not tz:
        try:
            # On Linux, read /etc/timezone or follow the /etc/localtime symlink
            tz_file = Path("/etc/timezone")
            if tz_file.exists():
                tz = tz_file.read_text().strip()
            else:
                # Extract IANA name from path like /usr/share/zoneinfo/America/New_York
                parts = Path("/etc/localtime").resolve().parts
                if "zoneinfo" in parts:
                    tz = "/".join(parts[parts.index("zoneinfo") + 1 :])
        except OSError:
            tz = "UTC"

    if not tz:
        return "UTC"

    try:
        ZoneInfo(tz)
        return tz
    except (ZoneInfoNotFoundError, ValueError):
        return "UTC"


TIMEZONE: str = _resolve_timezone()
