"""User-configurable values loaded from environment variables."""

import os
from pathlib import Path
from zoneinfo import ZoneInfo

from dotenv import load_dotenv

load_dotenv()


def _detect_local_tz() -> str:
    """Detect the system's IANA timezone name. Falls back to UTC."""
    # Debian/Ubuntu: plain text file with IANA name
    etc_tz = Path("/etc/timezone")
    if etc_tz.exists():
        name = etc_tz.read_text().strip()
        if name:
            return name

    # Most Linux/WSL: /etc/localtime is a symlink into zoneinfo
    localtime = Path("/etc/localtime")
    if localtime.is_symlink():
        target = str(localtime.resolve())
        marker = "/zoneinfo/"
        idx = target.find(marker)
        if idx != -1:
            return target[idx + len(marker) :]

    return "UTC"


TZ: ZoneInfo = ZoneInfo(os.environ.get("PUMP_ALERTS_TIMEZONE") or _detect_local_tz())

DATA_DIR: Path = Path(
    os.environ.get("PUMP_ALERTS_DATA_DIR") or Path.home() / ".pump-alerts"
).expanduser()

SYNC_SECONDS: int = int(os.environ.get("PUMP_ALERTS_SYNC_SECONDS") or 10)

LOG_LEVEL: str = (os.environ.get("PUMP_ALERTS_LOG_LEVEL") or "INFO").upper()
