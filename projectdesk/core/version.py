"""Build metadata reported by ``GET /system/version``."""
import os
from datetime import datetime, timezone
from functools import lru_cache
from importlib import metadata
from typing import Dict

from ..config import settings

DISTRIBUTION_NAME = "projectdesk"
APP_VERSION = "0.3.0"

STARTED_AT = datetime.now(timezone.utc)


def installed_version() -> str:
    try:
        return metadata.version(DISTRIBUTION_NAME)
    except metadata.PackageNotFoundError:
        return APP_VERSION


@lru_cache
def get_version_info() -> Dict[str, str]:
    return {
        "version": installed_version(),
        "gitSha": os.getenv("GIT_SHA", "unknown"),
        "buildTime": os.getenv("BUILD_TIME") or STARTED_AT.isoformat(),
        "env": settings.app_env,
    }
