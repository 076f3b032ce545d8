"""
Version information for the client, used in the User-Agent header
"""

import os
from importlib import metadata

DISTRIBUTION_NAME = "amazon-appstore-submission"


# VERSION resolution order:
# 1. APPSTORE_CLIENT_VERSION environment variable (runtime override)
# 2. installed distribution metadata
# 3. "unknown" as final fallback
def _resolve_version() -> str:
    env_version = os.environ.get("APPSTORE_CLIENT_VERSION")
    if env_version:
        return env_version
    try:
        return metadata.version(DISTRIBUTION_NAME)
    except metadata.PackageNotFoundError:
        return "unknown"


VERSION: str = _resolve_version()
USER_AGENT: str = f"amazon-appstore-python/{VERSION}"
