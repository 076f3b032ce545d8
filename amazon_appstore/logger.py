"""
Logger provides printf-style logging with secret redaction
"""

import json
import os
import re
import sys
from typing import Any

# Values that must never reach the log output
_SECRET_PATTERNS = [
    re.compile(r"(Bearer\s+)[^\s\"',]+"),
    re.compile(r"((?:client_secret|access_token)[\"']?\s*[:=]\s*[\"']?)[^\s\"'&,}]+"),
]


def redact(message: str) -> str:
    """Replace bearer tokens and client secrets with ***"""
    for pattern in _SECRET_PATTERNS:
        message = pattern.sub(r"\1***", message)
    return message


class Logger:
    """Logger with debug, info, warn, and error levels"""

    def __init__(self) -> None:
        self._debug_enabled = os.environ.get("APPSTORE_DEBUG_LOGGING", "").lower() == "true"

    @property
    def debug_enabled(self) -> bool:
        return self._debug_enabled

    def debugf(self, format_str: str, *args: Any) -> None:
        """Log debug message if debug logging is enabled"""
        if self._debug_enabled:
            print(f"[DEBUG] {self._format_message(format_str, *args)}", file=sys.stdout)

    def infof(self, format_str: str, *args: Any) -> None:
        """Log info message"""
        print(f"[INFO] {self._format_message(format_str, *args)}", file=sys.stdout)

    def warnf(self, format_str: str, *args: Any) -> None:
        """Log warning message"""
        print(f"[WARN] {self._format_message(format_str, *args)}", file=sys.stderr)

    def errorf(self, format_str: str, *args: Any) -> None:
        """Log error message"""
        print(f"[ERROR] {self._format_message(format_str, *args)}", file=sys.stderr)

    def _format_message(self, format_str: str, *args: Any) -> str:
        """Substitute %s/%d/%v placeholders in order, then redact secrets"""
        message = format_str
        for arg in args:
            if isinstance(arg, (dict, list)):
                value = json.dumps(arg, default=str)
            else:
                value = str(arg)

            for spec in ["%s", "%v", "%d", "%+v"]:
                if spec in message:
                    message = message.replace(spec, value, 1)
                    break

        return redact(message)


def new_logger() -> Logger:
    """Create a new Logger instance"""
    return Logger()
