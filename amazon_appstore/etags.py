"""
In-memory ETag store used for If-Match concurrency control
"""

from __future__ import annotations


def etag_key(*parts: str) -> str:
    """Joins resource identifiers into a store key, e.g. ("E1", "en-US") -> "E1-en-US" """
    return "-".join(parts)


class ETagStore:
    """Maps resource keys to the last ETag seen for that resource.

    Entries live as long as the owning client. There is no locking; callers
    sharing one client across threads must serialize access themselves.
    """

    def __init__(self) -> None:
        self._etags: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        """Get the stored ETag for key, or None when it was never fetched"""
        return self._etags.get(key)

    def set(self, key: str, etag: str) -> None:
        """Overwrite the ETag for key"""
        self._etags[key] = etag

    def remove(self, key: str) -> None:
        """Forget the ETag for a resource that was deleted remotely"""
        self._etags.pop(key, None)

    def clear(self) -> None:
        self._etags.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._etags

    def __len__(self) -> int:
        return len(self._etags)
