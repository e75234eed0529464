"""In-memory token metadata cache."""
from typing import Optional

from ..models.schemas import TokenInfo


class TokenCache:
    """
    Token metadata keyed by lowercase address.

    Entries live for the process lifetime. Writes are idempotent, so
    concurrent resolutions of the same token need no locking.
    """

    def __init__(self) -> None:
        self._tokens: dict[str, TokenInfo] = {}

    @staticmethod
    def _key(address: str) -> str:
        return address.lower()

    def get(self, address: str) -> Optional[TokenInfo]:
        """Get cached token info."""
        return self._tokens.get(self._key(address))

    def set(self, address: str, info: TokenInfo) -> None:
        """Cache token info."""
        self._tokens[self._key(address)] = info

    def clear(self) -> int:
        """Drop all entries, returning how many were removed."""
        count = len(self._tokens)
        self._tokens.clear()
        return count

    def __contains__(self, address: str) -> bool:
        return self._key(address) in self._tokens

    def __len__(self) -> int:
        return len(self._tokens)
