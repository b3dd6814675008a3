"""Authentication headers attached to facilitator calls."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Tuple

HeaderPairs = Tuple[Tuple[str, str], ...]


class AuthHeaderProvider(Protocol):
    """Supplies per-operation headers for facilitator requests."""

    def for_verify(self) -> HeaderPairs: ...

    def for_settle(self) -> HeaderPairs: ...

    def for_supported(self) -> HeaderPairs: ...


@dataclass(frozen=True)
class StaticAuthHeaders:
    """Fixed header sets, one per facilitator operation.

    Instances are immutable and compare by value, so two configurations with the
    same headers are interchangeable.
    """

    verify: HeaderPairs = ()
    settle: HeaderPairs = ()
    supported: HeaderPairs = ()

    @classmethod
    def bearer(cls, token: str) -> "StaticAuthHeaders":
        """Use the same bearer token for every operation."""
        pair = (("Authorization", f"Bearer {token}"),)
        return cls(verify=pair, settle=pair, supported=pair)

    def for_verify(self) -> HeaderPairs:
        return self.verify

    def for_settle(self) -> HeaderPairs:
        return self.settle

    def for_supported(self) -> HeaderPairs:
        return self.supported
