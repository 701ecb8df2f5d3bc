"""Trusted signing keys for local token verification.

The store holds an immutable snapshot of the service's published keys.
A refresh builds a complete new snapshot and swaps it in with a single
reference assignment, so readers see either the old set or the new set in
full. Lookups never fetch; refreshing is always the caller's decision.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

from cryptography.hazmat.primitives.asymmetric import rsa
from pydantic import TypeAdapter

from .codec import SIGNING_ALGORITHM, load_public_key
from .errors import InvalidConfigError, ProtocolError, UnknownKeyError
from .models import SigningKey
from .telemetry import get_logger, trace_operation

if TYPE_CHECKING:
    from .core.http_executor import AsyncHTTPExecutor

KEYS_PATH = "keys"

_KEY_LIST = TypeAdapter(list[SigningKey])


@dataclass(frozen=True, slots=True)
class TrustedKey:
    """A published key together with its parsed public key."""

    signing_key: SigningKey
    public_key: rsa.RSAPublicKey

    @property
    def key_id(self) -> str:
        return self.signing_key.key_id


@dataclass(frozen=True)
class KeySnapshot:
    """Point-in-time, read-only view of the trusted keys."""

    entries: Mapping[str, TrustedKey] = field(
        default_factory=lambda: MappingProxyType({})
    )
    fetched_at: float = 0.0

    def resolve(self, key_id: str) -> TrustedKey:
        """Get the trusted key for ``key_id``.

        Raises:
            UnknownKeyError: If the key id is not in this snapshot.
        """
        try:
            return self.entries[key_id]
        except KeyError:
            raise UnknownKeyError(key_id) from None

    @property
    def key_ids(self) -> frozenset[str]:
        return frozenset(self.entries)

    def __contains__(self, key_id: object) -> bool:
        return key_id in self.entries

    def __iter__(self) -> Iterator[TrustedKey]:
        return iter(self.entries.values())

    def __len__(self) -> int:
        return len(self.entries)


def build_snapshot(keys: Iterable[SigningKey]) -> KeySnapshot:
    """Parse published keys into a new snapshot.

    Keys for algorithms other than RS256 are skipped. A repeated key id or
    an unreadable RS256 key fails the whole build.

    Raises:
        ProtocolError: On duplicate key ids or unreadable key material.
    """
    logger = get_logger()
    entries: dict[str, TrustedKey] = {}

    for key in keys:
        if key.algorithm.upper() != SIGNING_ALGORITHM:
            logger.warning(
                "Skipping signing key with unsupported algorithm",
                key_id=key.key_id,
                algorithm=key.algorithm,
            )
            continue

        if key.key_id in entries:
            msg = f"Duplicate signing key id: {key.key_id}"
            raise ProtocolError(msg, details={"key_id": key.key_id})

        try:
            public_key = load_public_key(key.public_key_pem)
        except ValueError as e:
            msg = f"Unreadable public key for key id {key.key_id}: {e}"
            raise ProtocolError(msg, details={"key_id": key.key_id}) from e

        entries[key.key_id] = TrustedKey(signing_key=key, public_key=public_key)

    return KeySnapshot(entries=MappingProxyType(entries), fetched_at=time.time())


class KeyStore:
    """Snapshot of the signing keys trusted for local verification."""

    def __init__(
        self,
        executor: AsyncHTTPExecutor | None = None,
        *,
        keys_path: str = KEYS_PATH,
    ) -> None:
        """Initialize an empty key store.

        Args:
            executor: HTTP executor used by ``refresh``. A store without
                one can only be filled with ``replace``.
            keys_path: Path of the key listing endpoint.
        """
        self._executor = executor
        self._keys_path = keys_path
        self._snapshot = KeySnapshot()
        self._refresh_lock = asyncio.Lock()
        self._logger = get_logger()

    @property
    def snapshot(self) -> KeySnapshot:
        """Current snapshot. Hold on to it to read a consistent key set."""
        return self._snapshot

    @property
    def key_ids(self) -> frozenset[str]:
        return self._snapshot.key_ids

    @property
    def age(self) -> float | None:
        """Seconds since the current snapshot was built, None if never loaded."""
        if self._snapshot.fetched_at == 0.0:
            return None
        return max(0.0, time.time() - self._snapshot.fetched_at)

    async def refresh(self) -> None:
        """Fetch the published keys and replace the whole snapshot.

        On any failure, including cancellation, the previous snapshot stays
        in place.

        Raises:
            InvalidConfigError: If the store has no HTTP executor.
            AuthRejectedError: If the service declines the request.
            ProtocolError: On transport failure or an unusable key listing.
        """
        if self._executor is None:
            raise InvalidConfigError("Key store has no HTTP executor to refresh with")

        async with self._refresh_lock:
            with trace_operation("keystore.refresh") as span:
                keys = await self._executor.send_for_model(
                    "GET", self._keys_path, _KEY_LIST
                )
                snapshot = build_snapshot(keys)
                self._snapshot = snapshot
                span.set_attribute("keystore.key_count", len(snapshot))

        self._logger.info("Signing keys refreshed", key_count=len(snapshot))

    def replace(self, keys: Iterable[SigningKey]) -> None:
        """Install a snapshot built from already-fetched keys.

        Raises:
            ProtocolError: On duplicate key ids or unreadable key material.
        """
        self._snapshot = build_snapshot(keys)

    def clear(self) -> None:
        """Discard all trusted keys."""
        self._snapshot = KeySnapshot()

    def lookup(self, key_id: str) -> SigningKey:
        """Get the signing key for ``key_id`` from the current snapshot.

        Raises:
            UnknownKeyError: If the key id is not in the current snapshot.
        """
        return self._snapshot.resolve(key_id).signing_key

    def resolve(self, key_id: str) -> TrustedKey:
        """Get the signing key and its parsed public key.

        Raises:
            UnknownKeyError: If the key id is not in the current snapshot.
        """
        return self._snapshot.resolve(key_id)
