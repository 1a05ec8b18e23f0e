"""Installation ledger persisted in a ConfigMap.

Each installed addon has one key in the ConfigMap's ``data`` whose value is
the JSON document ``{"version": ..., "timestamp": ...}``. Presence of the key
is the only signal the controller uses to decide whether an addon is
installed.
"""

import json
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone

from kubernetes import client
from kubernetes.client.exceptions import ApiException

from clusteraddon.cluster.kube import ensure_namespace
from clusteraddon.utils.errors import LedgerConflictError, LedgerUpdateError

logger = logging.getLogger(__name__)

DEFAULT_LEDGER_NAME = "kcm-addons"
DEFAULT_LEDGER_NAMESPACE = "kcm-system"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


@dataclass
class LedgerEntry:
    """Install record of one addon."""

    version: str
    timestamp: datetime | None = None
    # Stored value, written back verbatim unless the entry is replaced.
    raw: str | None = field(default=None, compare=False, repr=False)

    def to_json(self) -> str:
        if self.raw is not None:
            return self.raw
        return json.dumps(
            {
                "version": self.version,
                "timestamp": format_timestamp(self.timestamp) if self.timestamp else None,
            }
        )

    @classmethod
    def from_json(cls, raw: str) -> "LedgerEntry":
        """Decode an entry; unreadable values still count as installed."""
        try:
            data = json.loads(raw)
            timestamp = data.get("timestamp")
            return cls(
                version=str(data.get("version") or ""),
                timestamp=parse_timestamp(timestamp) if timestamp else None,
                raw=raw,
            )
        except (ValueError, TypeError, AttributeError):
            logger.warning(f"Unreadable ledger entry, treating as installed: {raw!r}")
            return cls(version="", raw=raw)


@dataclass
class LedgerRecord:
    """Snapshot of the ledger ConfigMap."""

    entries: dict[str, LedgerEntry] = field(default_factory=dict)
    resource_version: str | None = None

    def __contains__(self, addon: object) -> bool:
        return addon in self.entries

    def get(self, addon: str) -> LedgerEntry | None:
        return self.entries.get(addon)

    def to_data(self) -> dict[str, str]:
        return {name: entry.to_json() for name, entry in self.entries.items()}


class InstallationLedger:
    """Read and mutate the installation ledger under optimistic concurrency."""

    def __init__(
        self,
        core: client.CoreV1Api,
        name: str = DEFAULT_LEDGER_NAME,
        namespace: str = DEFAULT_LEDGER_NAMESPACE,
        max_attempts: int = 5,
        backoff: float = 0.01,
        clock: Callable[[], datetime] = _utcnow,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize ledger.

        Args:
            core: CoreV1Api client
            name: ConfigMap name
            namespace: ConfigMap namespace
            max_attempts: Write attempts before giving up on conflicts
            backoff: Initial delay between attempts, doubled after each conflict
            clock: Source of install timestamps
            sleep: Sleep function used between attempts
        """
        self.core = core
        self.name = name
        self.namespace = namespace
        self.max_attempts = max_attempts
        self.backoff = backoff
        self.clock = clock
        self.sleep = sleep

    def _record_from(self, config_map: client.V1ConfigMap) -> LedgerRecord:
        data = config_map.data or {}
        return LedgerRecord(
            entries={name: LedgerEntry.from_json(raw) for name, raw in data.items()},
            resource_version=config_map.metadata.resource_version,
        )

    def _read(self) -> client.V1ConfigMap:
        return self.core.read_namespaced_config_map(self.name, self.namespace)

    def read(self) -> LedgerRecord:
        """Read the ledger without creating it.

        Returns:
            Current ledger record, empty if the ConfigMap does not exist
        """
        try:
            return self._record_from(self._read())
        except ApiException as e:
            if e.status != 404:
                raise
        return LedgerRecord()

    def load(self) -> LedgerRecord:
        """Read the ledger, creating an empty one on first use.

        Returns:
            Current ledger record

        Raises:
            ApiException: If the ConfigMap cannot be read or created
        """
        try:
            return self._record_from(self._read())
        except ApiException as e:
            if e.status != 404:
                raise

        logger.info(f"Creating ledger {self.namespace}/{self.name}")
        ensure_namespace(self.core, self.namespace)
        body = client.V1ConfigMap(
            metadata=client.V1ObjectMeta(name=self.name, namespace=self.namespace),
            data={},
        )
        try:
            created = self.core.create_namespaced_config_map(self.namespace, body)
        except ApiException as e:
            if e.status != 409:
                raise
            # Another writer created it first.
            return self._record_from(self._read())
        return self._record_from(created)

    def save(self, record: LedgerRecord) -> LedgerRecord:
        """Conditionally replace the ledger with ``record``.

        Raises:
            LedgerConflictError: If the ledger changed since ``record`` was loaded
            ApiException: On any other API failure
        """
        body = client.V1ConfigMap(
            metadata=client.V1ObjectMeta(
                name=self.name,
                namespace=self.namespace,
                resource_version=record.resource_version,
            ),
            data=record.to_data(),
        )
        try:
            saved = self.core.replace_namespaced_config_map(self.name, self.namespace, body)
        except ApiException as e:
            if e.status == 409:
                raise LedgerConflictError(
                    f"ledger {self.namespace}/{self.name} changed since it was read"
                ) from e
            raise
        return self._record_from(saved)

    def update(
        self, mutate: Callable[[LedgerRecord], None], addon: str | None = None
    ) -> LedgerRecord:
        """Apply ``mutate`` to a fresh copy of the ledger and save it.

        On a write conflict the ledger is re-read and the same mutation is
        applied again, up to ``max_attempts`` times with exponential backoff.

        Args:
            mutate: Function editing a record in place
            addon: Addon name for error context

        Returns:
            The saved record

        Raises:
            LedgerUpdateError: If the attempts are exhausted or the API fails
        """
        delay = self.backoff
        for attempt in range(1, self.max_attempts + 1):
            try:
                record = self.load()
                mutate(record)
                return self.save(record)
            except LedgerConflictError as e:
                logger.debug(f"Ledger conflict on attempt {attempt}/{self.max_attempts}: {e}")
                if attempt == self.max_attempts:
                    raise LedgerUpdateError(
                        f"failed to update ledger after {self.max_attempts} attempts: {e}",
                        addon=addon,
                    ) from e
                self.sleep(delay)
                delay *= 2
            except ApiException as e:
                raise LedgerUpdateError(
                    f"failed to update ledger: {e.status} {e.reason}", addon=addon
                ) from e
        raise LedgerUpdateError("ledger retry budget is empty", addon=addon)

    def mark_installed(self, addon: str, version: str) -> LedgerEntry:
        """Record ``addon`` as installed at ``version`` now."""
        entry = LedgerEntry(version=version, timestamp=self.clock())

        def mutate(record: LedgerRecord) -> None:
            record.entries[addon] = entry

        self.update(mutate, addon=addon)
        logger.info(f"[{addon}] Recorded as installed (version '{version}')")
        return entry

    def mark_uninstalled(self, addon: str) -> None:
        """Remove ``addon`` from the ledger."""

        def mutate(record: LedgerRecord) -> None:
            record.entries.pop(addon, None)

        self.update(mutate, addon=addon)
        logger.info(f"[{addon}] Removed from ledger")

    def get(self, addon: str) -> LedgerEntry | None:
        return self.load().get(addon)

    def is_installed(self, addon: str) -> bool:
        return addon in self.load()
