"""ClusterAddon custom resource model.

The resource is handled as the plain dict returned by the API server. This
module gives it typed accessors for the fields the reconciler reads and
writes, so updates round-trip every field the controller does not know about.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

GROUP = "manage.ksctl.com"
VERSION = "v1"
PLURAL = "clusteraddons"
KIND = "ClusterAddon"
FINALIZER = "finalizer.manage.ksctl.com"


class StatusCode(str, Enum):
    """Aggregate reconciliation state of a ClusterAddon."""

    PENDING = "Pending"
    SUCCESS = "Success"
    FAILED = "Failed"


@dataclass(frozen=True)
class AddonDeclaration:
    """One entry of ``spec.addons``."""

    name: str
    version: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AddonDeclaration":
        version = data.get("version")
        return cls(name=str(data.get("name", "")), version=str(version) if version else None)


class ClusterAddon:
    """Accessor wrapper around a ClusterAddon object body."""

    def __init__(self, body: dict[str, Any]):
        self.body = body

    @property
    def metadata(self) -> dict[str, Any]:
        return self.body.setdefault("metadata", {})

    @property
    def name(self) -> str:
        return self.metadata.get("name", "")

    @property
    def resource_version(self) -> str | None:
        return self.metadata.get("resourceVersion")

    @property
    def deletion_timestamp(self) -> str | None:
        return self.metadata.get("deletionTimestamp")

    @property
    def is_being_deleted(self) -> bool:
        return bool(self.deletion_timestamp)

    @property
    def addons(self) -> list[AddonDeclaration]:
        spec = self.body.get("spec") or {}
        return [AddonDeclaration.from_dict(item) for item in spec.get("addons") or []]

    # Finalizers

    @property
    def finalizers(self) -> list[str]:
        return list(self.metadata.get("finalizers") or [])

    def has_finalizer(self, finalizer: str = FINALIZER) -> bool:
        return finalizer in self.finalizers

    def add_finalizer(self, finalizer: str = FINALIZER) -> None:
        if not self.has_finalizer(finalizer):
            self.metadata["finalizers"] = self.finalizers + [finalizer]

    def remove_finalizer(self, finalizer: str = FINALIZER) -> None:
        self.metadata["finalizers"] = [f for f in self.finalizers if f != finalizer]

    # Status

    @property
    def status(self) -> dict[str, Any]:
        return self.body.setdefault("status", {})

    @property
    def status_code(self) -> StatusCode | None:
        code = self.status.get("statusCode")
        return StatusCode(code) if code else None

    @property
    def reason_of_failure(self) -> str:
        return self.status.get("reasonOfFailure", "")

    def set_status(self, code: StatusCode, reason: str = "") -> None:
        """Set the status code and failure reason; an empty reason clears it."""
        self.status["statusCode"] = code.value
        if reason:
            self.status["reasonOfFailure"] = reason
        else:
            self.status.pop("reasonOfFailure", None)

    def __repr__(self) -> str:
        return f"ClusterAddon(name={self.name!r}, status={self.status_code})"
