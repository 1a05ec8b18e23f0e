"""Custom exception classes for the ClusterAddon controller."""


class ClusterAddonError(Exception):
    """Base exception for ClusterAddon controller errors."""

    pass


class ConfigurationError(ClusterAddonError):
    """Raised when configuration is invalid or missing."""

    pass


class AddonError(ClusterAddonError):
    """Base class for errors raised while processing a single addon.

    Any AddonError aborts the remaining addons of a reconciliation pass and
    is surfaced as the resource's status reason.
    """

    def __init__(self, message: str, addon: str | None = None):
        super().__init__(message)
        self.addon = addon


class UnsupportedAddonError(AddonError):
    """Raised when an addon name is not present in the registry."""

    def __init__(self, addon: str):
        super().__init__(f"unsupported addon: {addon}", addon=addon)


class ManifestError(AddonError):
    """Base class for manifest retrieval and decoding errors."""

    pass


class FetchError(ManifestError):
    """Raised when a manifest cannot be downloaded."""

    pass


class DecodeError(ManifestError):
    """Raised when a manifest document cannot be decoded."""

    pass


class ResourceOperationError(AddonError):
    """Base class for errors applying or deleting a manifest object."""

    pass


class UnknownKindError(ResourceOperationError):
    """Raised when the cluster does not serve a manifest object's kind."""

    pass


class ApplyError(ResourceOperationError):
    """Raised when server-side apply of an object fails."""

    pass


class DeleteError(ResourceOperationError):
    """Raised when deleting an object fails for a reason other than absence."""

    pass


class NamespaceError(AddonError):
    """Raised when an addon namespace cannot be created or deleted."""

    pass


class LedgerError(AddonError):
    """Base class for installation ledger errors."""

    pass


class LedgerConflictError(LedgerError):
    """Raised when a ledger write loses an optimistic-concurrency race."""

    pass


class LedgerUpdateError(LedgerError):
    """Raised when a ledger mutation cannot be persisted."""

    pass


class VersionLookupError(ClusterAddonError):
    """Raised when the latest release of an addon cannot be determined."""

    pass
