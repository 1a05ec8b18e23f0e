"""Unit tests for error classes."""

from clusteraddon.utils.errors import (
    AddonError,
    ApplyError,
    ClusterAddonError,
    ConfigurationError,
    DecodeError,
    DeleteError,
    FetchError,
    LedgerConflictError,
    LedgerUpdateError,
    ManifestError,
    ResourceOperationError,
    UnknownKindError,
    UnsupportedAddonError,
    VersionLookupError,
)


class TestErrorClasses:
    """Test custom error classes."""

    def test_configuration_error(self):
        """Test ConfigurationError."""
        error = ConfigurationError("Test config error")
        assert str(error) == "Test config error"
        assert isinstance(error, ClusterAddonError)

    def test_unsupported_addon_error_message(self):
        """Test UnsupportedAddonError names the addon."""
        error = UnsupportedAddonError("unknown")
        assert str(error) == "unsupported addon: unknown"
        assert error.addon == "unknown"
        assert isinstance(error, AddonError)

    def test_addon_error_without_addon(self):
        """Test AddonError addon defaults to None."""
        error = FetchError("failed to download manifest, status: 500")
        assert error.addon is None
        assert "status: 500" in str(error)

    def test_manifest_errors_are_addon_errors(self):
        """Test manifest error hierarchy."""
        assert issubclass(FetchError, ManifestError)
        assert issubclass(DecodeError, ManifestError)
        assert issubclass(ManifestError, AddonError)

    def test_resource_operation_errors(self):
        """Test resource operation error hierarchy."""
        for cls in (UnknownKindError, ApplyError, DeleteError):
            assert issubclass(cls, ResourceOperationError)
            assert issubclass(cls, AddonError)

    def test_ledger_errors(self):
        """Test ledger errors abort the addon being processed."""
        error = LedgerUpdateError("exhausted", addon="stack")
        assert error.addon == "stack"
        assert isinstance(error, AddonError)
        assert isinstance(LedgerConflictError("conflict"), AddonError)

    def test_version_lookup_error_is_not_addon_error(self):
        """Test version lookup failures are tolerated, not per-addon failures."""
        assert not issubclass(VersionLookupError, AddonError)
        assert issubclass(VersionLookupError, ClusterAddonError)
