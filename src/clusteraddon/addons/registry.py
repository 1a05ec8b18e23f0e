"""Static registry of addon manifest sources."""

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from clusteraddon.utils.errors import UnsupportedAddonError
from clusteraddon.utils.validation import validate_namespace

logger = logging.getLogger(__name__)

ManifestURL = Callable[[str], str]


def github_release_asset(org: str, repo: str, asset: str) -> ManifestURL:
    """Build a URL template for an asset attached to a GitHub release.

    An empty version resolves to the asset of the latest release.

    Args:
        org: GitHub organisation
        repo: GitHub repository
        asset: Release asset file name

    Returns:
        Callable mapping a version tag to a download URL
    """
    base = f"https://github.com/{org}/{repo}/releases"

    def url(version: str) -> str:
        if not version:
            return f"{base}/latest/download/{asset}"
        return f"{base}/download/{version}/{asset}"

    return url


@dataclass(frozen=True)
class AddonManifestSource:
    """Where an addon's manifest lives and which namespace it targets.

    Attributes:
        name: Addon name as declared in ``spec.addons``
        org: Organisation queried for the latest release
        repo: Repository queried for the latest release
        url: Template mapping a version string to the manifest URL
        namespace: Namespace created before install, deleted after uninstall,
            and backfilled into manifest objects that carry none
    """

    name: str
    org: str
    repo: str
    url: ManifestURL
    namespace: str | None = None

    def manifest_url(self, version: str) -> str:
        return self.url(version)


DEFAULT_SOURCES: tuple[AddonManifestSource, ...] = (
    AddonManifestSource(
        name="stack",
        org="ksctl",
        repo="ka",
        url=github_release_asset("ksctl", "ka", "install.yaml"),
    ),
)


class AddonRegistry:
    """Read-only lookup table from addon name to manifest source.

    The table is fixed at construction so one registry can be shared by
    concurrent reconciliations.
    """

    def __init__(self, sources: Iterable[AddonManifestSource] = DEFAULT_SOURCES):
        table: dict[str, AddonManifestSource] = {}
        for source in sources:
            if source.name in table:
                raise ValueError(f"Duplicate addon source: '{source.name}'")
            if source.namespace is not None:
                validate_namespace(source.namespace)
            table[source.name] = source
        self._sources: Mapping[str, AddonManifestSource] = MappingProxyType(table)

    def resolve(self, name: str) -> AddonManifestSource:
        """Look up the manifest source of an addon.

        Args:
            name: Addon name

        Returns:
            The registered manifest source

        Raises:
            UnsupportedAddonError: If no source is registered under ``name``
        """
        source = self._sources.get(name)
        if source is None:
            logger.debug(f"Addon '{name}' not found in registry")
            raise UnsupportedAddonError(name)
        return source

    def names(self) -> list[str]:
        return sorted(self._sources)

    def __contains__(self, name: object) -> bool:
        return name in self._sources

    def __len__(self) -> int:
        return len(self._sources)
