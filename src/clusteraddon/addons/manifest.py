"""Manifest download and decoding.

A manifest is a YAML or JSON stream of Kubernetes objects separated by
``---``. Objects are kept schema-less as :class:`ManifestObject` so any kind
the cluster serves can be applied without generated bindings.
"""

import copy
import logging
from typing import Any

import requests
import yaml

from clusteraddon.addons.registry import AddonManifestSource
from clusteraddon.utils.errors import DecodeError, FetchError

logger = logging.getLogger(__name__)


class ManifestObject:
    """A generic Kubernetes object decoded from one manifest document."""

    def __init__(self, body: dict[str, Any]):
        self._body = body

    @property
    def api_version(self) -> str:
        return self._body.get("apiVersion") or ""

    @property
    def kind(self) -> str:
        return self._body.get("kind") or ""

    @property
    def group(self) -> str:
        return self.api_version.rpartition("/")[0]

    @property
    def version(self) -> str:
        return self.api_version.rpartition("/")[2]

    @property
    def metadata(self) -> dict[str, Any]:
        metadata = self._body.get("metadata")
        if not isinstance(metadata, dict):
            metadata = {}
            self._body["metadata"] = metadata
        return metadata

    @property
    def name(self) -> str:
        return self.metadata.get("name") or ""

    @property
    def namespace(self) -> str:
        return self.metadata.get("namespace") or ""

    @namespace.setter
    def namespace(self, value: str) -> None:
        self.metadata["namespace"] = value

    def to_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self._body)

    def to_yaml(self) -> str:
        return yaml.safe_dump(self._body, default_flow_style=False, sort_keys=False)

    def describe(self) -> str:
        """Short identifier used in log lines: ``Kind namespace/name``."""
        if self.namespace:
            return f"{self.kind} {self.namespace}/{self.name}"
        return f"{self.kind} {self.name}"

    def __repr__(self) -> str:
        return f"ManifestObject({self.api_version}, {self.describe()})"


def decode_manifest(text: str, namespace: str | None = None) -> list[ManifestObject]:
    """Decode a YAML/JSON document stream into manifest objects.

    Args:
        text: Manifest body
        namespace: Namespace applied to objects that do not declare one

    Returns:
        Objects in document order; empty documents are skipped

    Raises:
        DecodeError: If any document is malformed
    """
    try:
        documents = list(yaml.safe_load_all(text))
    except yaml.YAMLError as e:
        raise DecodeError(f"failed to decode manifest: {e}") from e

    objects: list[ManifestObject] = []
    for index, document in enumerate(documents):
        if not document:
            continue
        if not isinstance(document, dict):
            raise DecodeError(
                f"failed to decode manifest: document {index} is a "
                f"{type(document).__name__}, expected a mapping"
            )

        obj = ManifestObject(document)
        if not obj.api_version or not obj.kind:
            raise DecodeError(f"manifest document {index} missing apiVersion or kind")

        if namespace and not obj.namespace:
            obj.namespace = namespace
        objects.append(obj)

    return objects


class ManifestFetcher:
    """Download and decode addon manifests over HTTP."""

    def __init__(self, session: requests.Session | None = None, timeout: float = 60.0):
        """Initialize fetcher.

        Args:
            session: Optional requests session (a fresh one is created otherwise)
            timeout: Default per-request timeout in seconds
        """
        self.session = session or requests.Session()
        self.timeout = timeout

    def fetch(
        self, source: AddonManifestSource, version: str, timeout: float | None = None
    ) -> list[ManifestObject]:
        """Fetch and decode the manifest of an addon.

        Every call downloads the manifest again; nothing is cached.

        Args:
            source: Manifest source of the addon
            version: Version substituted into the source URL template
            timeout: Optional timeout overriding the default

        Returns:
            Decoded objects in document order

        Raises:
            FetchError: On transport failure or a non-200 response
            DecodeError: If any document is malformed
        """
        url = source.manifest_url(version)
        logger.debug(f"[{source.name}] Downloading manifest: {url}")

        try:
            response = self.session.get(url, timeout=timeout or self.timeout)
        except requests.RequestException as e:
            raise FetchError(f"failed to download manifest: {e}", addon=source.name) from e

        if response.status_code != 200:
            raise FetchError(
                f"failed to download manifest, status: {response.status_code}",
                addon=source.name,
            )

        try:
            objects = decode_manifest(response.text, source.namespace)
        except DecodeError as e:
            e.addon = source.name
            raise

        logger.info(f"[{source.name}] Decoded {len(objects)} object(s) from {url}")
        return objects
