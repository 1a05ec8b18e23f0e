"""Latest-release lookup for addons that do not pin a version."""

import logging
import threading
import time
from collections.abc import Callable

import requests

from clusteraddon.utils.errors import VersionLookupError

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"


class ReleasePoller:
    """Query GitHub for the latest release tag of a repository.

    Results are cached per repository for ``cache_ttl`` seconds and shared
    between threads.
    """

    def __init__(
        self,
        token: str | None = None,
        cache_ttl: float = 300.0,
        timeout: float = 10.0,
        session: requests.Session | None = None,
        base_url: str = GITHUB_API_URL,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.token = token
        self.cache_ttl = cache_ttl
        self.timeout = timeout
        self.session = session or requests.Session()
        self.base_url = base_url.rstrip("/")
        self.clock = clock
        self._cache: dict[tuple[str, str], tuple[str, float]] = {}
        self._lock = threading.Lock()

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/vnd.github+json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def get_latest_version(self, org: str, repo: str) -> str:
        """Return the tag of the latest release of ``org/repo``.

        Raises:
            VersionLookupError: If the release cannot be determined
        """
        key = (org, repo)
        now = self.clock()
        with self._lock:
            cached = self._cache.get(key)
            if cached and now - cached[1] < self.cache_ttl:
                return cached[0]

        url = f"{self.base_url}/repos/{org}/{repo}/releases/latest"
        try:
            response = self.session.get(url, headers=self._headers(), timeout=self.timeout)
        except requests.RequestException as e:
            raise VersionLookupError(f"failed to query {url}: {e}") from e

        if response.status_code != 200:
            raise VersionLookupError(
                f"failed to query latest release of {org}/{repo}, status: {response.status_code}"
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise VersionLookupError(f"invalid release response for {org}/{repo}: {e}") from e
        if not isinstance(payload, dict):
            raise VersionLookupError(
                f"invalid release response for {org}/{repo}: expected an object, "
                f"got {type(payload).__name__}"
            )

        tag = payload.get("tag_name")
        if not tag or not isinstance(tag, str):
            raise VersionLookupError(f"no release tag found for {org}/{repo}")

        with self._lock:
            self._cache[key] = (tag, now)
        logger.debug(f"Latest release of {org}/{repo}: {tag}")
        return tag

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()
