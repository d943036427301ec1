"""
HTTP provider for downloading PT manifests and their resources.
"""

import logging
from typing import Any, Dict, List
import requests

from .base import (
    ResourceProvider, ResourceManifest, ManifestParseError, FetchError, ConfigurationError
)

logger = logging.getLogger(__name__)


class HttpResourceProvider(ResourceProvider):
    """Provider that fetches manifests and resources over HTTP(S)."""

    DEFAULT_USER_AGENT = "PT-RespackConverter/0.1"

    def __init__(self, config: Dict[str, Any]):
        """Initialize HTTP provider."""
        super().__init__(config)
        errors = self.validate_config(config)
        if errors:
            raise ConfigurationError(f"Invalid configuration: {'; '.join(errors)}", "HttpResourceProvider")

        self.timeout = config.get("timeout", 30.0)
        self.session = requests.Session()
        self.session.headers.update({
            'User-Agent': config.get("user_agent") or self.DEFAULT_USER_AGENT
        })

    def validate_config(self, config: Dict[str, Any]) -> List[str]:
        """Validate HTTP provider configuration."""
        errors = []

        timeout = config.get("timeout", 30.0)
        if not isinstance(timeout, (int, float)) or timeout <= 0:
            errors.append("'timeout' must be a positive number")

        max_workers = config.get("max_workers", 4)
        if not isinstance(max_workers, int) or max_workers < 1:
            errors.append("'max_workers' must be a positive integer")

        return errors

    def fetch_manifest(self, url: str) -> ResourceManifest:
        """Fetch and parse the pack manifest."""
        logger.info(f"Fetching manifest from {url}")
        response = self._get(url)

        try:
            payload = response.json()
        except ValueError as e:
            raise ManifestParseError(f"Response from {url} is not valid JSON: {e}")

        manifest = ResourceManifest.from_dict(payload)
        logger.info(f"Manifest '{manifest.name}' by {manifest.author} lists {len(manifest.resources)} resources")
        return manifest

    def fetch_bytes(self, url: str) -> bytes:
        """Fetch the raw payload at url."""
        response = self._get(url)
        logger.debug(f"Downloaded {len(response.content)} bytes from {url}")
        return response.content

    def _get(self, url: str) -> requests.Response:
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise FetchError(f"Failed to download {url}: {e}", "HttpResourceProvider", url=url)
        return response
