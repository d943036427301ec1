"""
Abstract base classes for resource providers.
Defines the manifest model and the interface used to fetch pack resources.
"""

import logging
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping

from ..processing.classifier import SemanticRole

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResourceManifest:
    """Remote description of a PT resource pack."""
    name: str
    author: str
    resources: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "resources", MappingProxyType(dict(self.resources)))

    @classmethod
    def from_dict(cls, payload: Any) -> "ResourceManifest":
        """
        Build a manifest from decoded JSON.

        Args:
            payload: Object with 'name', 'author' and 'res' fields

        Raises:
            ManifestParseError: If the payload does not have the expected shape
        """
        if not isinstance(payload, dict):
            raise ManifestParseError(f"Manifest must be a JSON object, got {type(payload).__name__}")

        for key in ("name", "author"):
            if not isinstance(payload.get(key), str):
                raise ManifestParseError(f"Manifest field '{key}' must be a string")

        res = payload.get("res")
        if not isinstance(res, dict):
            raise ManifestParseError("Manifest field 'res' must be an object")
        for key, url in res.items():
            if not isinstance(url, str):
                raise ManifestParseError(f"Resource '{key}' must map to a URL string")

        name = payload["name"]
        if name.strip() in ("", ".", "..") or "/" in name or "\\" in name:
            raise ManifestParseError(f"Manifest name '{name}' cannot be used as a directory name")

        return cls(name=name, author=payload["author"], resources=res)


@dataclass
class FetchedAsset:
    """Downloaded payload of one classified resource."""
    role: SemanticRole
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


class ResourceProvider(ABC):
    """Abstract base class for resource providers."""

    def __init__(self, config: Dict[str, Any]):
        """Initialize provider with configuration."""
        self.config = config
        self.max_workers = config.get("max_workers", 4)

    @abstractmethod
    def fetch_manifest(self, url: str) -> ResourceManifest:
        """
        Fetch and parse the pack manifest.

        Raises:
            FetchError: If the manifest cannot be downloaded
            ManifestParseError: If the body is not a valid manifest
        """
        pass

    @abstractmethod
    def fetch_bytes(self, url: str) -> bytes:
        """
        Fetch the raw payload at url.

        Raises:
            FetchError: If the download fails
        """
        pass

    def fetch_all(self, classified: Mapping[SemanticRole, str]) -> List[FetchedAsset]:
        """
        Fetch every classified resource.

        Downloads run concurrently; results are returned in classification
        order once all of them completed. The first failure is raised and
        downloads that have not started yet are cancelled.
        """
        if not classified:
            return []

        roles = list(classified)
        workers = max(1, min(self.max_workers, len(roles)))
        executor = ThreadPoolExecutor(max_workers=workers)
        try:
            payloads = list(executor.map(lambda role: self.fetch_bytes(classified[role]), roles))
        except BaseException:
            executor.shutdown(wait=False, cancel_futures=True)
            raise
        executor.shutdown()

        return [FetchedAsset(role=role, data=data) for role, data in zip(roles, payloads)]


class ProviderError(Exception):
    """Base exception for provider errors."""

    def __init__(self, message: str, provider: str, recoverable: bool = False):
        super().__init__(message)
        self.provider = provider
        self.recoverable = recoverable


class ManifestParseError(ProviderError):
    """Exception raised when the manifest is malformed or misses fields."""

    def __init__(self, message: str, provider: str = "manifest"):
        super().__init__(f"Manifest error: {message}", provider, recoverable=False)


class FetchError(ProviderError):
    """Exception raised for transport failures and non-success responses."""

    def __init__(self, message: str, provider: str, url: str = ""):
        super().__init__(f"Fetch error: {message}", provider, recoverable=True)
        self.url = url


class ConfigurationError(ProviderError):
    """Exception raised when provider configuration is invalid."""

    def __init__(self, message: str, provider: str):
        super().__init__(f"Configuration error: {message}", provider, recoverable=False)


class ProviderRegistry:
    """Registry of provider classes by name."""

    def __init__(self):
        self._provider_classes: Dict[str, type] = {}

    def register_provider_class(self, name: str, provider_class: type) -> None:
        """
        Register a provider class.

        Raises:
            ValueError: If provider_class doesn't inherit from ResourceProvider
        """
        if not issubclass(provider_class, ResourceProvider):
            raise ValueError(f"Provider class {provider_class} must inherit from ResourceProvider")

        self._provider_classes[name] = provider_class

    def create_provider(self, name: str, config: Dict[str, Any]) -> ResourceProvider:
        """
        Create a provider instance.

        Raises:
            ConfigurationError: If provider name is not registered
        """
        if name not in self._provider_classes:
            raise ConfigurationError(
                f"Provider '{name}' not registered. Available: {list(self._provider_classes.keys())}",
                name
            )

        return self._provider_classes[name](config)

    def list_available_provider_classes(self) -> List[str]:
        """List all registered provider class names."""
        return list(self._provider_classes.keys())


# Global provider registry instance
provider_registry = ProviderRegistry()
