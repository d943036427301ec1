"""
Resource providers for the converter.
Handles fetching the pack manifest and the resources it lists.
"""

from .base import (
    ResourceProvider, ResourceManifest, FetchedAsset, ProviderRegistry,
    ProviderError, ManifestParseError, FetchError, ConfigurationError,
    provider_registry
)
from .http import HttpResourceProvider

# Register provider classes with the global registry
provider_registry.register_provider_class("http", HttpResourceProvider)

__all__ = [
    # Base classes and registry
    "ResourceProvider",
    "ResourceManifest",
    "FetchedAsset",
    "ProviderRegistry",
    "provider_registry",

    # Exceptions
    "ProviderError",
    "ManifestParseError",
    "FetchError",
    "ConfigurationError",

    # Concrete providers
    "HttpResourceProvider",
]
