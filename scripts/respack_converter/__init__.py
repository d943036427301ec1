"""
PT Resource Pack Converter

Converts PT rhythm-game resource packs, described by a remote JSON manifest,
into the target game's resource pack layout: renamed images and sounds,
re-tiled hit effects, composited hold notes and a generated info.yml.
"""

__version__ = "0.1.0"
__author__ = "PT Respack Converter Developers"

from .config import ConverterConfig
from .providers.base import ResourceProvider, ResourceManifest, FetchedAsset
from .processing.classifier import NameClassifier, SemanticRole
from .processing.transcoder import ImageTranscoder, HitEffectLayout
from .processing.router import AssetRouter
from .processing.descriptor import DescriptorSynthesizer, PackDescriptor
from .pipeline import ConversionPipeline

__all__ = [
    "ConverterConfig",
    "ResourceProvider",
    "ResourceManifest",
    "FetchedAsset",
    "NameClassifier",
    "SemanticRole",
    "ImageTranscoder",
    "HitEffectLayout",
    "AssetRouter",
    "DescriptorSynthesizer",
    "PackDescriptor",
    "ConversionPipeline",
]
