"""
Processing modules for classification, image transcoding, routing and descriptor generation.
"""

from .classifier import NameClassifier, SemanticRole, RoleFamily, HOLD_COMPONENT_ROLES
from .transcoder import ImageTranscoder, HitEffectLayout, DecodeError
from .router import AssetRouter, RoutedAssets, TARGET_FILENAMES
from .descriptor import DescriptorSynthesizer, PackDescriptor

__all__ = [
    "NameClassifier",
    "SemanticRole",
    "RoleFamily",
    "HOLD_COMPONENT_ROLES",
    "ImageTranscoder",
    "HitEffectLayout",
    "DecodeError",
    "AssetRouter",
    "RoutedAssets",
    "TARGET_FILENAMES",
    "DescriptorSynthesizer",
    "PackDescriptor",
]
