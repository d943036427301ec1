"""
Descriptor generation for the target pack's info.yml.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union
import yaml

from ..utils.image import ImageUtils
from .classifier import SemanticRole
from .transcoder import HitEffectLayout

logger = logging.getLogger(__name__)


@dataclass
class PackDescriptor:
    """Metadata record written next to the pack's images."""
    name: str
    author: str
    description: str = ""
    hit_fx: Optional[Tuple[int, int]] = None
    hold_atlas: Optional[Tuple[int, int]] = None
    hold_atlas_mh: Optional[Tuple[int, int]] = None

    # Attribute name -> key in the written document, in output order
    FIELD_NAMES = (
        ("name", "name"),
        ("author", "author"),
        ("description", "description"),
        ("hit_fx", "hitFx"),
        ("hold_atlas", "holdAtlas"),
        ("hold_atlas_mh", "holdAtlasMH"),
    )

    def to_dict(self) -> Dict[str, Any]:
        """Return document fields, leaving out absent optional values."""
        document = {}
        for attribute, key in self.FIELD_NAMES:
            value = getattr(self, attribute)
            if value is None:
                continue
            document[key] = list(value) if isinstance(value, tuple) else value
        return document

    def to_yaml(self) -> str:
        return yaml.safe_dump(
            self.to_dict(),
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=None,
        )


class DescriptorSynthesizer:
    """Derives descriptor geometry from the transformed pack contents."""

    def __init__(self, layout: HitEffectLayout = HitEffectLayout(),
                 strict_atlas_consistency: bool = False,
                 filename: str = "info.yml"):
        """
        Initialize synthesizer.

        Args:
            layout: Hit-effect layout recorded as hitFx
            strict_atlas_consistency: Only declare a hold atlas when the
                matching combined image was produced
            filename: Descriptor filename inside the pack directory
        """
        self.layout = layout
        self.strict_atlas_consistency = strict_atlas_consistency
        self.filename = filename

    def synthesize(self, name: str, author: str,
                   hold_components: Mapping[SemanticRole, bytes],
                   hit_effect_produced: bool,
                   combined_roles: Optional[Iterable[SemanticRole]] = None) -> PackDescriptor:
        """
        Build the descriptor for a converted pack.

        Atlas values are the heights of the source end and head components,
        not of the composited image.

        Raises:
            DecodeError: If a component's dimensions cannot be read
        """
        descriptor = PackDescriptor(name=name, author=author)
        combined = set(combined_roles or ())

        if hit_effect_produced:
            descriptor.hit_fx = self.layout.grid

        descriptor.hold_atlas = self._atlas(
            hold_components, SemanticRole.HOLD_HEAD, SemanticRole.COMBINED_HOLD, combined
        )
        descriptor.hold_atlas_mh = self._atlas(
            hold_components, SemanticRole.HOLD_HEAD_ALT, SemanticRole.COMBINED_HOLD_ALT, combined
        )
        return descriptor

    def _atlas(self, components: Mapping[SemanticRole, bytes], head_role: SemanticRole,
               combined_role: SemanticRole, combined: set) -> Optional[Tuple[int, int]]:
        if SemanticRole.HOLD_END not in components or head_role not in components:
            return None
        if self.strict_atlas_consistency and combined_role not in combined:
            logger.info(f"Omitting atlas for {combined_role.label}: image was not produced")
            return None

        _, end_height = ImageUtils.image_size(components[SemanticRole.HOLD_END])
        _, head_height = ImageUtils.image_size(components[head_role])
        return (end_height, head_height)

    def write(self, descriptor: PackDescriptor, output_dir: Union[str, Path]) -> Path:
        """Write descriptor into output_dir and return its path."""
        path = Path(output_dir) / self.filename
        with open(path, 'w', encoding='utf-8') as f:
            f.write(descriptor.to_yaml())
        logger.info(f"Wrote descriptor {path}")
        return path
