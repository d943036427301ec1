"""
Routing of fetched resources to their target files.
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Dict, Iterable, List, Mapping, Tuple

from .classifier import SemanticRole, HOLD_COMPONENT_ROLES
from .transcoder import ImageTranscoder

if TYPE_CHECKING:
    from ..providers.base import FetchedAsset

logger = logging.getLogger(__name__)


TARGET_FILENAMES: Mapping[SemanticRole, str] = MappingProxyType({
    SemanticRole.HIT_EFFECT: "hit_fx.png",
    SemanticRole.TAP: "click.png",
    SemanticRole.TAP_ALT: "click_mh.png",
    SemanticRole.DRAG: "drag.png",
    SemanticRole.DRAG_ALT: "drag_mh.png",
    SemanticRole.FLICK: "flick.png",
    SemanticRole.FLICK_ALT: "flick_mh.png",
    SemanticRole.COMBINED_HOLD: "hold.png",
    SemanticRole.COMBINED_HOLD_ALT: "hold_mh.png",
    SemanticRole.TAP_SOUND: "click.ogg",
    SemanticRole.DRAG_SOUND: "drag.ogg",
    SemanticRole.FLICK_SOUND: "flick.ogg",
})

# Combined output role and its (end, body, head) components.
HOLD_VARIANTS: Tuple[Tuple[SemanticRole, Tuple[SemanticRole, SemanticRole, SemanticRole]], ...] = (
    (SemanticRole.COMBINED_HOLD,
     (SemanticRole.HOLD_END, SemanticRole.HOLD_BODY, SemanticRole.HOLD_HEAD)),
    (SemanticRole.COMBINED_HOLD_ALT,
     (SemanticRole.HOLD_END, SemanticRole.HOLD_BODY_ALT, SemanticRole.HOLD_HEAD_ALT)),
)


@dataclass
class RoutedAssets:
    """Result of routing: files to write plus the hold components."""
    outputs: Dict[str, bytes] = field(default_factory=dict)
    hold_components: Mapping[SemanticRole, bytes] = field(default_factory=dict)
    hit_effect_produced: bool = False
    combined_roles: List[SemanticRole] = field(default_factory=list)

    @property
    def filenames(self) -> List[str]:
        return list(self.outputs)


class AssetRouter:
    """Decides per role whether a resource is transformed, copied or held back."""

    def __init__(self, transcoder: ImageTranscoder,
                 filenames: Mapping[SemanticRole, str] = TARGET_FILENAMES):
        self.transcoder = transcoder
        self.filenames = filenames

    def route(self, assets: Iterable["FetchedAsset"]) -> RoutedAssets:
        """
        Route every fetched asset, then build the combined hold images.

        Args:
            assets: Fetched assets, at most one per role

        Returns:
            RoutedAssets with encoded outputs keyed by target filename

        Raises:
            DecodeError: If a hit-effect or hold component cannot be decoded
        """
        routed = RoutedAssets()
        components: Dict[SemanticRole, bytes] = {}

        for asset in assets:
            if asset.role in HOLD_COMPONENT_ROLES:
                components[asset.role] = asset.data
            elif asset.role is SemanticRole.HIT_EFFECT:
                routed.outputs[self.filenames[asset.role]] = self.transcoder.retile_hit_effect(asset.data)
                routed.hit_effect_produced = True
            elif asset.role in self.filenames:
                routed.outputs[self.filenames[asset.role]] = asset.data
            else:
                logger.warning(f"No target file for role {asset.role.label}, skipping")

        routed.hold_components = MappingProxyType(components)
        self.composite_holds(routed)
        return routed

    def composite_holds(self, routed: RoutedAssets) -> None:
        """Composite each hold variant whose end, body and head are all present."""
        components = routed.hold_components

        for combined_role, parts in HOLD_VARIANTS:
            missing = [role.label for role in parts if role not in components]
            if missing:
                if len(missing) < len(parts):
                    logger.info(f"Skipping {combined_role.label}: missing {', '.join(missing)}")
                continue

            end, body, head = (components[role] for role in parts)
            routed.outputs[self.filenames[combined_role]] = self.transcoder.composite_vertical(end, body, head)
            routed.combined_roles.append(combined_role)
