"""
Classification of PT manifest keys into semantic resource roles.
"""

import logging
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)


class RoleFamily(Enum):
    """Namespace a role belongs to."""
    IMAGE = "image"
    AUDIO = "audio"


class SemanticRole(Enum):
    """Closed set of resource roles a pack can customize."""
    HIT_EFFECT = ("hit_effect", RoleFamily.IMAGE)
    TAP = ("tap", RoleFamily.IMAGE)
    TAP_ALT = ("tap_alt", RoleFamily.IMAGE)
    HOLD_END = ("hold_end", RoleFamily.IMAGE)
    HOLD_BODY = ("hold_body", RoleFamily.IMAGE)
    HOLD_BODY_ALT = ("hold_body_alt", RoleFamily.IMAGE)
    HOLD_HEAD = ("hold_head", RoleFamily.IMAGE)
    HOLD_HEAD_ALT = ("hold_head_alt", RoleFamily.IMAGE)
    DRAG = ("drag", RoleFamily.IMAGE)
    DRAG_ALT = ("drag_alt", RoleFamily.IMAGE)
    FLICK = ("flick", RoleFamily.IMAGE)
    FLICK_ALT = ("flick_alt", RoleFamily.IMAGE)
    COMBINED_HOLD = ("combined_hold", RoleFamily.IMAGE)
    COMBINED_HOLD_ALT = ("combined_hold_alt", RoleFamily.IMAGE)
    TAP_SOUND = ("tap_sound", RoleFamily.AUDIO)
    DRAG_SOUND = ("drag_sound", RoleFamily.AUDIO)
    FLICK_SOUND = ("flick_sound", RoleFamily.AUDIO)

    @property
    def label(self) -> str:
        return self.value[0]

    @property
    def family(self) -> RoleFamily:
        return self.value[1]

    @property
    def is_image(self) -> bool:
        return self.family is RoleFamily.IMAGE

    @property
    def is_audio(self) -> bool:
        return self.family is RoleFamily.AUDIO


HOLD_COMPONENT_ROLES = frozenset({
    SemanticRole.HOLD_END,
    SemanticRole.HOLD_BODY,
    SemanticRole.HOLD_HEAD,
    SemanticRole.HOLD_BODY_ALT,
    SemanticRole.HOLD_HEAD_ALT,
})


# Ordered (base name, role) rules per namespace. Every base name is accepted
# bare or with the namespace's file extension.
IMAGE_RULES: Tuple[Tuple[str, SemanticRole], ...] = (
    ("clickraw", SemanticRole.HIT_EFFECT),
    ("tap", SemanticRole.TAP),
    ("taphl", SemanticRole.TAP_ALT),
    ("holdend", SemanticRole.HOLD_END),
    ("hold", SemanticRole.HOLD_BODY),
    ("holdhl", SemanticRole.HOLD_BODY_ALT),
    ("holdhead", SemanticRole.HOLD_HEAD),
    ("holdheadhl", SemanticRole.HOLD_HEAD_ALT),
    ("drag", SemanticRole.DRAG),
    ("draghl", SemanticRole.DRAG_ALT),
    ("flick", SemanticRole.FLICK),
    ("flickhl", SemanticRole.FLICK_ALT),
)

AUDIO_RULES: Tuple[Tuple[str, SemanticRole], ...] = (
    ("hitsong0", SemanticRole.TAP_SOUND),
    ("hitsong1", SemanticRole.DRAG_SOUND),
    ("hitsong2", SemanticRole.FLICK_SOUND),
)

IMAGE_EXTENSION = ".png"
AUDIO_EXTENSION = ".ogg"


def build_lookup(rules: Iterable[Tuple[str, SemanticRole]], extension: str) -> Mapping[str, SemanticRole]:
    """Expand ordered rules into a read-only name -> role lookup, first rule wins."""
    lookup: Dict[str, SemanticRole] = {}
    for base_name, role in rules:
        for variant in (base_name, base_name + extension):
            lookup.setdefault(variant.lower(), role)
    return MappingProxyType(lookup)


class NameClassifier:
    """Maps raw manifest keys to semantic roles."""

    def __init__(self,
                 image_rules: Iterable[Tuple[str, SemanticRole]] = IMAGE_RULES,
                 audio_rules: Iterable[Tuple[str, SemanticRole]] = AUDIO_RULES):
        self._tables = (
            build_lookup(image_rules, IMAGE_EXTENSION),
            build_lookup(audio_rules, AUDIO_EXTENSION),
        )

    @staticmethod
    def normalize(raw_key: str) -> str:
        return raw_key.lower()

    def classify(self, raw_key: str) -> Optional[SemanticRole]:
        """
        Classify a single manifest key.

        Args:
            raw_key: Key as it appears in the manifest

        Returns:
            The first matching role (image table before audio table), or None
            when the key is not a known resource name
        """
        roles = self.classify_all(raw_key)
        return roles[0] if roles else None

    def classify_all(self, raw_key: str) -> List[SemanticRole]:
        """Return the match from every namespace table, image first."""
        key = self.normalize(raw_key)
        return [table[key] for table in self._tables if key in table]

    def classify_manifest(self, resources: Mapping[str, str]) -> Dict[SemanticRole, str]:
        """
        Classify every manifest entry.

        A key matching both namespaces contributes one entry per namespace.
        When two keys resolve to the same role, the later one wins.

        Returns:
            Dictionary mapping roles to resource URLs
        """
        classified: Dict[SemanticRole, str] = {}
        for raw_key, url in resources.items():
            roles = self.classify_all(raw_key)
            if not roles:
                logger.debug(f"Ignoring unrecognized resource '{raw_key}'")
                continue
            for role in roles:
                if role in classified:
                    logger.debug(f"Resource '{raw_key}' overrides earlier {role.label}")
                classified[role] = url
        return classified

    def unrecognized(self, resources: Mapping[str, str]) -> List[str]:
        """Return manifest keys that map to no role."""
        return [key for key in resources if not self.classify_all(key)]
