import re
from dataclasses import dataclass
from typing import Iterable

from sprite_import.classify import compile_rule_pattern
from sprite_import.datatypes import SpriteSliceMetadata
from sprite_import.models import SpriteSliceMeta
from sprite_import.settings import DEFAULT_FRAME_SECONDS


@dataclass(frozen=True)
class MetadataRule:
    match_text: str
    pattern: re.Pattern
    min_frame: int
    max_frame: int
    metadata: SpriteSliceMetadata

    @property
    def all_frames(self) -> bool:
        return self.min_frame == self.max_frame

    def applies_to(self, unity_path: str, frame_number: int) -> bool:
        if not self.pattern.search(unity_path):
            return False
        return self.all_frames or self.min_frame <= frame_number <= self.max_frame


def rule_order(rule: MetadataRule) -> tuple[int, str]:
    return len(rule.match_text), rule.match_text


class MetadataResolver:
    """Looks up the timing and event of a slice from the sprite_slice_meta rules

    Rules are checked shortest match_text first and the last rule that applies wins,
    so the longest applicable pattern decides.
    """

    def __init__(self, rules: Iterable[MetadataRule], default_frame_seconds: float = DEFAULT_FRAME_SECONDS):
        self.rules: tuple[MetadataRule, ...] = tuple(sorted(rules, key=rule_order))
        self.default = SpriteSliceMetadata(frame_seconds=default_frame_seconds)

    @classmethod
    def from_rows(cls, rows: Iterable[SpriteSliceMeta], default_frame_seconds: float = DEFAULT_FRAME_SECONDS):
        # keyed by match_text, a later row with the same text replaces the earlier one
        rules: dict[str, MetadataRule] = {}
        for row in rows:
            pattern = compile_rule_pattern(row.match_text)
            if pattern is None:
                continue
            rules[row.match_text] = MetadataRule(
                match_text=row.match_text,
                pattern=pattern,
                min_frame=row.start_frame,
                max_frame=row.end_frame,
                metadata=SpriteSliceMetadata(frame_seconds=row.frame_seconds,
                                             event_id=row.event_id,
                                             event_json=row.event_json or ""),
            )
        return cls(rules.values(), default_frame_seconds)

    def resolve(self, unity_path: str, frame_number: int) -> SpriteSliceMetadata:
        resolved = self.default
        for rule in self.rules:
            if rule.applies_to(unity_path, frame_number):
                resolved = rule.metadata
        return resolved
