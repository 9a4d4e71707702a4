import logging
import re
from dataclasses import dataclass
from typing import Iterable, Optional

from sprite_import.datatypes import ImageFile, MISSING_ACTION_ID, MISSING_ACTION_NAME
from sprite_import.models import Direction, SpriteAction

logger = logging.getLogger(__name__)

# single digits are never frame numbers
frame_number_regex = re.compile(r"\d{2,3}", re.ASCII)

direction_regexes: list[tuple[re.Pattern, Direction]] = [
    (re.compile(direction.value, re.IGNORECASE), direction) for direction in Direction
]

DEFAULT_DIRECTION = Direction.DOWN


@dataclass(frozen=True)
class ActionRule:
    pattern: re.Pattern
    action_id: int
    action_name: str


def compile_rule_pattern(pattern_text: str, flags: int = 0) -> Optional[re.Pattern]:
    """Compiles a pattern stored in a lookup table. Unusable patterns match nothing"""
    try:
        return re.compile(pattern_text, flags)
    except re.error as e:
        logger.warning(f"skipping invalid pattern {pattern_text!r}: {e}")
        return None


def action_rules_from_rows(rows: Iterable[SpriteAction]) -> list[ActionRule]:
    rules = []
    for row in rows:
        if pattern := compile_rule_pattern(row.name):
            rules.append(ActionRule(pattern=pattern, action_id=row.id, action_name=row.name))
    return rules


def match_action(filename: str, action_rules: list[ActionRule]) -> tuple[int, str]:
    """First action whose name is found in filename, in rule order"""
    for rule in action_rules:
        if rule.pattern.search(filename):
            return rule.action_id, rule.action_name
    return MISSING_ACTION_ID, MISSING_ACTION_NAME


def match_direction(filename: str) -> Direction:
    for regex, direction in direction_regexes:
        if regex.search(filename):
            return direction
    return DEFAULT_DIRECTION


def match_frame_number(filename: str) -> int:
    if match := frame_number_regex.search(filename):
        return int(match.group())
    return 0


def classify_files(image_files: list[ImageFile], action_rules: list[ActionRule]) -> list[ImageFile]:
    """Fills in action, direction and frame number of every file in place"""
    for image_file in image_files:
        image_file.action_id, image_file.action_name = match_action(image_file.name, action_rules)
        image_file.direction = match_direction(image_file.name)
        image_file.frame_number = match_frame_number(image_file.name)

        if image_file.action_id == MISSING_ACTION_ID:
            logger.warning(f"no sprite action matches {image_file.unity_path}")
    return image_files
