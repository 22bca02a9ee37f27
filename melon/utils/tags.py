"""Preset post tags and tag normalisation."""
import re
from typing import List, Optional

from i18n.translations import Language, get_message, has_message

PRESET_TAGS = ["general", "question", "chat", "illustration", "progress"]

_WHITESPACE = re.compile(r"\s+")


def normalize_tag(value: str) -> str:
    """Trim, lowercase and replace whitespace runs with hyphens."""
    return _WHITESPACE.sub("-", (value or "").strip().lower())


def normalize_tags(values: List[str]) -> List[str]:
    """Normalise and de-duplicate, keeping first-seen order and dropping blanks."""
    result: List[str] = []
    for value in values or []:
        tag = normalize_tag(value)
        if tag and tag not in result:
            result.append(tag)
    return result


def tag_label(tag: str, language: Optional[Language] = None) -> str:
    """Display label for a tag; unknown tags display as themselves."""
    key = f"tag_{tag}"
    if tag in PRESET_TAGS and has_message(key, language):
        return get_message(key, language)
    return tag
