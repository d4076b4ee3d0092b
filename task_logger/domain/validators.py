from __future__ import annotations

import re
from typing import Sequence

MAX_DESCRIPTION_LENGTH = 500
MAX_CATEGORY_LENGTH = 50
MAX_TAG_LENGTH = 30
MAX_TAGS = 10

_TOKEN_RE = re.compile(r"[A-Za-z0-9_-]+")


def validate_description(description: str) -> bool:
    return 0 < len(description.strip()) <= MAX_DESCRIPTION_LENGTH


def validate_category(category: str) -> bool:
    return bool(_TOKEN_RE.fullmatch(category)) and len(category) <= MAX_CATEGORY_LENGTH


def validate_tags(tags: Sequence[str]) -> bool:
    if len(tags) > MAX_TAGS:
        return False
    return all(_TOKEN_RE.fullmatch(tag) and len(tag) <= MAX_TAG_LENGTH for tag in tags)
