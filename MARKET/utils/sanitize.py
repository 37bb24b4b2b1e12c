"""
utils/sanitize.py

Strips markup from free-text request fields before they are stored or
forwarded to the geocoder and FCM.
"""

import html
import re
from typing import ClassVar, FrozenSet

import bleach
from pydantic import BaseModel, ValidationInfo, field_validator

_WHITESPACE = re.compile(r"\s+")


def sanitize_text(user_input: str, max_length: int = 500) -> str:
    """
    Drop every HTML tag, collapse runs of whitespace and cap the length.
    The result is plain text: entities bleach escapes are decoded again.
    """
    if not user_input:
        return ""

    cleaned = bleach.clean(user_input[:max_length], tags=set(), attributes={}, strip=True)
    return _WHITESPACE.sub(" ", html.unescape(cleaned)).strip()


class SanitizedModel(BaseModel):
    """
    Request model whose string fields are cleaned on the way in.
    Fields named in ``raw_fields`` (opaque device tokens) are left untouched.
    """

    raw_fields: ClassVar[FrozenSet[str]] = frozenset({"token"})

    @field_validator("*", mode="before")
    @classmethod
    def sanitize_all_strings(cls, v, info: ValidationInfo):
        if isinstance(v, str) and info.field_name not in cls.raw_fields:
            return sanitize_text(v, max_length=1000)
        return v
