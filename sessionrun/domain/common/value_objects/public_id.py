"""
PublicId value object.

Runs and learning sessions are addressed from outside by short url-safe
tokens instead of their database ids.
"""

import re
import secrets
import string
from dataclasses import dataclass
from typing import Self

from ..exceptions import ValidationError
from ..value_object import ValueObject

DEFAULT_PUBLIC_ID_LENGTH = 12
_ALPHABET = string.ascii_letters + string.digits
_PUBLIC_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{6,32}$")


@dataclass(frozen=True)
class PublicId(ValueObject):
    """Opaque external identifier for a run or a learning session."""

    value: str

    def __post_init__(self) -> None:
        if not _PUBLIC_ID_PATTERN.match(self.value):
            raise ValidationError("Invalid public id", field="public_id", value=self.value)

    def __str__(self) -> str:
        return self.value

    @classmethod
    def generate(cls, length: int = DEFAULT_PUBLIC_ID_LENGTH) -> Self:
        """Generate a new random public id."""
        return cls("".join(secrets.choice(_ALPHABET) for _ in range(length)))

    @classmethod
    def is_valid(cls, value: str) -> bool:
        return bool(_PUBLIC_ID_PATTERN.match(value))
