"""Token types and token representation for microlisp source."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class MicroLispTokenType(Enum):
    """Token types for microlisp source."""
    LPAREN = "("
    RPAREN = ")"
    SYMBOL = "SYMBOL"
    NUMBER = "NUMBER"
    BOOLEAN = "BOOLEAN"


@dataclass
class MicroLispToken:
    """Represents a single token in microlisp source."""
    type: MicroLispTokenType
    value: Any
    position: int
    length: int = 1

    def __repr__(self) -> str:
        return f"MicroLispToken({self.type.name}, {self.value!r}, pos={self.position})"
