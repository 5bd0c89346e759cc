"""microlisp value hierarchy - the immutable node type shared by the parser and evaluator."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, List, Tuple


class MicroLispValue(ABC):
    """
    Abstract base class for all microlisp values.

    Parsed source and evaluation results use the same representation.  All
    values are immutable; evaluation only ever changes scopes.
    """

    @abstractmethod
    def to_python(self) -> Any:
        """Convert to a Python value."""

    @abstractmethod
    def type_name(self) -> str:
        """Return microlisp type name for error messages."""


@dataclass(frozen=True)
class MicroLispVoid(MicroLispValue):
    """Represents the absence of a value."""

    def to_python(self) -> None:
        return None

    def type_name(self) -> str:
        return "void"


@dataclass(frozen=True)
class MicroLispNumber(MicroLispValue):
    """Represents a double-precision floating point number."""
    value: float

    def to_python(self) -> float:
        return self.value

    def type_name(self) -> str:
        return "number"


@dataclass(frozen=True)
class MicroLispBoolean(MicroLispValue):
    """Represents boolean values."""
    value: bool

    def to_python(self) -> bool:
        return self.value

    def type_name(self) -> str:
        return "boolean"


@dataclass(frozen=True)
class MicroLispSymbol(MicroLispValue):
    """Represents symbols that require scope lookup."""
    name: str
    position: int = field(default=0, compare=False)

    def to_python(self) -> str:
        """Symbols convert to their name string."""
        return self.name

    def type_name(self) -> str:
        return "symbol"

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f'MicroLispSymbol({self.name!r})'


@dataclass(frozen=True)
class MicroLispLambda(MicroLispValue):
    """
    Represents a function value.

    The body is a sequence of forms that is evaluated as a list when the
    function is called.  `closure_scope` is the arena index of the defining
    scope and is only set when the evaluator runs with lexical scoping.
    """
    parameters: Tuple[str, ...]
    body: Tuple[MicroLispValue, ...]
    closure_scope: int | None = field(default=None, compare=False)

    def to_python(self) -> 'MicroLispLambda':
        """Functions return themselves as Python values."""
        return self

    def type_name(self) -> str:
        return "lambda"


@dataclass(frozen=True)
class MicroLispList(MicroLispValue):
    """Represents a parenthesized form, read as code or as data depending on context."""
    elements: Tuple[MicroLispValue, ...] = ()

    def to_python(self) -> List[Any]:
        """Convert to Python list with Python values."""
        return [elem.to_python() for elem in self.elements]

    def type_name(self) -> str:
        return "list"

    def length(self) -> int:
        """Return the length of the list."""
        return len(self.elements)

    def is_empty(self) -> bool:
        """Check if the list is empty."""
        return len(self.elements) == 0

    def first(self) -> MicroLispValue:
        """Get the first element (raises IndexError if empty)."""
        if not self.elements:
            raise IndexError("Cannot get first element of empty list")

        return self.elements[0]

    def rest(self) -> Tuple[MicroLispValue, ...]:
        """Get all elements except the first."""
        return self.elements[1:]

    def get(self, index: int) -> MicroLispValue:
        """Get element at index (raises IndexError if out of bounds)."""
        return self.elements[index]


VOID = MicroLispVoid()
