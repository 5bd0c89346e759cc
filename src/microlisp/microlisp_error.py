"""Exception classes for microlisp with detailed context."""

from typing import Any, List, Optional
import difflib


class MicroLispError(Exception):
    """Base exception for microlisp errors with detailed context information."""

    def __init__(
        self,
        message: str,
        context: Optional[str] = None,
        expected: Optional[str] = None,
        received: Optional[str] = None,
        suggestion: Optional[str] = None,
        example: Optional[str] = None,
        position: Optional[int] = None
    ):
        """
        Initialize detailed error.

        Args:
            message: Core error description
            context: Additional context information
            expected: What was expected
            received: What was actually received
            suggestion: Suggestion for fixing the error
            example: Example of correct usage
            position: Character position where error occurred
        """
        self.message = message
        self.context = context
        self.expected = expected
        self.received = received
        self.suggestion = suggestion
        self.example = example
        self.position = position

        super().__init__(self._format_detailed_message())

    def _format_detailed_message(self) -> str:
        """Format the error message with all available details."""
        parts = [f"Error: {self.message}"]

        if self.position is not None:
            parts.append(f"Position: {self.position}")

        if self.received:
            parts.append(f"Received: {self.received}")

        if self.expected:
            parts.append(f"Expected: {self.expected}")

        if self.context:
            parts.append(f"Context: {self.context}")

        if self.suggestion:
            parts.append(f"Suggestion: {self.suggestion}")

        if self.example:
            parts.append(f"Example: {self.example}")

        return "\n".join(parts)


class MicroLispTokenError(MicroLispError):
    """Tokenization errors with detailed context."""


class MicroLispParseError(MicroLispError):
    """Parsing errors with detailed context."""


class MicroLispEvalError(MicroLispError):
    """Evaluation errors with detailed context."""


class MicroLispUnboundSymbolError(MicroLispEvalError):
    """A symbol has no binding anywhere in the scope chain."""

    def __init__(self, name: str, **kwargs: Any) -> None:
        self.name = name
        super().__init__(message=f"Unbound symbol: '{name}'", **kwargs)


class MicroLispUnboundFunctionError(MicroLispEvalError):
    """A symbol in call position has no binding anywhere in the scope chain."""

    def __init__(self, name: str, **kwargs: Any) -> None:
        self.name = name
        super().__init__(message=f"Unbound function symbol: '{name}'", **kwargs)


class MicroLispNotCallableError(MicroLispEvalError):
    """A symbol in call position is bound to something other than a lambda."""

    def __init__(self, name: str, **kwargs: Any) -> None:
        self.name = name
        super().__init__(message=f"'{name}' is not bound to a lambda", **kwargs)


class MicroLispArityError(MicroLispEvalError):
    """Wrong number of operands for a special form or arguments for a function call."""


class MicroLispTypeError(MicroLispEvalError):
    """An operand evaluated to (or was written as) the wrong kind of value."""


class ErrorMessageBuilder:
    """Helper class for building detailed error messages."""

    @staticmethod
    def suggest_similar_names(target: str, available_names: List[str], max_suggestions: int = 3) -> List[str]:
        """Suggest similar names using fuzzy matching."""
        if not target or not available_names:
            return []

        return difflib.get_close_matches(target, available_names, n=max_suggestions, cutoff=0.6)

    @staticmethod
    def create_form_example(form_name: str) -> str:
        """Create usage example for the built-in forms."""
        examples = {
            '+': "(+ 1 2) → 3",
            '-': "(- 7 3) → 4",
            '*': "(* 7 3) → 21",
            '/': "(/ 12 3) → 4",
            '<': "(< 1 2) → #t",
            '>': "(> 3 2) → #t",
            '=': "(= 1 1) → #t",
            '!=': "(!= 1 2) → #t",
            'define': "(define x 5 y (* x 2) y) → 10",
            'if': "(if (> 5 3) 1 0) → 1",
            'lambda': "(define double (lambda (n) (* n 2)))",
        }

        return examples.get(form_name, f"({form_name} ...)")
