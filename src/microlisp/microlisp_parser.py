"""Parser for microlisp source with detailed error messages."""

from dataclasses import dataclass
from typing import List

from microlisp.microlisp_error import MicroLispParseError
from microlisp.microlisp_token import MicroLispToken, MicroLispTokenType
from microlisp.microlisp_value import MicroLispValue, MicroLispNumber, MicroLispBoolean, MicroLispSymbol, MicroLispList


@dataclass
class ParenStackFrame:
    """Represents an unclosed opening parenthesis with context."""
    position: int
    context_snippet: str


class MicroLispParser:
    """Parses tokens into a tree of microlisp values, one list per parenthesized form."""

    def __init__(self, tokens: List[MicroLispToken], source: str = ""):
        """
        Initialize parser with tokens and original source.

        Args:
            tokens: List of tokens to parse
            source: Original source string for error context
        """
        self.tokens = tokens
        self.pos = 0
        self.current_token: MicroLispToken | None = tokens[0] if tokens else None
        self.source = source

        # Paren stack for tracking unclosed forms
        self.paren_stack: List[ParenStackFrame] = []

    def parse(self) -> MicroLispList:
        """
        Parse a program consisting of exactly one top-level form.

        Returns:
            The root list of the program

        Raises:
            MicroLispParseError: If parsing fails with detailed context
        """
        self._check_not_empty()
        program = self._parse_top_level_form()

        if self.current_token is not None:
            raise MicroLispParseError(
                message="Unexpected token after complete program",
                position=self.current_token.position,
                received=f"Found: {self.current_token.value}",
                expected="End of input",
                example="Correct: (+ 1 2)\nIncorrect: (+ 1 2) extra",
                suggestion="Wrap the forms in one outer list: ((define x 1) (+ x 1))",
                context="A program is a single parenthesized form"
            )

        return program

    def parse_program(self) -> List[MicroLispList]:
        """
        Parse one or more top-level forms.

        Returns:
            The top-level lists in source order

        Raises:
            MicroLispParseError: If parsing fails with detailed context
        """
        self._check_not_empty()

        forms = []
        while self.current_token is not None:
            forms.append(self._parse_top_level_form())

        return forms

    def _check_not_empty(self) -> None:
        if self.current_token is None:
            raise MicroLispParseError(
                message="Empty program",
                expected="A parenthesized form",
                example="(+ 1 2)",
                suggestion="Provide a complete form to evaluate",
                context="Source cannot be empty or contain only whitespace and comments"
            )

    def _parse_top_level_form(self) -> MicroLispList:
        """Parse one top-level form, which must be a list."""
        assert self.current_token is not None, "Current token must not be None here"
        token = self.current_token
        if token.type != MicroLispTokenType.LPAREN:
            raise MicroLispParseError(
                message="Expected start of list",
                position=token.position,
                received=f"Found: {token.value}",
                expected="'(' starting a top-level form",
                example="Correct: (+ 1 2)\nIncorrect: 42",
                suggestion="Wrap the expression in parentheses"
            )

        return self._parse_list(token.position)

    def _parse_expression(self) -> MicroLispValue:
        """Parse a single expression with detailed error reporting."""
        assert self.current_token is not None, "Current token must not be None here"
        token = self.current_token

        if token.type == MicroLispTokenType.LPAREN:
            return self._parse_list(token.position)

        if token.type == MicroLispTokenType.SYMBOL:
            self._advance()
            return MicroLispSymbol(token.value, token.position)

        if token.type == MicroLispTokenType.NUMBER:
            self._advance()
            return MicroLispNumber(token.value)

        # Lists stop at their closing paren, so a stray RPAREN never reaches here
        assert token.type == MicroLispTokenType.BOOLEAN, f"Unexpected token type ({token.type}) encountered"
        self._advance()
        return MicroLispBoolean(token.value)

    def _get_context_snippet(self, position: int, length: int = 30) -> str:
        """
        Get a snippet of source starting at position for error display.

        Args:
            position: Starting character position
            length: Maximum length of snippet

        Returns:
            Formatted context snippet with ellipsis if truncated
        """
        end = min(position + length, len(self.source))
        snippet = ' '.join(self.source[position:end].split())

        if end < len(self.source):
            snippet += "..."

        return snippet

    def _create_unterminated_error(self, start_pos: int) -> MicroLispParseError:
        """
        Create an error listing every unclosed form.

        Args:
            start_pos: Position where the unterminated list started

        Returns:
            MicroLispParseError with the unclosed forms as context
        """
        depth = len(self.paren_stack)

        stack_lines = []
        for i, frame in enumerate(self.paren_stack, 1):
            stack_lines.append(f"  {i}. list at position {frame.position}: {frame.context_snippet}")

        stack_trace = "\n".join(stack_lines)
        closing_parens = " ".join(")" * depth)
        paren_word = "parenthesis" if depth == 1 else "parentheses"

        return MicroLispParseError(
            message=f"Unterminated list - missing {depth} closing {paren_word}",
            position=start_pos,
            expected=f'Add "{closing_parens}" to close all forms',
            example="Correct: (+ 1 2)\nIncorrect: (+ 1 2",
            suggestion=f"Add {depth} closing {paren_word}: {closing_parens}",
            context=f"Reached end of input at depth {depth}.\n\nUnclosed forms:\n{stack_trace}"
        )

    def _parse_list(self, start_pos: int) -> MicroLispList:
        """Parse (element1 element2 ...) tracking unclosed parentheses."""
        self.paren_stack.append(ParenStackFrame(start_pos, self._get_context_snippet(start_pos)))
        self._advance()  # consume '('

        elements = []
        while self.current_token is not None and self.current_token.type != MicroLispTokenType.RPAREN:
            elements.append(self._parse_expression())

        if self.current_token is None:
            raise self._create_unterminated_error(start_pos)

        self.paren_stack.pop()
        self._advance()  # consume ')'

        return MicroLispList(tuple(elements))

    def _advance(self) -> None:
        """Move to the next token."""
        self.pos += 1
        if self.pos < len(self.tokens):
            self.current_token = self.tokens[self.pos]

        else:
            self.current_token = None
