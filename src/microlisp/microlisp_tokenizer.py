"""Tokenizer for microlisp source with detailed error messages."""

from typing import List, Tuple

from microlisp.microlisp_error import MicroLispTokenError
from microlisp.microlisp_token import MicroLispToken, MicroLispTokenType


class MicroLispTokenizer:
    """Tokenizes microlisp source into tokens with detailed error messages."""

    def tokenize(self, source: str) -> List[MicroLispToken]:
        """
        Tokenize microlisp source with detailed error reporting.

        Args:
            source: The source string to tokenize

        Returns:
            List of tokens

        Raises:
            MicroLispTokenError: If tokenization fails with detailed context
        """
        tokens = []
        i = 0

        while i < len(source):
            if source[i].isspace():
                i += 1
                continue

            # Comments - skip from ';' to end of line
            if source[i] == ';':
                while i < len(source) and source[i] != '\n':
                    i += 1

                continue

            if source[i] == '(':
                tokens.append(MicroLispToken(MicroLispTokenType.LPAREN, '(', i))
                i += 1
                continue

            if source[i] == ')':
                tokens.append(MicroLispToken(MicroLispTokenType.RPAREN, ')', i))
                i += 1
                continue

            if source[i] == '#':
                tokens.append(self._read_boolean(source, i))
                i += 2
                continue

            char_code = ord(source[i])
            if char_code < 32:
                char_display = f"\\u{char_code:04x}"
                raise MicroLispTokenError(
                    message=f"Invalid control character in source code: {char_display}",
                    position=i,
                    received=f"Control character: {char_display} (code {char_code})",
                    expected="Printable characters, whitespace, or parentheses",
                    suggestion="Remove the control character"
                )

            atom, length = self._read_atom(source, i)
            tokens.append(self._classify_atom(atom, i, length))
            i += length

        return tokens

    def _read_boolean(self, source: str, start: int) -> MicroLispToken:
        """
        Read a #t or #f literal.

        Raises:
            MicroLispTokenError: If the # sequence is not a valid boolean
        """
        end = start + 1
        while end < len(source) and not self._is_delimiter(source[end]):
            end += 1

        literal = source[start:end]
        if literal == '#t':
            return MicroLispToken(MicroLispTokenType.BOOLEAN, True, start, 2)

        if literal == '#f':
            return MicroLispToken(MicroLispTokenType.BOOLEAN, False, start, 2)

        raise MicroLispTokenError(
            message=f"Invalid boolean literal: {literal}",
            position=start,
            received=f"Boolean literal: {literal}",
            expected="Valid boolean: #t or #f",
            example="Correct: #t, #f\nIncorrect: #true, #false, #T",
            suggestion="Use #t for true or #f for false",
            context="# must be followed by exactly 't' or 'f'"
        )

    def _read_atom(self, source: str, start: int) -> Tuple[str, int]:
        """
        Read a number or symbol up to the next delimiter.

        Returns:
            Tuple of (atom_text, length_consumed)
        """
        i = start
        while i < len(source) and not self._is_delimiter(source[i]):
            i += 1

        return source[start:i], i - start

    def _classify_atom(self, atom: str, position: int, length: int) -> MicroLispToken:
        """Turn an atom into a NUMBER token if it reads as a float, otherwise a SYMBOL token."""
        # float() accepts digit separators, which are not part of the language
        if '_' not in atom:
            try:
                return MicroLispToken(MicroLispTokenType.NUMBER, float(atom), position, length)

            except ValueError:
                pass

        return MicroLispToken(MicroLispTokenType.SYMBOL, atom, position, length)

    def _is_delimiter(self, char: str) -> bool:
        """Check if character ends an atom."""
        return char.isspace() or char in "();"
