"""Main microlisp class tying the tokenizer, parser and evaluator together."""

import logging
from typing import Any, List

from microlisp.microlisp_evaluator import MicroLispEvaluator
from microlisp.microlisp_parser import MicroLispParser
from microlisp.microlisp_scope import MicroLispScope
from microlisp.microlisp_tokenizer import MicroLispTokenizer
from microlisp.microlisp_value import MicroLispList, MicroLispValue


class MicroLisp:
    """
    microlisp interpreter: parenthesized prefix expressions over floats and booleans,
    with define, if, lambda and function calls.

    Every error raised while tokenizing, parsing or evaluating is a
    MicroLispError carrying what was received, what was expected and, where
    possible, a suggestion and an example.
    """

    def __init__(self, max_depth: int = 200, lexical_scoping: bool = False):
        """
        Initialize the interpreter.

        Args:
            max_depth: Maximum recursion depth for expression evaluation
            lexical_scoping: If True, function calls extend the scope the lambda was created in
                rather than the caller's scope
        """
        self.max_depth = max_depth
        self.lexical_scoping = lexical_scoping
        self.evaluator = MicroLispEvaluator(max_depth=max_depth, lexical_scoping=lexical_scoping)
        self._logger = logging.getLogger("MicroLisp")

    def parse(self, source: str) -> MicroLispList:
        """
        Tokenize and parse a program consisting of one top-level form.

        Raises:
            MicroLispTokenError: If tokenization fails
            MicroLispParseError: If parsing fails
        """
        tokens = MicroLispTokenizer().tokenize(source)
        return MicroLispParser(tokens, source).parse()

    def parse_program(self, source: str) -> List[MicroLispList]:
        """
        Tokenize and parse a program made of one or more top-level forms.

        Raises:
            MicroLispTokenError: If tokenization fails
            MicroLispParseError: If parsing fails
        """
        tokens = MicroLispTokenizer().tokenize(source)
        return MicroLispParser(tokens, source).parse_program()

    def create_session_scope(self) -> MicroLispScope:
        """Create a root scope that can be reused across several evaluations."""
        return self.evaluator.create_global_scope()

    def evaluate_in(self, source: str, scope: MicroLispScope) -> MicroLispValue:
        """
        Evaluate a single-form program in an existing scope.

        Args:
            source: microlisp source to evaluate
            scope: Scope that receives any definitions made by the program

        Returns:
            The result of the evaluation as a microlisp value
        """
        return self.evaluator.evaluate(self.parse(source), scope)

    def evaluate(self, source: str) -> Any:
        """
        Evaluate a single-form program in a fresh scope.

        Args:
            source: microlisp source to evaluate

        Returns:
            The result of evaluating the program converted to Python types

        Raises:
            MicroLispTokenError: If tokenization fails
            MicroLispParseError: If parsing fails
            MicroLispEvalError: If evaluation fails
        """
        return self.evaluate_in(source, self.create_session_scope()).to_python()

    def evaluate_and_format(self, source: str) -> str:
        """
        Evaluate a single-form program in a fresh scope and format the result.

        Returns:
            String representation of the result using LISP conventions

        Raises:
            MicroLispTokenError: If tokenization fails
            MicroLispParseError: If parsing fails
            MicroLispEvalError: If evaluation fails
        """
        result = self.evaluate_in(source, self.create_session_scope())
        return self.evaluator.format_result(result)

    def evaluate_program(self, source: str) -> List[MicroLispValue]:
        """
        Evaluate every top-level form in order, sharing one root scope.

        Definitions made by earlier forms are visible to later ones.  The
        first error aborts the run.

        Returns:
            One result per top-level form
        """
        forms = self.parse_program(source)
        scope = self.create_session_scope()
        self._logger.debug("Evaluating %d top-level form(s)", len(forms))
        return [self.evaluator.evaluate(form, scope) for form in forms]

    def format_result(self, result: MicroLispValue) -> str:
        """Format a value using LISP conventions."""
        return self.evaluator.format_result(result)
