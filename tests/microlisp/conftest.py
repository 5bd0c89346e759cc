"""Shared fixtures and utilities for microlisp tests."""

import pytest

from microlisp import MicroLisp, MicroLispEvaluator, MicroLispScope, MicroLispList, MicroLispSymbol, MicroLispValue


@pytest.fixture
def microlisp():
    """Create a fresh MicroLisp instance for each test."""
    return MicroLisp()


@pytest.fixture
def microlisp_custom():
    """Factory for MicroLisp instances with custom configuration."""
    def _create_microlisp(max_depth: int = 200, lexical_scoping: bool = False) -> MicroLisp:
        return MicroLisp(max_depth=max_depth, lexical_scoping=lexical_scoping)
    return _create_microlisp


@pytest.fixture
def evaluator():
    """Create a bare evaluator for tests that build trees by hand."""
    return MicroLispEvaluator()


@pytest.fixture
def scope():
    """Create an empty root scope."""
    return MicroLispScope.root()


class MicroLispTestHelpers:
    """Helper utilities for microlisp testing."""

    @staticmethod
    def form(*elements: MicroLispValue) -> MicroLispList:
        """Build a list node from already-constructed values."""
        return MicroLispList(tuple(elements))

    @staticmethod
    def sym(name: str) -> MicroLispSymbol:
        """Build a symbol node."""
        return MicroLispSymbol(name)

    @staticmethod
    def assert_evaluates_to(microlisp: MicroLisp, source: str, expected: str) -> None:
        """Assert that source evaluates to the expected LISP-formatted result."""
        result = microlisp.evaluate_and_format(source)
        assert result == expected, f"Expected LISP format '{expected}', got '{result}'"

    @staticmethod
    def build_nested_expression(operator: str, depth: int, base_value: str = "1") -> str:
        """Build deeply nested expression for recursion testing."""
        if depth <= 0:
            return base_value

        inner = MicroLispTestHelpers.build_nested_expression(operator, depth - 1, base_value)
        return f"({operator} {base_value} {inner})"


@pytest.fixture
def helpers():
    """Provide test helper utilities."""
    return MicroLispTestHelpers
