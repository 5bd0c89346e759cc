"""Tests for error handling and exception reporting."""

import pytest

from microlisp import (
    MicroLisp, MicroLispError, MicroLispTokenError, MicroLispParseError, MicroLispEvalError,
    MicroLispUnboundSymbolError, MicroLispUnboundFunctionError, MicroLispNotCallableError,
    MicroLispArityError, MicroLispTypeError, ErrorMessageBuilder
)


class TestErrorHierarchy:
    """Test the exception taxonomy."""

    @pytest.mark.parametrize("error_class", [
        MicroLispUnboundSymbolError, MicroLispUnboundFunctionError, MicroLispNotCallableError,
        MicroLispArityError, MicroLispTypeError
    ])
    def test_evaluation_errors_share_base(self, error_class):
        """Test that every evaluation failure is a MicroLispEvalError."""
        assert issubclass(error_class, MicroLispEvalError)
        assert issubclass(error_class, MicroLispError)

    def test_type_error_is_not_python_type_error(self):
        """Test that the language's type error is separate from Python's."""
        assert not issubclass(MicroLispTypeError, TypeError)

    @pytest.mark.parametrize("source,error_class", [
        ("(+ 1 #q)", MicroLispTokenError),
        ("(+ 1 2", MicroLispParseError),
        ("(+ x 1)", MicroLispUnboundSymbolError),
        ("(f 1)", MicroLispUnboundFunctionError),
        ("(define f 1 (f))", MicroLispNotCallableError),
        ("(if #t 1)", MicroLispArityError),
        ("(if 1 2 3)", MicroLispTypeError),
    ])
    def test_errors_by_stage(self, microlisp, source, error_class):
        """Test that each failure raises the specific error type."""
        with pytest.raises(error_class):
            microlisp.evaluate(source)


class TestErrorMessages:
    """Test the detailed error message format."""

    def test_detailed_message_parts(self):
        """Test that all detail fields appear in order."""
        error = MicroLispEvalError(
            message="Something failed",
            position=3,
            received="a",
            expected="b",
            context="c",
            suggestion="d",
            example="e"
        )

        assert str(error) == (
            "Error: Something failed\nPosition: 3\nReceived: a\nExpected: b\nContext: c\nSuggestion: d\nExample: e"
        )

    def test_message_only(self):
        """Test that absent fields are omitted."""
        assert str(MicroLispError("Just this")) == "Error: Just this"

    def test_unbound_symbol_fields(self, microlisp):
        """Test that symbol errors carry the name and position."""
        with pytest.raises(MicroLispUnboundSymbolError) as exc_info:
            microlisp.evaluate("(+ 1 missing)")

        assert exc_info.value.name == "missing"
        assert exc_info.value.position == 5
        assert "Unbound symbol: 'missing'" in str(exc_info.value)

    def test_type_error_received(self, microlisp):
        """Test that type errors show the offending value."""
        with pytest.raises(MicroLispTypeError) as exc_info:
            microlisp.evaluate("(if (+ 1 1) 1 2)")

        assert exc_info.value.received == "Condition: 2 (number)"

    def test_errors_propagate_unmodified(self, microlisp):
        """Test that an error deep inside calls reaches the caller as raised."""
        source = """
        (define inner (lambda (n) (+ n #t))
                outer (lambda (n) (inner n))
                (outer 1))
        """

        with pytest.raises(MicroLispTypeError, match="Right operand of '\\+' must be a number"):
            microlisp.evaluate(source)

    def test_error_does_not_poison_interpreter(self, microlisp):
        """Test that the interpreter keeps working after an error."""
        with pytest.raises(MicroLispError):
            microlisp.evaluate("(undefined 1)")

        assert microlisp.evaluate("(+ 1 2)") == 3.0
        assert microlisp.evaluator.call_stack.depth() == 0


class TestRecursionLimits:
    """Test that runaway recursion is reported instead of crashing."""

    def test_infinite_recursion_hits_depth_limit(self, microlisp):
        """Test a function that never stops calling itself."""
        with pytest.raises(MicroLispEvalError, match="too deeply nested") as exc_info:
            microlisp.evaluate("(define loop (lambda (n) (loop n)) (loop 1))")

        assert "loop(n=" in exc_info.value.context

    def test_frames_released_after_depth_error(self, microlisp):
        """Test that unwinding releases every call frame."""
        scope = microlisp.create_session_scope()

        with pytest.raises(MicroLispEvalError):
            microlisp.evaluate_in("(define loop (lambda (n) (loop n)) (loop 1))", scope)

        assert scope.arena.live_count() == 1

    def test_python_recursion_limit_reported(self, microlisp_custom):
        """Test that exhausting the Python stack is still a MicroLispEvalError."""
        microlisp = microlisp_custom(max_depth=1000000)

        with pytest.raises(MicroLispEvalError):
            microlisp.evaluate("(define loop (lambda (n) (loop (+ n 1))) (loop 1))")

    def test_custom_depth(self, microlisp_custom, helpers):
        """Test that max_depth bounds plain nesting too."""
        source = helpers.build_nested_expression("+", 30)

        assert microlisp_custom(max_depth=200).evaluate(source) == 31.0

        with pytest.raises(MicroLispEvalError, match="max depth: 20"):
            microlisp_custom(max_depth=20).evaluate(source)


class TestErrorMessageBuilder:
    """Test the error message helpers."""

    def test_suggest_similar_names(self):
        """Test fuzzy matching of names."""
        assert ErrorMessageBuilder.suggest_similar_names("fact", ["fact1", "other"]) == ["fact1"]
        assert not ErrorMessageBuilder.suggest_similar_names("zzz", ["fact"])
        assert not ErrorMessageBuilder.suggest_similar_names("", ["fact"])

    def test_form_examples(self):
        """Test built-in and fallback examples."""
        assert ErrorMessageBuilder.create_form_example("if") == "(if (> 5 3) 1 0) → 1"
        assert ErrorMessageBuilder.create_form_example("custom") == "(custom ...)"


def test_interpreter_default_configuration():
    """Test the default interpreter configuration."""
    microlisp = MicroLisp()

    assert microlisp.max_depth == 200
    assert microlisp.lexical_scoping is False
    assert microlisp.evaluator.max_depth == 200
