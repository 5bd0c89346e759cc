"""Tests for the define special form."""

import pytest

from microlisp import MicroLispArityError, MicroLispTypeError, MicroLispUnboundSymbolError, MicroLispNumber


class TestDefine:
    """Test define semantics."""

    COUNTED_CALL = "(define f (lambda (n) ((lambda () (+ 1 1)) (+ n 1))))"

    def test_define_with_tail(self, microlisp):
        """Test that an explicit tail expression is the result of the form."""
        assert microlisp.evaluate("(define x 5 x)") == 5.0
        assert microlisp.evaluate("(define x 5 (* x 3))") == 15.0

    def test_define_without_tail_returns_last_value(self, microlisp):
        """Test that without a tail the last value expression is the result."""
        assert microlisp.evaluate("(define x 5)") == 5.0
        assert microlisp.evaluate("(define x 5 y 6)") == 6.0

    def test_define_binds_in_current_scope(self, microlisp):
        """Test that bindings land in the scope the form is evaluated in."""
        scope = microlisp.create_session_scope()
        microlisp.evaluate_in("(define x 5 y 7)", scope)

        assert scope.get("x") == MicroLispNumber(5.0)
        assert scope.get("y") == MicroLispNumber(7.0)

    def test_sequential_bindings(self, microlisp):
        """Test that later value expressions see earlier keys."""
        assert microlisp.evaluate("(define a 2 b (* a 3) c (+ a b) c)") == 8.0

    def test_value_cannot_reference_own_key(self, microlisp):
        """Test that a value expression is evaluated before its key is bound."""
        with pytest.raises(MicroLispUnboundSymbolError, match="'x'"):
            microlisp.evaluate("(define x (+ x 1))")

    def test_redefinition_overwrites(self, microlisp):
        """Test that defining an existing name replaces it."""
        assert microlisp.evaluate("(define x 1 x (+ x 1) x)") == 2.0

    def test_trailing_value_evaluated_twice(self, microlisp_custom):
        """Test that the last value expression runs again as the form's result."""
        # With lexical scoping a call frame that builds a lambda stays alive, so frames count calls
        microlisp = microlisp_custom(lexical_scoping=True)
        scope = microlisp.create_session_scope()
        microlisp.evaluate_in(self.COUNTED_CALL, scope)
        frames_before = scope.arena.live_count()

        result = microlisp.evaluate_in("(define y (f 1))", scope)

        assert microlisp.format_result(result) == "(<lambda ()> 2)"
        assert scope.arena.live_count() - frames_before == 2

    def test_tail_evaluated_once(self, microlisp_custom):
        """Test that with an explicit tail the value expressions run once."""
        microlisp = microlisp_custom(lexical_scoping=True)
        scope = microlisp.create_session_scope()
        microlisp.evaluate_in(self.COUNTED_CALL, scope)
        frames_before = scope.arena.live_count()

        result = microlisp.evaluate_in("(define y (f 1) y)", scope)

        assert microlisp.format_result(result) == "(<lambda ()> 2)"
        assert scope.arena.live_count() - frames_before == 1

    def test_empty_define(self, microlisp):
        """Test that define needs operands."""
        with pytest.raises(MicroLispArityError, match="empty body"):
            microlisp.evaluate("(define)")

    def test_key_without_value(self, microlisp):
        """Test that a lone key is an odd definition."""
        with pytest.raises(MicroLispArityError, match="odd definitions"):
            microlisp.evaluate("(define x)")

    def test_odd_operand_count_ends_with_result_expression(self, microlisp):
        """Test that three or more odd operands treat the last one as the result, not a missing value."""
        scope = microlisp.create_session_scope()

        with pytest.raises(MicroLispUnboundSymbolError, match="'y'"):
            microlisp.evaluate_in("(define x 1 y)", scope)

        assert scope.get("x") == MicroLispNumber(1.0)
        assert scope.get("y") is None

    @pytest.mark.parametrize("expression", ["(define 1 2)", "(define #t 2)", "(define (x) 2)", "(define x 1 2 3 x)"])
    def test_key_must_be_symbol(self, microlisp, expression):
        """Test that every key position holds a symbol."""
        with pytest.raises(MicroLispTypeError, match="Expected symbol as key"):
            microlisp.evaluate(expression)

    def test_earlier_pairs_bound_before_error(self, microlisp):
        """Test that pairs before a bad key have already been bound."""
        scope = microlisp.create_session_scope()

        with pytest.raises(MicroLispTypeError):
            microlisp.evaluate_in("(define a 1 2 3)", scope)

        assert scope.get("a") == MicroLispNumber(1.0)

    def test_define_value_can_be_boolean(self, microlisp):
        """Test binding a boolean."""
        assert microlisp.evaluate("(define flag (< 1 2) (if flag 1 0))") == 1.0
