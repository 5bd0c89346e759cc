"""Evaluator for microlisp expression trees with detailed error messages."""

import logging
import math
import operator
from typing import Callable, Dict, List, Tuple

from microlisp.microlisp_call_stack import MicroLispCallStack
from microlisp.microlisp_error import (
    MicroLispError, MicroLispEvalError, MicroLispUnboundSymbolError, MicroLispUnboundFunctionError,
    MicroLispNotCallableError, MicroLispArityError, MicroLispTypeError, ErrorMessageBuilder
)
from microlisp.microlisp_scope import MicroLispScope
from microlisp.microlisp_value import (
    MicroLispValue, MicroLispVoid, MicroLispNumber, MicroLispBoolean, MicroLispSymbol,
    MicroLispLambda, MicroLispList, VOID
)


def _divide(left: float, right: float) -> float:
    """IEEE division: a zero divisor gives a signed infinity or NaN rather than an exception."""
    if right == 0.0:
        if left == 0.0 or math.isnan(left):
            return math.nan

        return math.copysign(math.inf, left) * math.copysign(1.0, right)

    return left / right


class MicroLispEvaluator:
    """Evaluates microlisp expression trees against a chain of scopes."""

    ARITHMETIC_OPERATORS: Dict[str, Callable[[float, float], float]] = {
        '+': operator.add,
        '-': operator.sub,
        '*': operator.mul,
        '/': _divide,
    }

    COMPARISON_OPERATORS: Dict[str, Callable[[float, float], bool]] = {
        '<': operator.lt,
        '>': operator.gt,
        '=': operator.eq,
        '!=': operator.ne,
    }

    SPECIAL_FORMS = ('define', 'if', 'lambda')

    def __init__(self, max_depth: int = 100, lexical_scoping: bool = False):
        """
        Initialize evaluator.

        Args:
            max_depth: Maximum recursion depth
            lexical_scoping: If True, lambdas capture their defining scope and calls extend it.
                If False, calls extend the caller's scope.
        """
        self.max_depth = max_depth
        self.lexical_scoping = lexical_scoping
        self.call_stack = MicroLispCallStack()
        self.message_builder = ErrorMessageBuilder()
        self._logger = logging.getLogger("MicroLispEvaluator")

    def is_special_form(self, name: str) -> bool:
        """Check if a symbol name heads a form with its own evaluation rules."""
        return name in self.ARITHMETIC_OPERATORS or name in self.COMPARISON_OPERATORS or name in self.SPECIAL_FORMS

    def create_global_scope(self) -> MicroLispScope:
        """Create an empty root scope in a new arena."""
        return MicroLispScope.root()

    def evaluate(
        self,
        expr: MicroLispValue,
        scope: MicroLispScope | None = None,
        depth: int = 0
    ) -> MicroLispValue:
        """
        Recursively evaluate an expression tree.

        Args:
            expr: Expression to evaluate
            scope: Scope for symbol lookups and definitions; a fresh root scope if omitted
            depth: Current recursion depth

        Returns:
            Evaluation result

        Raises:
            MicroLispEvalError: If evaluation fails
        """
        if scope is None:
            scope = self.create_global_scope()

        try:
            return self._evaluate_expression(expr, scope, depth)

        except MicroLispError:
            raise

        except RecursionError as e:
            raise MicroLispEvalError(
                message="Expression too deeply nested (Python recursion limit reached)",
                context=f"Call stack:\n{self.call_stack.format_stack_trace()}",
                suggestion="Check for a function that calls itself without a terminating condition"
            ) from e

        except Exception as e:
            raise MicroLispEvalError(
                message=f"Unexpected error during evaluation: {e}",
                context=f"Call stack:\n{self.call_stack.format_stack_trace()}",
                suggestion="This is an internal error - please report this issue"
            ) from e

        finally:
            if depth == 0:
                self.call_stack.clear()

    def _evaluate_expression(self, expr: MicroLispValue, scope: MicroLispScope, depth: int) -> MicroLispValue:
        """Internal expression evaluation with type dispatch."""
        if depth > self.max_depth:
            raise MicroLispEvalError(
                message=f"Expression too deeply nested (max depth: {self.max_depth})",
                context=f"Call stack:\n{self.call_stack.format_stack_trace()}",
                suggestion="Reduce nesting depth or increase max_depth limit"
            )

        # A lambda node reached directly (not through a call) produces nothing
        if isinstance(expr, (MicroLispVoid, MicroLispLambda)):
            return VOID

        if isinstance(expr, (MicroLispNumber, MicroLispBoolean)):
            return expr

        if isinstance(expr, MicroLispSymbol):
            return self._evaluate_symbol(expr, scope)

        if isinstance(expr, MicroLispList):
            return self._evaluate_list(expr, scope, depth)

        raise MicroLispEvalError(
            message=f"Invalid expression type: {type(expr).__name__}",
            expected="Number, boolean, symbol, lambda, or list"
        )

    def _evaluate_symbol(self, symbol: MicroLispSymbol, scope: MicroLispScope) -> MicroLispValue:
        value = scope.get(symbol.name)
        if value is not None:
            return value

        similar = self.message_builder.suggest_similar_names(symbol.name, scope.available_bindings())
        raise MicroLispUnboundSymbolError(
            symbol.name,
            position=symbol.position,
            suggestion=f"Did you mean: {', '.join(similar)}?" if similar else f"Define '{symbol.name}' before using it",
            example=f"(define {symbol.name} 1 ...)"
        )

    def _evaluate_list(self, expr: MicroLispList, scope: MicroLispScope, depth: int) -> MicroLispValue:
        """Dispatch a list on its head symbol, or evaluate it as a literal sequence."""
        if expr.is_empty() or not isinstance(expr.first(), MicroLispSymbol):
            return self._evaluate_sequence(expr, scope, depth)

        head = expr.first()
        assert isinstance(head, MicroLispSymbol)
        name = head.name
        operands = expr.rest()

        if not self.is_special_form(name):
            return self._evaluate_function_call(head, operands, scope, depth + 1)

        if name in self.ARITHMETIC_OPERATORS or name in self.COMPARISON_OPERATORS:
            return self._evaluate_binary_operator(name, operands, scope, depth + 1)

        if name == 'define':
            return self._evaluate_define_form(operands, scope, depth + 1)

        if name == 'if':
            return self._evaluate_if_form(operands, scope, depth + 1)

        assert name == 'lambda', f"Unhandled special form: {name}"
        return self._evaluate_lambda_form(operands, scope)

    def _evaluate_sequence(self, expr: MicroLispList, scope: MicroLispScope, depth: int) -> MicroLispList:
        """Evaluate every element in order, keeping the results that are not void."""
        results: List[MicroLispValue] = []
        for element in expr.elements:
            value = self._evaluate_expression(element, scope, depth + 1)
            if not isinstance(value, MicroLispVoid):
                results.append(value)

        return MicroLispList(tuple(results))

    def _evaluate_binary_operator(
        self,
        name: str,
        operands: Tuple[MicroLispValue, ...],
        scope: MicroLispScope,
        depth: int
    ) -> MicroLispValue:
        """
        Evaluate (op left right) for the arithmetic and comparison operators.

        Args:
            name: Operator symbol
            operands: Unevaluated operand expressions
            scope: Current scope
            depth: Current recursion depth

        Returns:
            A number for arithmetic operators, a boolean for comparisons
        """
        if len(operands) != 2:
            raise MicroLispArityError(
                message=f"Binary operator '{name}' must have 2 arguments",
                received=f"Got {len(operands)} arguments",
                expected="Exactly 2 arguments",
                example=self.message_builder.create_form_example(name)
            )

        left = self._evaluate_expression(operands[0], scope, depth + 1)
        right = self._evaluate_expression(operands[1], scope, depth + 1)

        for side, value in (("Left", left), ("Right", right)):
            if not isinstance(value, MicroLispNumber):
                raise MicroLispTypeError(
                    message=f"{side} operand of '{name}' must be a number",
                    received=f"{side} operand: {self.format_result(value)} ({value.type_name()})",
                    expected="Number",
                    example=self.message_builder.create_form_example(name)
                )

        assert isinstance(left, MicroLispNumber) and isinstance(right, MicroLispNumber)
        if name in self.ARITHMETIC_OPERATORS:
            return MicroLispNumber(self.ARITHMETIC_OPERATORS[name](left.value, right.value))

        return MicroLispBoolean(self.COMPARISON_OPERATORS[name](left.value, right.value))

    def _evaluate_define_form(
        self,
        operands: Tuple[MicroLispValue, ...],
        scope: MicroLispScope,
        depth: int
    ) -> MicroLispValue:
        """
        Evaluate (define k1 v1 k2 v2 ... [tail]).

        Each value is evaluated and bound in the current scope before the next
        pair is processed.  The last operand is then evaluated once more and
        its value is the result of the form.  Without an explicit tail that
        operand is the last value expression, so it runs twice.

        Args:
            operands: Unevaluated operands
            scope: Current scope, which receives the bindings
            depth: Current recursion depth

        Returns:
            Result of evaluating the last operand after all bindings are made
        """
        if not operands:
            raise MicroLispArityError(
                message="Definition body needs arguments (empty body)",
                expected="One or more name/value pairs",
                example=self.message_builder.create_form_example('define')
            )

        if len(operands) == 1:
            raise MicroLispArityError(
                message="Expected even number of definitions (odd definitions)",
                received=f"Got a name without a value: {self.format_result(operands[0])}",
                expected="Name/value pairs, optionally followed by a result expression",
                example=self.message_builder.create_form_example('define')
            )

        pair_count = len(operands) // 2
        for i in range(pair_count):
            key = operands[2 * i]
            if not isinstance(key, MicroLispSymbol):
                raise MicroLispTypeError(
                    message="Expected symbol as key in definition",
                    received=f"Key {i + 1}: {self.format_result(key)} ({key.type_name()})",
                    expected="Unquoted symbol (variable name)",
                    example=self.message_builder.create_form_example('define')
                )

            value = self._evaluate_expression(operands[2 * i + 1], scope, depth + 1)
            scope.set(key.name, value)
            self._logger.debug("Defined '%s' as %s in scope %d", key.name, value.type_name(), scope.index)

        return self._evaluate_expression(operands[-1], scope, depth + 1)

    def _evaluate_if_form(
        self,
        operands: Tuple[MicroLispValue, ...],
        scope: MicroLispScope,
        depth: int
    ) -> MicroLispValue:
        """
        Evaluate (if condition then else), evaluating only the chosen branch.

        Args:
            operands: Unevaluated condition, then-branch and else-branch
            scope: Current scope
            depth: Current recursion depth

        Returns:
            Result of evaluating the chosen branch
        """
        if len(operands) != 3:
            raise MicroLispArityError(
                message="If expression has wrong number of arguments",
                received=f"Got {len(operands)} arguments",
                expected="Exactly 3 arguments: (if condition then else)",
                example=self.message_builder.create_form_example('if')
            )

        condition = self._evaluate_expression(operands[0], scope, depth + 1)
        if not isinstance(condition, MicroLispBoolean):
            raise MicroLispTypeError(
                message="If condition must be boolean",
                received=f"Condition: {self.format_result(condition)} ({condition.type_name()})",
                expected="Boolean value (#t or #f)",
                suggestion="Use comparison operators like =, !=, <, or >"
            )

        if condition.value:
            return self._evaluate_expression(operands[1], scope, depth + 1)

        return self._evaluate_expression(operands[2], scope, depth + 1)

    def _evaluate_lambda_form(self, operands: Tuple[MicroLispValue, ...], scope: MicroLispScope) -> MicroLispLambda:
        """
        Evaluate (lambda (param1 param2 ...) body).

        Args:
            operands: Parameter list and body
            scope: Current scope, captured only with lexical scoping

        Returns:
            MicroLispLambda holding the parameter names and the body's forms
        """
        if len(operands) != 2:
            raise MicroLispArityError(
                message="Lambda definition should have a parameter list and a body",
                received=f"Got {len(operands)} arguments",
                expected="Exactly 2 arguments: (lambda (params...) body)",
                example=self.message_builder.create_form_example('lambda')
            )

        param_expr, body_expr = operands
        if not isinstance(param_expr, MicroLispList):
            raise MicroLispTypeError(
                message="Expected parameter list",
                received=f"Parameter list: {self.format_result(param_expr)} ({param_expr.type_name()})",
                expected="List of symbols: (param1 param2 ...)",
                example=self.message_builder.create_form_example('lambda')
            )

        parameters: List[str] = []
        for i, param in enumerate(param_expr.elements):
            if not isinstance(param, MicroLispSymbol):
                raise MicroLispTypeError(
                    message="Expected symbol names for lambda parameters",
                    received=f"Parameter {i + 1}: {self.format_result(param)} ({param.type_name()})",
                    expected="Unquoted symbol (variable name)",
                    example=self.message_builder.create_form_example('lambda')
                )

            parameters.append(param.name)

        if not isinstance(body_expr, MicroLispList):
            raise MicroLispTypeError(
                message="Expected list for lambda body",
                received=f"Body: {self.format_result(body_expr)} ({body_expr.type_name()})",
                expected="A parenthesized form",
                example=self.message_builder.create_form_example('lambda')
            )

        if not self.lexical_scoping:
            return MicroLispLambda(parameters=tuple(parameters), body=body_expr.elements)

        scope.capture()
        return MicroLispLambda(parameters=tuple(parameters), body=body_expr.elements, closure_scope=scope.index)

    def _evaluate_function_call(
        self,
        name_symbol: MicroLispSymbol,
        arg_exprs: Tuple[MicroLispValue, ...],
        scope: MicroLispScope,
        depth: int
    ) -> MicroLispValue:
        """
        Evaluate (name arg1 arg2 ...) by applying the lambda bound to name.

        Arguments are evaluated in the caller's scope.  The body runs in a new
        child of the caller's scope, or of the captured scope with lexical
        scoping.

        Args:
            name_symbol: Symbol in call position
            arg_exprs: Unevaluated argument expressions
            scope: Caller's scope
            depth: Current recursion depth

        Returns:
            Result of evaluating the lambda body
        """
        name = name_symbol.name
        func = scope.get(name)
        if func is None:
            similar = self.message_builder.suggest_similar_names(name, scope.available_bindings())
            raise MicroLispUnboundFunctionError(
                name,
                position=name_symbol.position,
                suggestion=f"Did you mean: {', '.join(similar)}?" if similar else f"Define '{name}' with a lambda first",
                example=self.message_builder.create_form_example('lambda')
            )

        if not isinstance(func, MicroLispLambda):
            raise MicroLispNotCallableError(
                name,
                position=name_symbol.position,
                received=f"'{name}' is {self.format_result(func)} ({func.type_name()})",
                expected="Lambda",
                suggestion=f"Bind '{name}' to a lambda before calling it"
            )

        if len(arg_exprs) != len(func.parameters):
            param_list = " ".join(func.parameters) if func.parameters else "(no parameters)"
            raise MicroLispArityError(
                message=f"Function '{name}' expects {len(func.parameters)} arguments, got {len(arg_exprs)}",
                expected=f"Parameters: {param_list}",
                suggestion=f"Provide exactly {len(func.parameters)} argument{'s' if len(func.parameters) != 1 else ''}"
            )

        arg_values = [self._evaluate_expression(arg, scope, depth + 1) for arg in arg_exprs]

        if self.lexical_scoping and func.closure_scope is not None:
            call_scope = MicroLispScope(scope.arena, scope.arena.extend(func.closure_scope))

        else:
            call_scope = scope.extend()

        param_bindings = {}
        for param, value in zip(func.parameters, arg_values):
            call_scope.set(param, value)
            param_bindings[param] = value

        self._logger.debug("Calling '%s' in scope %d (depth %d)", name, call_scope.index, depth)
        self.call_stack.push(name, param_bindings)

        try:
            return self._evaluate_expression(MicroLispList(func.body), call_scope, depth + 1)

        finally:
            self.call_stack.pop()

            # Nothing can refer to a call frame once the call returns, unless a lambda captured it
            if not self.lexical_scoping or call_scope.is_releasable():
                call_scope.release()

    def format_result(self, result: MicroLispValue) -> str:
        """
        Format a value for display using LISP conventions.

        Args:
            result: The value to format

        Returns:
            String representation of the value
        """
        if isinstance(result, MicroLispBoolean):
            return "#t" if result.value else "#f"

        if isinstance(result, MicroLispNumber):
            value = result.value
            if value.is_integer() and abs(value) < 1e16:
                return str(int(value))

            return repr(value)

        if isinstance(result, MicroLispSymbol):
            return result.name

        if isinstance(result, MicroLispList):
            return f"({' '.join(self.format_result(element) for element in result.elements)})"

        if isinstance(result, MicroLispLambda):
            return f"<lambda ({' '.join(result.parameters)})>"

        if isinstance(result, MicroLispVoid):
            return "#<void>"

        return str(result)
