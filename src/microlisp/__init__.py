"""microlisp package: a small Lisp-family interpreter over floats and booleans."""

# Main API
from microlisp.microlisp import MicroLisp

# Exceptions
from microlisp.microlisp_error import (
    MicroLispError, MicroLispTokenError, MicroLispParseError, MicroLispEvalError,
    MicroLispUnboundSymbolError, MicroLispUnboundFunctionError, MicroLispNotCallableError,
    MicroLispArityError, MicroLispTypeError, ErrorMessageBuilder
)

# Value types
from microlisp.microlisp_value import (
    MicroLispValue, MicroLispVoid, MicroLispNumber, MicroLispBoolean, MicroLispSymbol,
    MicroLispLambda, MicroLispList, VOID
)

# Lower-level components (for advanced usage)
from microlisp.microlisp_token import MicroLispToken, MicroLispTokenType
from microlisp.microlisp_tokenizer import MicroLispTokenizer
from microlisp.microlisp_parser import MicroLispParser
from microlisp.microlisp_scope import MicroLispScope, MicroLispScopeArena
from microlisp.microlisp_call_stack import MicroLispCallStack
from microlisp.microlisp_evaluator import MicroLispEvaluator


__all__ = [
    # Main API
    "MicroLisp",

    # Exceptions
    "MicroLispError", "MicroLispTokenError", "MicroLispParseError", "MicroLispEvalError",
    "MicroLispUnboundSymbolError", "MicroLispUnboundFunctionError", "MicroLispNotCallableError",
    "MicroLispArityError", "MicroLispTypeError", "ErrorMessageBuilder",

    # Value types
    "MicroLispValue", "MicroLispVoid", "MicroLispNumber", "MicroLispBoolean", "MicroLispSymbol",
    "MicroLispLambda", "MicroLispList", "VOID",

    # Lower-level components
    "MicroLispToken", "MicroLispTokenType", "MicroLispTokenizer", "MicroLispParser",
    "MicroLispScope", "MicroLispScopeArena", "MicroLispCallStack", "MicroLispEvaluator"
]
