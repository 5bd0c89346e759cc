"""Call stack tracking for microlisp function calls."""

from dataclasses import dataclass
from typing import Dict, List

from microlisp.microlisp_value import MicroLispValue


class MicroLispCallStack:
    """
    Call stack for tracking function calls and providing detailed error messages.
    """

    @dataclass
    class CallFrame:
        """Represents a single function call frame."""
        function_name: str
        arguments: Dict[str, MicroLispValue]

    def __init__(self) -> None:
        """Initialize empty call stack."""
        self.frames: List[MicroLispCallStack.CallFrame] = []

    def push(self, function_name: str, arguments: Dict[str, MicroLispValue]) -> None:
        """
        Push a new call frame onto the stack.

        Args:
            function_name: Name the function was called by
            arguments: Dictionary of parameter names to values
        """
        self.frames.append(MicroLispCallStack.CallFrame(function_name=function_name, arguments=arguments))

    def pop(self) -> 'MicroLispCallStack.CallFrame | None':
        """
        Pop the top call frame from the stack.

        Returns:
            The popped frame, or None if stack is empty
        """
        if self.frames:
            return self.frames.pop()

        return None

    def depth(self) -> int:
        """Get the current call stack depth."""
        return len(self.frames)

    def clear(self) -> None:
        """Drop all frames."""
        self.frames.clear()

    def format_stack_trace(self, max_frames: int = 10) -> str:
        """
        Format the call stack as a string for error messages.

        Args:
            max_frames: Maximum number of frames to include

        Returns:
            Formatted stack trace string
        """
        if not self.frames:
            return "  (no function calls)"

        lines = []
        frames_to_show = self.frames[-max_frames:]

        if len(self.frames) > max_frames:
            lines.append(f"  ... ({len(self.frames) - max_frames} more frames)")

        for i, frame in enumerate(frames_to_show):
            indent = "  " + "  " * i
            args_str = ", ".join(f"{k}={repr(v)}" for k, v in frame.arguments.items())
            lines.append(f"{indent}{frame.function_name}({args_str})")

        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"MicroLispCallStack(depth={len(self.frames)})"
