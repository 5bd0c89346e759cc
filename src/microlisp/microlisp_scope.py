"""Scope management for microlisp variable and function bindings."""

import logging
from dataclasses import dataclass, field
from typing import Dict, List

from microlisp.microlisp_value import MicroLispValue


@dataclass
class MicroLispScopeFrame:
    """One lexical frame: local bindings plus the arena index of the enclosing frame."""
    bindings: Dict[str, MicroLispValue] = field(default_factory=dict)
    parent: int | None = None
    children: int = 0
    captured: bool = False


class MicroLispScopeArena:
    """
    Owns every scope frame of an evaluation session.

    Frames are addressed by index and link to their parent by index, so many
    child frames can share one parent without any frame owning another.
    Reads walk outwards through parent indices; writes only ever touch the
    addressed frame.
    """

    def __init__(self) -> None:
        """Initialize an empty arena."""
        self._frames: List[MicroLispScopeFrame | None] = []
        self._free: List[int] = []
        self._logger = logging.getLogger("MicroLispScopeArena")

    def create_root(self) -> int:
        """
        Create a frame with no parent.

        Returns:
            Index of the new frame
        """
        return self._allocate(MicroLispScopeFrame())

    def extend(self, parent: int) -> int:
        """
        Create a new empty frame whose parent is the given frame.

        Args:
            parent: Index of the enclosing frame

        Returns:
            Index of the new frame
        """
        self._frame(parent).children += 1
        return self._allocate(MicroLispScopeFrame(parent=parent))

    def get(self, index: int, name: str) -> MicroLispValue | None:
        """
        Look up a name starting at the given frame and delegating to its ancestors.

        Args:
            index: Frame to start the search from
            name: Symbol name to look up

        Returns:
            The bound value, or None if no frame in the chain binds the name
        """
        current: int | None = index
        while current is not None:
            frame = self._frame(current)
            if name in frame.bindings:
                return frame.bindings[name]

            current = frame.parent

        return None

    def set(self, index: int, name: str, value: MicroLispValue) -> None:
        """Insert or overwrite a binding in the given frame only."""
        self._frame(index).bindings[name] = value

    def parent_of(self, index: int) -> int | None:
        """Return the parent index of a frame, or None for a root frame."""
        return self._frame(index).parent

    def local_bindings(self, index: int) -> Dict[str, MicroLispValue]:
        """Return a copy of the bindings held directly by a frame."""
        return self._frame(index).bindings.copy()

    def capture(self, index: int) -> None:
        """Mark a frame as referenced by a lambda value, so it must outlive its call."""
        self._frame(index).captured = True

    def is_releasable(self, index: int) -> bool:
        """Check if a frame has no live children and no lambda has captured it."""
        frame = self._frame(index)
        return not frame.captured and frame.children == 0

    def release(self, index: int) -> None:
        """
        Return a frame to the arena so its slot can be reused.

        Args:
            index: Frame to release

        Raises:
            ValueError: If the frame is unknown, already released, or still has live child frames
        """
        frame = self._frame(index)
        if frame.children:
            raise ValueError(f"Scope frame {index} still has {frame.children} live child frame(s)")

        if frame.parent is not None:
            self._frame(frame.parent).children -= 1

        self._frames[index] = None
        self._free.append(index)
        self._logger.debug("Released scope frame %d", index)

    def live_count(self) -> int:
        """Return the number of frames currently in use."""
        return len(self._frames) - len(self._free)

    def _allocate(self, frame: MicroLispScopeFrame) -> int:
        if self._free:
            index = self._free.pop()
            self._frames[index] = frame
            return index

        self._frames.append(frame)
        return len(self._frames) - 1

    def _frame(self, index: int) -> MicroLispScopeFrame:
        if index < 0 or index >= len(self._frames):
            raise ValueError(f"Unknown scope frame {index}")

        frame = self._frames[index]
        if frame is None:
            raise ValueError(f"Scope frame {index} has been released")

        return frame

    def __repr__(self) -> str:
        return f"MicroLispScopeArena(live={self.live_count()})"


@dataclass(frozen=True)
class MicroLispScope:
    """
    Handle on one frame of a scope arena.

    Handles are cheap values; two handles on the same frame see the same
    bindings.
    """
    arena: MicroLispScopeArena
    index: int

    @classmethod
    def root(cls, arena: MicroLispScopeArena | None = None) -> 'MicroLispScope':
        """Create a new root scope, in a fresh arena unless one is given."""
        if arena is None:
            arena = MicroLispScopeArena()

        return cls(arena, arena.create_root())

    def extend(self) -> 'MicroLispScope':
        """Create a new empty child scope of this one."""
        return MicroLispScope(self.arena, self.arena.extend(self.index))

    def get(self, name: str) -> MicroLispValue | None:
        """Look up a name here or in any enclosing scope."""
        return self.arena.get(self.index, name)

    def set(self, name: str, value: MicroLispValue) -> None:
        """Bind a name in this scope only."""
        self.arena.set(self.index, name, value)

    def has_binding(self, name: str) -> bool:
        """Check if a name is bound here or in any enclosing scope."""
        return self.get(name) is not None

    def parent(self) -> 'MicroLispScope | None':
        """Return the enclosing scope, if any."""
        parent = self.arena.parent_of(self.index)
        if parent is None:
            return None

        return MicroLispScope(self.arena, parent)

    def local_bindings(self) -> Dict[str, MicroLispValue]:
        """Get bindings defined in this scope only (not parents)."""
        return self.arena.local_bindings(self.index)

    def available_bindings(self) -> List[str]:
        """Get all names visible from this scope, innermost first."""
        available: List[str] = []
        scope: MicroLispScope | None = self
        while scope is not None:
            available.extend(name for name in scope.local_bindings() if name not in available)
            scope = scope.parent()

        return available

    def capture(self) -> None:
        """Mark this scope as captured by a lambda."""
        self.arena.capture(self.index)

    def is_releasable(self) -> bool:
        """Check if this scope's frame could be released now."""
        return self.arena.is_releasable(self.index)

    def release(self) -> None:
        """Release this scope's frame back to the arena."""
        self.arena.release(self.index)

    def __repr__(self) -> str:
        local_bindings = list(self.arena.local_bindings(self.index))
        parent = self.arena.parent_of(self.index)
        parent_info = f" (parent: {parent})" if parent is not None else ""
        return f"MicroLispScope({self.index}: {local_bindings}{parent_info})"
