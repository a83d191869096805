"""Open-tag stack for containers awaiting their closing tag."""

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

from ofx_repair.shared.errors import EmptyStackError

from .classifier import local_name


@dataclass(frozen=True)
class OpenElement:
    """A container start tag recorded well enough to be re-emitted."""

    name: str
    attributes: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    @property
    def local_name(self) -> str:
        """Get local tag name without namespace prefix."""
        return local_name(self.name)

    @property
    def namespace_prefix(self) -> Optional[str]:
        """Get namespace prefix if present."""
        if ":" in self.name:
            return self.name.rsplit(":", 1)[0]
        return None


class OpenTagStack:
    """LIFO stack of open containers, innermost last."""

    def __init__(self) -> None:
        self._elements: List[OpenElement] = []

    def push(self, element: OpenElement) -> None:
        self._elements.append(element)

    def pop(self) -> OpenElement:
        """Remove and return the innermost open element.

        Raises:
            EmptyStackError: If no element is open
        """
        if not self._elements:
            raise EmptyStackError()
        return self._elements.pop()

    def peek(self) -> Optional[OpenElement]:
        """Return the innermost open element without removing it."""
        if not self._elements:
            return None
        return self._elements[-1]

    def pop_until(self, name: str) -> Iterator[OpenElement]:
        """Pop elements up to and including the first one named ``name``.

        Every popped element is yielded, innermost first. Stops early when the
        stack runs empty without a match.
        """
        target = local_name(name)
        while self._elements:
            element = self._elements.pop()
            yield element
            if element.local_name == target:
                return

    def contains(self, name: str) -> bool:
        target = local_name(name)
        return any(element.local_name == target for element in self._elements)

    @property
    def size(self) -> int:
        return len(self._elements)

    def is_empty(self) -> bool:
        return not self._elements

    def snapshot(self) -> List[str]:
        """Names of the open elements, innermost last."""
        return [element.name for element in self._elements]

    def __len__(self) -> int:
        return len(self._elements)

    def __bool__(self) -> bool:
        return bool(self._elements)

    def __repr__(self) -> str:
        return f"OpenTagStack({self.snapshot()!r})"
