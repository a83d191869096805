"""Rendering of repaired markup into an append-only UTF-8 buffer."""

from typing import Iterable, Tuple

from ofx_repair.character.escape import escape


class MarkupWriter:
    """Append-only output buffer for the recovery engine.

    Text handed to ``write_element`` must already be escaped; attribute
    values are escaped here.
    """

    def __init__(self) -> None:
        self._buffer = bytearray()

    def write_start(self, name: str, attributes: Iterable[Tuple[str, str]] = ()) -> None:
        parts = [name]
        parts.extend(f'{attr}="{escape(value)}"' for attr, value in attributes)
        self._write(f"<{' '.join(parts)}>")

    def write_end(self, name: str) -> None:
        self._write(f"</{name}>")

    def write_element(
        self,
        name: str,
        escaped_text: str,
        attributes: Iterable[Tuple[str, str]] = (),
    ) -> None:
        """Write a complete leaf element."""
        self.write_start(name, attributes)
        self._write(escaped_text)
        self.write_end(name)

    def _write(self, markup: str) -> None:
        self._buffer += markup.encode("utf-8")

    def getvalue(self) -> bytes:
        return bytes(self._buffer)

    def __len__(self) -> int:
        return len(self._buffer)
