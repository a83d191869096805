"""Declarative binding of repaired markup to the statement model.

The repaired buffer is parsed with lxml and each dataclass field is filled
from the element found at its ``metadata["path"]``. Missing elements leave
the field at its zero value; values that cannot be converted to the field's
type raise ``DocumentBindingError``. Enum values outside the enum bind to
its ``OTHER`` member with a warning.
"""

import dataclasses
import re
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar, get_type_hints

import lxml.etree as ET

from ofx_repair.shared.errors import DocumentBindingError
from ofx_repair.shared.logging import get_logger

from .model import Document

T = TypeVar("T")

_TRANSACTION_PATTERN = re.compile(rb"<STMTTRN>")

_LOGGER = get_logger(__name__, component="schema_binder")


def count_transactions(data: bytes) -> int:
    """Count ``<STMTTRN>`` start tags in repaired markup."""
    return len(_TRANSACTION_PATTERN.findall(data))


def _children(element: Any, steps: List[str]) -> List[Any]:
    nodes = [element]
    for step in steps:
        nodes = [child for node in nodes for child in node if child.tag == step]
    return nodes


def _text(element: Any) -> str:
    return (element.text or "").strip()


def _convert_int(text: str) -> int:
    return int(text) if text else 0


def _convert_decimal(text: str) -> Decimal:
    return Decimal(text) if text else Decimal(0)


_SCALAR_CONVERTERS: Dict[Any, Callable[[str], Any]] = {
    str: lambda text: text,
    int: _convert_int,
    Decimal: _convert_decimal,
}


def _unwrap_optional(field_type: Any) -> Any:
    args = getattr(field_type, "__args__", None)
    if getattr(field_type, "__origin__", None) is not None and args and type(None) in args:
        return next(arg for arg in args if arg is not type(None))
    return field_type


def _convert_enum(target: Type[Enum], text: str, path: str, log: Any) -> Optional[Enum]:
    if not text:
        return None
    try:
        return target(text)
    except ValueError:
        fallback = getattr(target, "OTHER", None)
        if fallback is None:
            raise
        log.warning(
            f"Unknown <{path}> value {text!r}, binding as {fallback.value}",
            extra={"path": path, "value": text},
        )
        return fallback


def _convert(field_type: Any, text: str, path: str, log: Any) -> Any:
    target = _unwrap_optional(field_type)
    try:
        if isinstance(target, type) and issubclass(target, Enum):
            return _convert_enum(target, text, path, log)
        return _SCALAR_CONVERTERS[target](text)
    except (ValueError, InvalidOperation) as e:
        raise DocumentBindingError(
            f"cannot convert <{path}> value {text!r} to {getattr(target, '__name__', target)}"
        ) from e


def bind_element(cls: Type[T], element: Any, log: Optional[Any] = None) -> T:
    """Populate a model dataclass from an lxml element.

    Enum fields fall back to their ``OTHER`` member for unknown values.
    """
    log = log or _LOGGER
    hints = get_type_hints(cls)
    values: Dict[str, Any] = {}
    for model_field in dataclasses.fields(cls):
        path = model_field.metadata.get("path")
        if path is None:
            continue
        field_type = hints[model_field.name]
        matches = _children(element, path.split("/"))

        if getattr(field_type, "__origin__", None) in (list, List):
            item_type = field_type.__args__[0]
            values[model_field.name] = [bind_element(item_type, match, log) for match in matches]
        elif dataclasses.is_dataclass(field_type):
            if matches:
                values[model_field.name] = bind_element(field_type, matches[0], log)
        elif matches:
            values[model_field.name] = _convert(field_type, _text(matches[0]), path, log)
    return cls(**values)


def bind(
    data: bytes,
    correlation_id: Optional[str] = None,
    root_tag: str = Document.ROOT_TAG,
) -> Document:
    """Parse repaired markup into a ``Document``.

    Args:
        data: Well-formed markup produced by the repair pass
        correlation_id: Optional correlation ID for log records
        root_tag: Expected document element, ``OFX`` unless the repair
            pass was configured with another root

    Raises:
        DocumentBindingError: If the markup is not well-formed, the root is
            not ``root_tag``, or a field value cannot be converted
    """
    log = get_logger(__name__, correlation_id, "schema_binder")
    parser = ET.XMLParser(resolve_entities=False, no_network=True, huge_tree=True)
    try:
        root = ET.fromstring(data, parser)
    except (ET.XMLSyntaxError, ValueError) as e:
        log.debug("Markup is not well-formed", extra={"error": str(e)})
        raise DocumentBindingError(f"XML syntax error: {e}") from e

    if root.tag != root_tag:
        raise DocumentBindingError(
            f"expected element type <{root_tag}> but have <{root.tag}>"
        )

    document = bind_element(Document, root, log)
    log.debug(
        "Bound document",
        extra={
            "statement_count": len(document.bank_responses),
            "transaction_total": len(document.get_transactions()),
        },
    )
    return document
