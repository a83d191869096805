"""Streaming tag-recovery engine.

The engine consumes raw markup tokens in a single left-to-right pass and
writes a fully balanced document. Containers are tracked on an open-tag
stack and closed by unwinding it; leaves are never trusted to carry their
own close tag, so a leaf start is held as the single pending element until
the next tag event supplies its text and confirms its closure.

Transition rules (``T`` is the pending text, ``E`` the pending element):

- text: trim, escape and store as ``T``, replacing any previous value
- open: flush ``<E>T</E>`` if ``T`` is set (error if ``E`` is not), then
  push a container or make a leaf the new ``E``
- close: resolve ``T`` against ``E`` and the close name, then unwind the
  stack if the close names a container
"""

import time
from typing import Any, Dict, Iterable, Optional, Tuple

from ofx_repair.shared.config import RecoveryConfig, TrailingTextPolicy
from ofx_repair.shared.errors import (
    AmbiguousClosingTagsError,
    OrphanedTextError,
    RepairError,
    UnmatchedClosingTagError,
)
from ofx_repair.shared.logging import get_logger
from ofx_repair.shared.result import DiagnosticSeverity, RepairResult
from ofx_repair.character.escape import escape
from ofx_repair.tokenization.tokenizer import Token, TokenPosition, TokenType

from .classifier import TagClassifier, local_name
from .stack import OpenElement, OpenTagStack
from .writer import MarkupWriter

COMPONENT = "recovery_engine"


class RecoveryEngine:
    """Single-pass recovery state machine.

    One engine instance runs one pass at a time; its stack, pending slots and
    output buffer are reset at the start of ``recover``. Use separate
    instances for concurrent passes.
    """

    def __init__(
        self,
        config: Optional[RecoveryConfig] = None,
        classifier: Optional[TagClassifier] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        """Initialize the recovery engine.

        Args:
            config: Recovery configuration (defaults to ``RecoveryConfig()``)
            classifier: Tag classifier; built from ``config`` when omitted
            correlation_id: Optional correlation ID for request tracking
        """
        self.config = config or RecoveryConfig()
        self.classifier = classifier or TagClassifier(
            self.config.extra_container_tags, self.config.root_tag
        )
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, COMPONENT)
        self._reset_state(RepairResult(data=b"", correlation_id=correlation_id))

    def _reset_state(self, result: RepairResult) -> None:
        """Reset internal state for a new pass."""
        self.stack = OpenTagStack()
        self.writer = MarkupWriter()
        self.result = result
        # Single-slot buffers: at most one unresolved text run and leaf start
        self.pending_text: Optional[str] = None
        self.pending_text_position: Optional[TokenPosition] = None
        self.pending_element: Optional[OpenElement] = None

    def recover(
        self, tokens: Iterable[Token], result: Optional[RepairResult] = None
    ) -> RepairResult:
        """Run one recovery pass over a token stream.

        Args:
            tokens: Raw markup tokens, starting at the document root
            result: Result to populate; a new one is created when omitted

        Returns:
            The result with ``data`` set to the balanced markup

        Raises:
            RepairError: On orphaned text, ambiguous closing tags, or any
                error raised by the token source
        """
        start_time = time.time()
        if result is None:
            result = RepairResult(data=b"", correlation_id=self.correlation_id)
        self._reset_state(result)
        metrics = result.metrics

        try:
            for token in tokens:
                metrics.tokens_processed += 1
                self._process_token(token)
            self._finish()
        except RepairError as e:
            self.logger.error(
                f"Recovery pass failed: {e}",
                extra={
                    "error_type": type(e).__name__,
                    "open_tags": self.stack.snapshot(),
                    "tokens_processed": metrics.tokens_processed,
                },
            )
            raise

        result.data = self.writer.getvalue()
        metrics.output_bytes = len(result.data)
        metrics.processing_time_ms += (time.time() - start_time) * 1000

        self.logger.debug(
            "Recovery pass completed",
            extra={
                "output_bytes": metrics.output_bytes,
                "repair_count": metrics.repair_count,
            },
        )
        return result

    def _process_token(self, token: Token) -> None:
        if token.type == TokenType.TEXT:
            self._handle_text(token)
        elif token.type == TokenType.START:
            self._handle_start(token)
        elif token.type == TokenType.END:
            self._handle_end(token)
        else:
            # Comments, processing instructions and directives carry no content
            self._trace("Ignoring token", token)

    def _trace(self, message: str, token: Token) -> None:
        if self.logger.is_debug_enabled():
            self.logger.debug(
                message,
                extra={
                    "token_type": token.type.name,
                    "token_value": token.value,
                    "line": token.position.line,
                    "open_tags": self.stack.snapshot(),
                    "pending_element": (
                        self.pending_element.name if self.pending_element else None
                    ),
                    "pending_text": self.pending_text,
                },
            )

    def _diagnose(
        self,
        severity: DiagnosticSeverity,
        message: str,
        position: Optional[TokenPosition] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.result.add_diagnostic(
            severity,
            message,
            COMPONENT,
            position=position.to_dict() if position else None,
            details=details,
        )
        if severity == DiagnosticSeverity.WARNING:
            self.logger.warning(message, extra=details)
        else:
            self.logger.debug(message, extra=details)

    # Token transitions

    def _handle_text(self, token: Token) -> None:
        trimmed = token.value.strip()
        if trimmed:
            self.pending_text = escape(trimmed)
            self.pending_text_position = token.position
        else:
            self.pending_text = None
            self.pending_text_position = None
        self._trace("Text", token)

    def _handle_start(self, token: Token) -> None:
        self._trace("Start tag", token)
        if self.pending_text is not None:
            pending = self.pending_element
            if pending is None:
                raise OrphanedTextError(self.pending_text, self.pending_text_position)
            # The pending leaf ends where the next tag begins
            self._emit_pending_leaf(pending, self.pending_text)
            self.result.metrics.leaf_closes_inferred += 1

        element = OpenElement(token.name, tuple(token.attributes))
        if self.classifier.is_container(token.name):
            self.stack.push(element)
            self.writer.write_start(element.name, element.attributes)
            metrics = self.result.metrics
            metrics.containers_opened += 1
            metrics.max_depth = max(metrics.max_depth, len(self.stack))
            return

        if self.pending_element is not None:
            self._diagnose(
                DiagnosticSeverity.INFO,
                f"Leaf <{self.pending_element.name}> has no text and was dropped",
                token.position,
                {"tag": self.pending_element.name},
            )
        self.pending_element = element

    def _handle_end(self, token: Token) -> None:
        self._trace("End tag", token)
        name = token.name
        container = self.classifier.is_container(name)
        pending = self.pending_element

        if self.pending_text is not None:
            text = self.pending_text
            if (
                pending is not None
                and pending.local_name != local_name(name)
                and not container
            ):
                raise AmbiguousClosingTagsError(
                    text, pending.name, name, self.pending_text_position
                )
            if pending is None and container:
                raise OrphanedTextError(text, self.pending_text_position)

            if pending is not None:
                self._emit_pending_leaf(pending, text)
                if container:
                    self.result.metrics.leaf_closes_inferred += 1
            else:
                # The leaf's start tag was dropped; its close names it
                self.writer.write_element(name, text)
                self.result.metrics.leaf_starts_recovered += 1
                self._clear_pending()
        elif not container:
            if pending is not None and pending.local_name == local_name(name):
                self.writer.write_element(pending.name, "", pending.attributes)
                self._clear_pending()
            else:
                self._handle_unmatched_leaf_close(token)
            return

        if container:
            self._unwind(token)

    def _handle_unmatched_leaf_close(self, token: Token) -> None:
        pending_name = self.pending_element.name if self.pending_element else None
        if self.config.strict_unmatched_close:
            raise UnmatchedClosingTagError(token.name, pending_name, token.position)
        self.result.metrics.ignored_closes += 1
        self._diagnose(
            DiagnosticSeverity.WARNING,
            f"Ignored closing tag </{token.name}> with no matching start tag",
            token.position,
            {"tag": token.name, "pending_element": pending_name},
        )

    def _unwind(self, token: Token) -> None:
        """Close open containers up to and including the one named by ``token``."""
        metrics = self.result.metrics
        if self.stack.is_empty():
            metrics.ignored_closes += 1
            self._diagnose(
                DiagnosticSeverity.WARNING,
                f"Ignored closing tag </{token.name}>: no container is open",
                token.position,
                {"tag": token.name},
            )
            return

        target = local_name(token.name)
        auto_closed = []
        for element in self.stack.pop_until(token.name):
            self.writer.write_end(element.name)
            if element.local_name == target:
                metrics.containers_closed += 1
            else:
                metrics.containers_auto_closed += 1
                auto_closed.append(element.name)

        if auto_closed:
            self._diagnose(
                DiagnosticSeverity.INFO,
                f"Closing tag </{token.name}> auto-closed {', '.join(auto_closed)}",
                token.position,
                {"tag": token.name, "auto_closed": auto_closed},
            )

    def _finish(self) -> None:
        """Apply the end-of-input policies."""
        if self.pending_text is not None:
            self._finish_trailing_text(self.pending_text)

        if self.stack.is_empty():
            return

        unclosed = self.stack.snapshot()
        self.result.unclosed_tags = unclosed
        if self.config.close_unclosed_at_end:
            for element in self._drain():
                self.writer.write_end(element.name)
                self.result.metrics.containers_auto_closed += 1
            self._diagnose(
                DiagnosticSeverity.WARNING,
                f"Closed {len(unclosed)} container(s) left open at end of input",
                details={"unclosed_tags": unclosed},
            )
        else:
            self._diagnose(
                DiagnosticSeverity.WARNING,
                f"Input ended with {len(unclosed)} unclosed container(s)",
                details={"unclosed_tags": unclosed},
            )

    def _finish_trailing_text(self, text: str) -> None:
        policy = self.config.trailing_text
        position = self.pending_text_position

        if policy == TrailingTextPolicy.ERROR:
            raise OrphanedTextError(text, position)

        if policy == TrailingTextPolicy.FLUSH and self.pending_element is not None:
            self._emit_pending_leaf(self.pending_element, text)
            self.result.metrics.leaf_closes_inferred += 1
            return

        if policy == TrailingTextPolicy.DROP:
            self._diagnose(
                DiagnosticSeverity.INFO,
                "Dropped text pending at end of input",
                position,
                {"text": text},
            )
        else:
            self._diagnose(
                DiagnosticSeverity.WARNING,
                "Dropped text pending at end of input: no element to attach it to",
                position,
                {"text": text},
            )
        self._clear_pending()

    def _drain(self) -> Tuple[OpenElement, ...]:
        elements = []
        while not self.stack.is_empty():
            elements.append(self.stack.pop())
        return tuple(elements)

    def _emit_pending_leaf(self, element: OpenElement, text: str) -> None:
        self.writer.write_element(element.name, text, element.attributes)
        self._clear_pending()

    def _clear_pending(self) -> None:
        self.pending_text = None
        self.pending_text_position = None
        self.pending_element = None
