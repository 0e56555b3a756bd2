"""
Event-driven Java to Stride converter.

The front end walks the Java source and calls one method per
recognised construct; the converter keeps the handler stacks and
builds the Code Element tree as constructs complete.
"""

import logging
from typing import Callable, Optional

from .builders import (
    ForBuilder, IfBuilder, MethodBuilder, FieldOrVarBuilder, SwitchBuilder,
    TryBuilder,
)
from .diagnostics import ConversionError, ConversionWarning, CommentSink, ParseFailure, WarningManager
from .elements import CodeElement, ImportElement, PackageElement, WhileElement
from .expression import Expression
from .handlers import (
    ArgumentListHandler, BlockRole, CatchBodyRole, DiscardRole,
    ExpressionCapture, FinallyBodyRole, ForBodyRole, IfBranchRole,
    MethodBodyRole, PendingComment, ResultRole, Role, StatementHandler,
    SwitchSectionRole, TryBlockRole, TypeBodyRole, TypeDefHandler, TypeSlots,
    WhileBodyRole,
)
from .modifiers import Modifier
from .declarations import DeclarationEventsMixin
from .statements import StatementEventsMixin
from .expressions import ExpressionEventsMixin

logger = logging.getLogger(__name__)

# Implicitly available in Stride, so never imported explicitly
IMPLICIT_IMPORTS = ("lang.stride.*",)


class JavaStrideConverter(
    DeclarationEventsMixin,
    StatementEventsMixin,
    ExpressionEventsMixin,
):
    """Converts a stream of Java parse events into Stride Code Elements."""

    def __init__(self, source: str, testing: bool = False):
        self.source = source
        self.testing = testing
        self.position = 0
        self.warnings = WarningManager(testing, self._add_warning_comment)

        self.result = StatementHandler(False, ResultRole())
        self.statement_handlers: list[StatementHandler] = [self.result]
        self.expression_captures: list[ExpressionCapture] = []
        self.argument_handlers: list[ArgumentListHandler] = []
        self.type_slots = TypeSlots()
        self.modifiers: list[list[Modifier]] = []
        self.type_defs: list[TypeDefHandler] = []
        self.methods: list[MethodBuilder] = []
        self.fields: list[FieldOrVarBuilder] = []
        self.if_builders: list[IfBuilder] = []
        self.for_builders: list[ForBuilder] = []
        self.switch_builders: list[SwitchBuilder] = []
        self.try_builders: list[TryBuilder] = []

        self.package: Optional[str] = None
        self.imports: list[str] = []

    # ==================== RESULTS ====================

    def get_elements(self) -> list[CodeElement]:
        content, _ = self.result.take_content(self.position, eof=True)
        return content

    def get_warnings(self) -> list[ConversionWarning]:
        return list(self.warnings.warnings)

    # ==================== SCANNING ====================

    def scanned(self, pos: int):
        """Record the position of the token that triggers the next event."""
        self.position = pos

    def got_comment(self, text: str, start: int, end: int):
        self.statement_handlers[-1].got_comment(PendingComment(text, start))
        for capture in self.expression_captures:
            capture.mask(start, end)

    def finished_cu(self, imports_only: bool):
        if imports_only:
            elements: list[CodeElement] = []
            if self.package is not None:
                elements.append(PackageElement(self.package))
            elements.extend(ImportElement(i) for i in self.imports)
            self.result.add_statements(elements, self.position)

    def parse_failed(self, pos: int, message: str):
        raise ParseFailure(pos, message)

    # ==================== WARNINGS ====================

    def add_warning(self, warning: ConversionWarning, comment_add: Optional[CommentSink] = None):
        self.warnings.add(warning, comment_add)

    def _add_warning_comment(self, text: str):
        # Markers go below the outermost discard handler
        target = self.statement_handlers[0]
        for handler in self.statement_handlers:
            if isinstance(handler.role, DiscardRole):
                break
            target = handler
        # Position -1 is always behind the scan, so the comment is collated next
        target.got_comment(PendingComment(text, -1))

    # ==================== HANDLER STACKS ====================

    def _with_expression(self, consumer: Callable[[Expression], None]):
        self.expression_captures.append(ExpressionCapture(consumer, self.add_warning))

    def _with_argument_list(self, consumer: Callable[[list[Expression]], None]):
        self.argument_handlers.append(ArgumentListHandler(consumer))

    def _with_statement(self, single: bool, role: Role) -> StatementHandler:
        handler = StatementHandler(single, role)
        if self.statement_handlers:
            handler.steal_from(self.statement_handlers[-1], self.position)
        self.statement_handlers.append(handler)
        logger.debug("Pushed %r at %d", handler, self.position)
        return handler

    def _pop_statement_handler(self) -> StatementHandler:
        if len(self.statement_handlers) <= 1:
            raise ConversionError(f"Block end at {self.position} with no block open")
        handler = self.statement_handlers.pop()
        logger.debug("Popped %r at %d", handler, self.position)
        return handler

    def _found_statement(self, statement: CodeElement):
        self._found_statements([statement])

    def _found_statements(self, statements: list[CodeElement]):
        handler = self.statement_handlers.pop()
        handler.add_statements(statements, self.position)
        if handler.single:
            self._end_block(handler)
        else:
            self.statement_handlers.append(handler)

    def _content_of(self, handler: StatementHandler, eof: bool = False) -> list[CodeElement]:
        """Content of a handler already removed from the stack; its later comments go to the new top."""
        content, leftovers = handler.take_content(self.position, eof)
        for comment in leftovers:
            self.statement_handlers[-1].got_comment(comment)
        return content

    def _end_block(self, handler: StatementHandler):
        """Finish a handler that has been removed from the stack."""
        role = handler.role
        if isinstance(role, BlockRole):
            self._found_statements(self._content_of(handler))
        elif isinstance(role, WhileBodyRole):
            condition = role.condition.to_filled()
            self._found_statement(WhileElement(condition, tuple(self._content_of(handler))))
        elif isinstance(role, IfBranchRole):
            role.builder.add_block(self._content_of(handler))
        elif isinstance(role, ForBodyRole):
            self.for_builders.pop()
            self._found_statements(role.builder.end(self._content_of(handler)))
        elif isinstance(role, SwitchSectionRole):
            role.builder.store_prev_code(self._content_of(handler))
            self._found_statement(self.switch_builders.pop().end())
        elif isinstance(role, TryBlockRole):
            role.builder.try_content.extend(self._content_of(handler))
        elif isinstance(role, CatchBodyRole):
            role.builder.catch_blocks.append(self._content_of(handler))
        elif isinstance(role, FinallyBodyRole):
            role.builder.finally_contents = self._content_of(handler)
        elif isinstance(role, DiscardRole):
            dropped = self._content_of(handler)
            logger.debug("Dropped %d element(s) of %s", len(dropped), role.reason)
        elif isinstance(role, (ResultRole, MethodBodyRole, TypeBodyRole)):
            # Collected by their own end events
            pass
        else:
            raise ConversionError(f"Unknown statement handler role: {type(role).__name__}")

    # ==================== HELPERS ====================

    def _get_text(self, start: int, end: int, masks: list[tuple[int, int]]) -> str:
        """Source text of [start, end) with the masked sub-spans cut out."""
        if not masks:
            return self.source[start:end]
        prev = start
        parts = []
        for mask_start, mask_end in sorted(masks):
            if mask_start >= prev and mask_end <= end:
                parts.append(self.source[prev:mask_start])
                prev = mask_end
        parts.append(self.source[prev:end])
        return " ".join(parts)

    def _current_modifiers(self) -> list[Modifier]:
        return self.modifiers[-1] if self.modifiers else []

    def _get_javadoc(self) -> Optional[str]:
        return self.statement_handlers[-1].get_javadoc(self.position)

    def _imports_for_cu(self) -> list[ImportElement]:
        return [ImportElement(i) for i in self.imports if i not in IMPLICIT_IMPORTS]
