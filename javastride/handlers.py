"""
Handler stack frames used by the converter.

Each frame is created by a "begin" event and removed by the matching
"end" event; the converter owns the stacks and decides when to push
and pop. Frames only hold state and answer questions about it.
"""

import logging
from dataclasses import dataclass
from typing import Callable, NamedTuple, Optional, Union, TYPE_CHECKING

from .diagnostics import ConversionError, process_comment
from .elements import CodeElement, CommentElement
from .expression import ASSIGNMENT_OPS, INC_DEC, Expression, WarningCallback

if TYPE_CHECKING:
    from .builders import (
        ForBuilder, IfBuilder, SwitchBuilder, TryBuilder, TypeDelegate,
    )

logger = logging.getLogger(__name__)

ExpressionConsumer = Callable[[Expression], None]
TextSource = Callable[[int, int, list[tuple[int, int]]], str]


# ==================== EXPRESSIONS ====================

class ExpressionCapture:
    """
    Captures the next complete expression for a consumer.

    Nested begin/end pairs are only counted: the span is finalised when
    the count returns to zero, from the first begin to the final end.
    """

    def __init__(self, consumer: ExpressionConsumer, add_warning: Optional[WarningCallback] = None):
        self.consumer = consumer
        self.add_warning = add_warning
        self.outstanding = 0
        self.start: Optional[int] = None
        self.end: Optional[int] = None
        self.masks: list[tuple[int, int]] = []
        self._open_masks: list[int] = []
        self.inc_dec: list[str] = []
        self.assignments: list[str] = []

    def expression_begun(self, position: int):
        self.outstanding += 1
        if self.start is None:
            self.start = position

    def expression_end(self, position: int) -> bool:
        """Record an end event; True once the outermost expression is complete."""
        if self.outstanding <= 0:
            raise ConversionError(f"Expression end at {position} with no expression in progress")
        self.outstanding -= 1
        if self.outstanding == 0:
            self.end = position
            return True
        return False

    def begin_mask(self, position: int):
        self._open_masks.append(position)

    def end_mask(self, end: int):
        if not self._open_masks:
            raise ConversionError(f"Mask end at {end} without a matching begin")
        self.masks.append((self._open_masks.pop(), end))

    def mask(self, start: int, end: int):
        self.masks.append((start, end))

    def operator(self, op: str):
        if op in INC_DEC:
            self.inc_dec.append(op)
        elif op in ASSIGNMENT_OPS:
            self.assignments.append(op)

    def finish(self, get_text: TextSource) -> Expression:
        text = get_text(self.start, self.end, self.masks)
        expression = Expression.from_source(text, self.inc_dec, self.assignments, self.add_warning)
        self.consumer(expression)
        return expression


class ArgumentListHandler:
    """
    Collects the arguments of one argument list. Only the outermost list
    is collected; nested lists inside argument expressions are counted.
    """

    def __init__(self, consumer: Callable[[list[Expression]], None]):
        self.consumer = consumer
        self.args: list[Expression] = []
        self.outstanding = 0


# ==================== TYPES ====================

@dataclass
class ExpectedType:
    """A registered consumer for the next type reference."""
    consumer: Callable[[str], None]


@dataclass
class ParkedType:
    """A type reference waiting for a later event to claim it."""
    text: str


TypeSlot = Union[ExpectedType, ParkedType]


class TypeSlots:
    """Expect-or-park: deliver types to a waiting consumer, or hold them."""

    def __init__(self):
        self.entries: list[TypeSlot] = []

    def expect(self, consumer: Callable[[str], None]):
        self.entries.append(ExpectedType(consumer))

    def end_expect(self):
        if not self.entries or not isinstance(self.entries[-1], ExpectedType):
            raise ConversionError("End of type expectation with none registered")
        self.entries.pop()

    def deliver(self, text: str):
        if self.entries and isinstance(self.entries[-1], ExpectedType):
            self.entries[-1].consumer(text)
        else:
            self.entries.append(ParkedType(text))

    def claim(self) -> str:
        if not self.entries or not isinstance(self.entries[-1], ParkedType):
            raise ConversionError("No type available to claim")
        return self.entries.pop().text

    def add_array_dimension(self):
        if self.entries and isinstance(self.entries[-1], ParkedType):
            self.entries[-1].text += "[]"


# ==================== STATEMENTS ====================

class PendingComment(NamedTuple):
    text: str
    position: int


@dataclass(frozen=True, eq=False)
class ResultRole:
    """Collects the overall result."""


@dataclass(frozen=True, eq=False)
class BlockRole:
    """A nested { } block; its content is passed on to the parent."""


@dataclass(frozen=True, eq=False)
class WhileBodyRole:
    condition: Expression


@dataclass(frozen=True, eq=False)
class IfBranchRole:
    builder: "IfBuilder"


@dataclass(frozen=True, eq=False)
class ForBodyRole:
    builder: "ForBuilder"


@dataclass(frozen=True, eq=False)
class SwitchSectionRole:
    builder: "SwitchBuilder"


@dataclass(frozen=True, eq=False)
class TryBlockRole:
    builder: "TryBuilder"


@dataclass(frozen=True, eq=False)
class CatchBodyRole:
    builder: "TryBuilder"


@dataclass(frozen=True, eq=False)
class FinallyBodyRole:
    builder: "TryBuilder"


@dataclass(frozen=True, eq=False)
class MethodBodyRole:
    """Method or constructor body; collected by end_method_decl."""


@dataclass(frozen=True, eq=False)
class TypeBodyRole:
    """Type body; collected by end_type_body."""


@dataclass(frozen=True, eq=False)
class DiscardRole:
    """Soaks up content of unsupported constructs."""
    reason: str = ""


Role = Union[
    ResultRole, BlockRole, WhileBodyRole, IfBranchRole, ForBodyRole,
    SwitchSectionRole, TryBlockRole, CatchBodyRole, FinallyBodyRole,
    MethodBodyRole, TypeBodyRole, DiscardRole,
]


class StatementHandler:
    """
    Accumulates the statements of one block.

    A single handler expects exactly one statement (e.g. a loop body,
    which may itself be a block collected by a nested handler); a
    sequence handler stays on the stack until its block is closed.
    """

    def __init__(self, single: bool, role: Role):
        self.single = single
        self.role = role
        self.content: list[CodeElement] = []
        self.comments: list[PendingComment] = []

    def __repr__(self) -> str:
        kind = "single" if self.single else "sequence"
        return f"StatementHandler({kind}, {type(self.role).__name__})"

    def steal_from(self, parent: "StatementHandler", position: int):
        """Take the parent's comments that are at or after position."""
        self.comments.extend(c for c in parent.comments if c.position >= position)
        parent.comments = [c for c in parent.comments if c.position < position]

    def got_comment(self, comment: PendingComment):
        self.comments.append(comment)

    def collate_comments(self, position: int, eof: bool = False) -> Optional[CommentElement]:
        """Join the comments behind position (all of them at eof) into one element."""
        behind = [c for c in self.comments if eof or c.position < position]
        if not behind:
            return None
        self.comments = [c for c in self.comments if not (eof or c.position < position)]
        return CommentElement(" ".join(process_comment(c.text) for c in behind))

    def add_statements(self, statements: list[CodeElement], position: int):
        comment = self.collate_comments(position)
        if comment is not None:
            self.content.append(comment)
        self.content.extend(statements)

    def take_content(self, position: int, eof: bool = False) -> tuple[list[CodeElement], list[PendingComment]]:
        """Return the collected content and the comments still ahead of position."""
        comment = self.collate_comments(position, eof)
        if comment is not None:
            self.content.append(comment)
        leftovers = self.comments
        self.comments = []
        return list(self.content), leftovers

    def get_javadoc(self, position: int) -> Optional[str]:
        """The last comment before position, if it is a Javadoc comment."""
        behind = [i for i, c in enumerate(self.comments) if c.position < position]
        if behind and self.comments[behind[-1]].text.startswith("/**"):
            return process_comment(self.comments.pop(behind[-1]).text)
        return None

    def steal_comments(self, position: int) -> list[CodeElement]:
        comment = self.collate_comments(position)
        return [] if comment is None else [comment]


# ==================== TYPE DEFINITIONS ====================

class TypeDefHandler:
    """
    Tracks one outermost type declaration. Nested declarations only
    raise the depth so that their end events still balance; their
    content is discarded.
    """

    def __init__(self, consumer: Optional[Callable[[CodeElement], None]]):
        self.consumer = consumer
        self.depth = 1
        self.delegate: Optional["TypeDelegate"] = None

    @property
    def converting(self) -> bool:
        """True while events belong to the type actually being converted."""
        return self.depth == 1 and self.consumer is not None

    def enter_nested(self):
        self.depth += 1
        logger.debug("Nested type declaration, depth %d", self.depth)

    def leave(self) -> bool:
        """Record a type end; True when the outermost declaration is done."""
        self.depth -= 1
        return self.depth == 0
