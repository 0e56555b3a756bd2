"""
Expression values: one captured expression span in Stride and Java form.
"""

from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Callable, Optional, Sequence

from lark import Lark

from .diagnostics import ConversionWarning, UnsupportedFeature
from .elements import (
    AssignElement, CallElement, CallSlot, CodeElement, FilledSlot,
    OptionalSlot, SuperThisParamsSlot,
)

TOKENS_GRAMMAR_FILE = Path(__file__).parent / "tokens.lark"

INC_DEC = ("++", "--")
ASSIGNMENT_OPS = ("=", "+=", "-=", "*=", "/=", "%=", "&=", "|=", "^=", "<<=", ">>=", ">>>=")
_OPENERS = ("(", "[", "{")
_CLOSERS = (")", "]", "}")

WarningCallback = Callable[[ConversionWarning], None]


@lru_cache(maxsize=None)
def _token_lexer() -> Lark:
    with open(TOKENS_GRAMMAR_FILE, "r") as f:
        grammar = f.read()
    return Lark(grammar, parser="lalr", lexer="basic")


def tokenize(src: str, replace_instanceof: bool = False) -> tuple[str, ...]:
    """Re-lex Java source into token texts, dropping whitespace and comments."""
    result = []
    for token in _token_lexer().lex(src):
        if replace_instanceof and token.type == "INSTANCEOF":
            result.append("<:")
        else:
            result.append(str(token))
    return tuple(result)


def uniform_spacing(src: str, replace_instanceof: bool) -> str:
    """Return src with exactly one space between consecutive tokens."""
    return " ".join(tokenize(src, replace_instanceof))


@dataclass(frozen=True)
class Expression:
    """
    An immutable expression in both renderings, kept token-aligned.

    inc_dec and assignments record the operators seen while capturing,
    so that the position the expression ends up in can decide whether
    they are supported.
    """
    stride_tokens: tuple[str, ...]
    java_tokens: tuple[str, ...]
    inc_dec: tuple[str, ...] = ()
    assignments: tuple[str, ...] = ()
    add_warning: Optional[WarningCallback] = field(default=None, compare=False, repr=False)

    @classmethod
    def from_source(cls, src: str, inc_dec: Sequence[str] = (), assignments: Sequence[str] = (),
                    add_warning: Optional[WarningCallback] = None) -> "Expression":
        return cls(
            stride_tokens=tokenize(src, True),
            java_tokens=tokenize(src, False),
            inc_dec=tuple(inc_dec),
            assignments=tuple(assignments),
            add_warning=add_warning,
        )

    @classmethod
    def join(cls, expressions: Sequence["Expression"], separator: str = ",",
             add_warning: Optional[WarningCallback] = None) -> "Expression":
        """Join expressions into one delimited list, e.g. delegate arguments."""
        stride: list[str] = []
        java: list[str] = []
        inc_dec: list[str] = []
        assignments: list[str] = []
        for i, e in enumerate(expressions):
            if i > 0:
                stride.append(separator)
                java.append(separator)
            stride.extend(e.stride_tokens)
            java.extend(e.java_tokens)
            inc_dec.extend(e.inc_dec)
            assignments.extend(e.assignments)
        return cls(tuple(stride), tuple(java), tuple(inc_dec), tuple(assignments), add_warning)

    @property
    def stride(self) -> str:
        return " ".join(self.stride_tokens)

    @property
    def java(self) -> str:
        return " ".join(self.java_tokens)

    def __str__(self) -> str:
        return self.java

    # ==================== SLOT CONVERSIONS ====================

    def to_filled(self) -> FilledSlot:
        self._warn(self.inc_dec, self.assignments)
        return FilledSlot(self.stride, self.java)

    def to_optional(self) -> OptionalSlot:
        self._warn(self.inc_dec, self.assignments)
        return OptionalSlot(self.stride, self.java)

    def to_super_this(self) -> SuperThisParamsSlot:
        self._warn(self.inc_dec, self.assignments)
        return SuperThisParamsSlot(self.stride, self.java)

    def to_statement(self) -> CodeElement:
        """
        Convert an expression statement.

        Top-level assignments become AssignElement (compound operators
        are expanded), a leading or trailing ++/-- becomes an add-one
        assignment, anything else becomes a CallElement.
        """
        java = self.java_tokens
        stride = self.stride_tokens

        index = self._top_level_assignment()
        if index is not None:
            op = java[index]
            self._warn(self.inc_dec, _remove_one(self.assignments, op))
            target_java, target_stride = java[:index], stride[:index]
            value_java, value_stride = java[index + 1:], stride[index + 1:]
            if op != "=":
                value_java = _expand_compound(target_java, op, value_java)
                value_stride = _expand_compound(target_stride, op, value_stride)
            return AssignElement(
                FilledSlot(" ".join(target_stride), " ".join(target_java)),
                FilledSlot(" ".join(value_stride), " ".join(value_java)),
            )

        if len(java) > 1 and java[0] in INC_DEC:
            op = java[0]
            self._warn(_remove_one(self.inc_dec, op), self.assignments)
            return _add_one(stride[1:], java[1:], op)

        if len(java) > 1 and java[-1] in INC_DEC:
            op = java[-1]
            self._warn(_remove_one(self.inc_dec, op), self.assignments)
            return _add_one(stride[:-1], java[:-1], op)

        self._warn(self.inc_dec, self.assignments)
        return CallElement(CallSlot(self.stride, self.java))

    def _top_level_assignment(self) -> Optional[int]:
        depth = 0
        for i, token in enumerate(self.java_tokens):
            if token in _OPENERS:
                depth += 1
            elif token in _CLOSERS:
                depth -= 1
            elif depth == 0 and token in ASSIGNMENT_OPS:
                return i if i > 0 else None
        return None

    def _warn(self, inc_dec: Sequence[str], assignments: Sequence[str]):
        if self.add_warning is None:
            return
        if inc_dec:
            self.add_warning(UnsupportedFeature("++/-- in expression"))
        if assignments:
            self.add_warning(UnsupportedFeature("assignment in expression"))


def _remove_one(ops: tuple[str, ...], op: str) -> tuple[str, ...]:
    if op not in ops:
        return ops
    i = ops.index(op)
    return ops[:i] + ops[i + 1:]


def _expand_compound(target: tuple[str, ...], op: str, value: tuple[str, ...]) -> tuple[str, ...]:
    # x op= v  ->  x op v, bracketing v unless it is a single token
    if len(value) > 1:
        value = ("(",) + value + (")",)
    return target + (op[:-1],) + value


def _add_one(stride: tuple[str, ...], java: tuple[str, ...], op: str) -> AssignElement:
    sign = op[0]
    target_stride, target_java = " ".join(stride), " ".join(java)
    return AssignElement(
        FilledSlot(target_stride, target_java),
        FilledSlot(f"{target_stride} {sign} 1", f"{target_java} {sign} 1"),
    )
