"""
Immutable Code Element tree produced by the converter.
All nodes are frozen dataclasses; sequences are tuples.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional
from abc import ABC
import json


class AccessPermission(Enum):
    PRIVATE = "private"
    PROTECTED = "protected"
    PUBLIC = "public"


class SuperThis(Enum):
    """Target of a constructor delegate call."""
    SUPER = "super"
    THIS = "this"

    @classmethod
    def from_string(cls, keyword: Optional[str]) -> Optional["SuperThis"]:
        if keyword == "super":
            return cls.SUPER
        if keyword == "this":
            return cls.THIS
        return None


class Node(ABC):
    """Base class for elements and the slots they hold."""

    def to_dict(self) -> dict:
        """Convert node to dictionary for JSON serialization."""
        result = {"_type": self.__class__.__name__}
        for key, value in self.__dict__.items():
            if key.startswith("_"):
                continue
            result[key] = _serialize_value(value)
        return result

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)


def _serialize_value(value):
    """Helper to serialize a value for JSON."""
    if value is None:
        return None
    if isinstance(value, Node):
        return value.to_dict()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [_serialize_value(v) for v in value]
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float, str)):
        return value
    return str(value)


# ==================== SLOTS ====================

@dataclass(frozen=True)
class ExpressionSlot(Node):
    """An expression in both renderings."""
    stride: str
    java: str


@dataclass(frozen=True)
class FilledSlot(ExpressionSlot):
    """An expression that must be present."""


@dataclass(frozen=True)
class OptionalSlot(ExpressionSlot):
    """An expression that may be left blank (e.g. return value)."""


@dataclass(frozen=True)
class CallSlot(ExpressionSlot):
    """An expression used as a statement."""


@dataclass(frozen=True)
class SuperThisParamsSlot(ExpressionSlot):
    """Arguments of a super(...) / this(...) delegate."""


@dataclass(frozen=True)
class TypeSlot(Node):
    text: str


@dataclass(frozen=True)
class Param(Node):
    type: TypeSlot
    name: str


def filled(java: str, stride: Optional[str] = None) -> FilledSlot:
    return FilledSlot(stride if stride is not None else java, java)


def type_slot(text: Optional[str]) -> Optional[TypeSlot]:
    return None if text is None else TypeSlot(text)


# ==================== ELEMENTS ====================

class CodeElement(Node):
    """Base class for every node of the output tree."""


@dataclass(frozen=True)
class ImportElement(CodeElement):
    name: str


@dataclass(frozen=True)
class PackageElement(CodeElement):
    name: str


@dataclass(frozen=True)
class CommentElement(CodeElement):
    text: str


@dataclass(frozen=True)
class VarElement(CodeElement):
    """Field or local variable declaration."""
    access: Optional[AccessPermission]
    static: bool
    final: bool
    type: TypeSlot
    name: str
    value: Optional[FilledSlot] = None


@dataclass(frozen=True)
class ConstructorElement(CodeElement):
    access: AccessPermission
    params: tuple[Param, ...]
    throws: tuple[TypeSlot, ...]
    delegate: Optional[SuperThis]
    delegate_args: Optional[SuperThisParamsSlot]
    body: tuple[CodeElement, ...]
    doc: Optional[str] = None


@dataclass(frozen=True)
class NormalMethodElement(CodeElement):
    access: AccessPermission
    static: bool
    final: bool
    return_type: TypeSlot
    name: str
    params: tuple[Param, ...]
    throws: tuple[TypeSlot, ...]
    body: tuple[CodeElement, ...]
    doc: Optional[str] = None


@dataclass(frozen=True)
class MethodProtoElement(CodeElement):
    """Method without a body (abstract or interface method)."""
    return_type: TypeSlot
    name: str
    params: tuple[Param, ...]
    throws: tuple[TypeSlot, ...]
    doc: Optional[str] = None


@dataclass(frozen=True)
class ClassElement(CodeElement):
    abstract: bool
    name: str
    extends: Optional[TypeSlot]
    implements: tuple[TypeSlot, ...]
    fields: tuple[CodeElement, ...]
    constructors: tuple[CodeElement, ...]
    methods: tuple[CodeElement, ...]
    doc: Optional[str] = None
    package: Optional[str] = None
    imports: tuple[ImportElement, ...] = ()


@dataclass(frozen=True)
class InterfaceElement(CodeElement):
    name: str
    extends: tuple[TypeSlot, ...]
    fields: tuple[CodeElement, ...]
    methods: tuple[CodeElement, ...]
    doc: Optional[str] = None
    package: Optional[str] = None
    imports: tuple[ImportElement, ...] = ()


@dataclass(frozen=True)
class IfElement(CodeElement):
    condition: FilledSlot
    then_body: tuple[CodeElement, ...]
    else_if_conditions: tuple[FilledSlot, ...] = ()
    else_if_bodies: tuple[tuple[CodeElement, ...], ...] = ()
    else_body: Optional[tuple[CodeElement, ...]] = None


@dataclass(frozen=True)
class WhileElement(CodeElement):
    condition: FilledSlot
    body: tuple[CodeElement, ...]


@dataclass(frozen=True)
class ForeachElement(CodeElement):
    type: TypeSlot
    var: str
    iterable: FilledSlot
    body: tuple[CodeElement, ...]


@dataclass(frozen=True)
class BreakElement(CodeElement):
    pass


@dataclass(frozen=True)
class ReturnElement(CodeElement):
    value: Optional[OptionalSlot] = None


@dataclass(frozen=True)
class ThrowElement(CodeElement):
    value: FilledSlot


@dataclass(frozen=True)
class TryElement(CodeElement):
    """Try statement; catch_types, catch_names and catch_bodies are parallel."""
    body: tuple[CodeElement, ...]
    catch_types: tuple[TypeSlot, ...]
    catch_names: tuple[str, ...]
    catch_bodies: tuple[tuple[CodeElement, ...], ...]
    finally_body: Optional[tuple[CodeElement, ...]] = None


@dataclass(frozen=True)
class CaseElement(CodeElement):
    expression: FilledSlot
    body: tuple[CodeElement, ...]


@dataclass(frozen=True)
class SwitchElement(CodeElement):
    expression: FilledSlot
    cases: tuple[CaseElement, ...]
    default_body: Optional[tuple[CodeElement, ...]] = None


@dataclass(frozen=True)
class CallElement(CodeElement):
    call: CallSlot


@dataclass(frozen=True)
class AssignElement(CodeElement):
    target: FilledSlot
    value: FilledSlot
