"""
Builders for declarations and compound statements.

A builder accumulates the parts of a construct as their events arrive
and produces the finished Code Element(s) when the construct ends.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional, Sequence

from .diagnostics import UnsupportedFeature, UnsupportedModifier, process_comment
from .elements import (
    AccessPermission, CaseElement, ClassElement, CodeElement, CommentElement,
    ConstructorElement, FilledSlot, ForeachElement, IfElement, ImportElement,
    InterfaceElement, MethodProtoElement, NormalMethodElement, Param,
    SuperThis, SwitchElement, TryElement, TypeSlot, VarElement, WhileElement,
    filled, type_slot,
)
from .expression import Expression
from .modifiers import Modifier, remove_access, remove_annotations, remove_keywords

logger = logging.getLogger(__name__)

AddWarning = Callable[..., None]


class TypeDefKind(Enum):
    CLASS = "class"
    INTERFACE = "interface"
    ENUM = "enum"
    ANNOTATION = "annotation"


def warn_unsupported_modifiers(add_warning: AddWarning, context: str, modifiers: Sequence[Modifier]):
    for modifier in modifiers:
        add_warning(UnsupportedModifier(context, str(modifier)))


# ==================== DECLARATIONS ====================

@dataclass
class MethodBuilder:
    """Method or constructor declaration in progress (name is None for constructors)."""
    return_type: Optional[str]
    name: Optional[str]
    modifiers: list[Modifier]
    doc: Optional[str]
    parameters: list[Param] = field(default_factory=list)
    throws_types: list[str] = field(default_factory=list)
    has_body: bool = False
    constructor_call: Optional[str] = None
    constructor_args: Optional[list[Expression]] = None

    @property
    def is_constructor(self) -> bool:
        return self.name is None

    def end(self, body: Optional[list[CodeElement]], add_warning: AddWarning) -> CodeElement:
        modifiers = list(self.modifiers)
        permission = remove_access(modifiers, AccessPermission.PROTECTED)
        throws = tuple(TypeSlot(t) for t in self.throws_types)
        params = tuple(self.parameters)

        if self.is_constructor:
            warn_unsupported_modifiers(add_warning, "method", modifiers)
            delegate = SuperThis.from_string(self.constructor_call)
            delegate_args = None
            if delegate is not None:
                delegate_args = Expression.join(self.constructor_args or [], ",", add_warning).to_super_this()
            return ConstructorElement(
                access=permission,
                params=params,
                throws=throws,
                delegate=delegate,
                delegate_args=delegate_args,
                body=tuple(body or ()),
                doc=self.doc,
            )

        final = remove_keywords(modifiers, "final")
        static = remove_keywords(modifiers, "static")
        # Abstractness follows from the missing body
        remove_keywords(modifiers, "abstract")
        remove_annotations(modifiers, "@Override")
        warn_unsupported_modifiers(add_warning, "method", modifiers)

        if self.has_body:
            return NormalMethodElement(
                access=permission,
                static=static,
                final=final,
                return_type=type_slot(self.return_type),
                name=self.name,
                params=params,
                throws=throws,
                body=tuple(body or ()),
                doc=self.doc,
            )
        return MethodProtoElement(
            return_type=type_slot(self.return_type),
            name=self.name,
            params=params,
            throws=throws,
            doc=self.doc,
        )


@dataclass
class FieldOrVarBuilder:
    """Shared type and modifiers of one field or local variable declaration."""
    type: str
    modifiers: list[Modifier]

    def declarator(self, name: str, default_access: Optional[AccessPermission],
                   add_warning: AddWarning) -> Callable[[Optional[Expression]], VarElement]:
        """
        Process the modifiers for one declarator and return a function
        that builds its VarElement once the initializer (if any) is known.
        """
        modifiers = list(self.modifiers)
        permission = remove_access(modifiers, default_access)
        final = remove_keywords(modifiers, "final")
        static = remove_keywords(modifiers, "static")
        warn_unsupported_modifiers(add_warning, "variable", modifiers)

        def build(init: Optional[Expression]) -> VarElement:
            return VarElement(
                access=permission,
                static=static,
                final=final,
                type=TypeSlot(self.type),
                name=name,
                value=None if init is None else init.to_filled(),
            )

        return build


# ==================== CONTROL CONSTRUCTS ====================

class IfBuilder:
    """
    if / else-if / else chain. There is one condition per branch and
    an extra trailing block when an else is present.
    """

    def __init__(self, condition: Expression):
        self.conditions: list[FilledSlot] = [condition.to_filled()]
        self.blocks: list[tuple[CodeElement, ...]] = []

    def add_condition(self, condition: Expression):
        self.conditions.append(condition.to_filled())

    def add_block(self, content: list[CodeElement]):
        self.blocks.append(tuple(content))

    def end(self) -> IfElement:
        n = len(self.conditions)
        return IfElement(
            condition=self.conditions[0],
            then_body=self.blocks[0],
            else_if_conditions=tuple(self.conditions[1:]),
            else_if_bodies=tuple(self.blocks[1:n]),
            else_body=self.blocks[-1] if len(self.blocks) > n else None,
        )


class ForBuilder:
    """Classic for or for-each loop in progress."""

    def __init__(self):
        self.type: Optional[str] = None
        self.vars: list[str] = []
        self.inits: list[Optional[Expression]] = []
        self.init_statements: list[Expression] = []
        self.is_each = False
        self.each_var: Optional[Expression] = None
        self.condition: Optional[Expression] = None
        self.posts: list[Expression] = []

    def got_type(self, type: str, modifiers: list[Modifier], add_warning: AddWarning):
        self.type = type
        # Loop variables are always final in Stride
        modifiers = [m for m in modifiers if not m.is_keyword("final")]
        warn_unsupported_modifiers(add_warning, "for-loop", modifiers)

    def got_name(self, name: str):
        self.vars.append(name)
        self.inits.append(None)

    def got_var_init(self, e: Expression):
        self.inits[-1] = e

    def got_init_statement(self, e: Expression):
        self.init_statements.append(e)

    def got_each(self, e: Expression):
        self.is_each = True
        self.each_var = e

    def got_condition(self, e: Expression):
        self.condition = e

    def got_post(self, e: Expression):
        self.posts.append(e)

    def end(self, content: list[CodeElement]) -> list[CodeElement]:
        """Finish the loop; a classic for becomes declarations followed by a while."""
        if self.is_each:
            return [ForeachElement(TypeSlot(self.type), self.vars[0], self.each_var.to_filled(), tuple(content))]

        result: list[CodeElement] = [e.to_statement() for e in self.init_statements]
        for name, init in zip(self.vars, self.inits):
            result.append(VarElement(
                access=None,
                static=False,
                final=False,
                type=type_slot(self.type),
                name=name,
                value=None if init is None else init.to_filled(),
            ))
        body = list(content) + [post.to_statement() for post in self.posts]
        condition = self.condition.to_filled() if self.condition is not None else filled("true")
        result.append(WhileElement(condition, tuple(body)))
        return result


class SwitchBuilder:
    """
    Switch statement in progress. Each label opens a new section; the
    previous section's content is stored when the next label arrives.
    """

    def __init__(self):
        self.expression: Optional[Expression] = None
        self.cases: list[Expression] = []
        self.case_contents: list[tuple[CodeElement, ...]] = []
        self.default_contents: list[CodeElement] = []
        self.has_default = False
        self.in_default = False

    def got_expression(self, e: Expression):
        self.expression = e

    def store_prev_code(self, content: list[CodeElement]):
        if not self.cases and not self.in_default:
            logger.debug("Dropping %d element(s) before the first switch label", len(content))
        elif self.in_default:
            self.default_contents.extend(content)
        else:
            self.case_contents.append(tuple(content))

    def got_case(self, e: Expression):
        self.in_default = False
        self.cases.append(e)

    def got_default(self):
        self.in_default = True
        self.has_default = True

    def end(self) -> SwitchElement:
        cases = tuple(CaseElement(c.to_filled(), body) for c, body in zip(self.cases, self.case_contents))
        return SwitchElement(
            expression=self.expression.to_filled(),
            cases=cases,
            default_body=tuple(self.default_contents) if self.has_default else None,
        )


class TryBuilder:
    def __init__(self):
        self.try_content: list[CodeElement] = []
        self.catch_types: list[list[str]] = []
        self.catch_names: list[str] = []
        self.catch_blocks: list[list[CodeElement]] = []
        self.finally_contents: Optional[list[CodeElement]] = None

    def end(self) -> TryElement:
        types: list[TypeSlot] = []
        names: list[str] = []
        blocks: list[tuple[CodeElement, ...]] = []
        # A multi-catch becomes one arm per type, each with its own copy of the body
        for catch_types, name, block in zip(self.catch_types, self.catch_names, self.catch_blocks):
            for t in catch_types:
                types.append(TypeSlot(t))
                names.append(name)
                blocks.append(tuple(block))
        return TryElement(
            body=tuple(self.try_content),
            catch_types=tuple(types),
            catch_names=tuple(names),
            catch_bodies=tuple(blocks),
            finally_body=None if self.finally_contents is None else tuple(self.finally_contents),
        )


# ==================== TYPE BODIES ====================

class TypeDelegate(ABC):
    """Common handling of the members of a class or interface."""

    context = ""

    def __init__(self, modifiers: list[Modifier], doc: Optional[str], add_warning: AddWarning):
        self.modifiers = list(modifiers)
        self.doc = doc
        self.add_warning = add_warning
        self.name: Optional[str] = None
        self.fields: list[CodeElement] = []
        self.methods: list[CodeElement] = []
        self.pending_comments: list[CommentElement] = []

    def got_name(self, name: str):
        self.name = name

    @abstractmethod
    def got_extends(self, type: str):
        """Record the superclass, or a superinterface for interfaces."""
        pass

    def got_implements(self, type: str):
        pass

    @abstractmethod
    def _member_list(self, element: CodeElement) -> Optional[list[CodeElement]]:
        """The member list element belongs in, or None if the type cannot hold it."""
        pass

    def got_content(self, element: CodeElement):
        if isinstance(element, CommentElement):
            self.pending_comments.append(element)
            return
        target = self._member_list(element)
        if target is None:
            self.add_warning(UnsupportedFeature(type(element).__name__), self._pending_sink)
            return
        target.extend(self.pending_comments)
        target.append(element)
        self.pending_comments.clear()

    def _pending_sink(self, text: str):
        self.pending_comments.append(CommentElement(process_comment(text)))

    def _flush_pending(self, *candidates: list[CodeElement]):
        # Trailing comments go to the last non-empty member list
        for target in candidates:
            if target:
                target.extend(self.pending_comments)
                break
        else:
            self.fields.extend(self.pending_comments)
        self.pending_comments.clear()

    @abstractmethod
    def end(self, package: Optional[str], imports: Sequence[ImportElement]) -> CodeElement:
        pass


class ClassDelegate(TypeDelegate):
    context = "class"

    def __init__(self, modifiers: list[Modifier], doc: Optional[str], add_warning: AddWarning):
        super().__init__(modifiers, doc, add_warning)
        self.constructors: list[CodeElement] = []
        self.extends_type: Optional[str] = None
        self.implements_types: list[str] = []

    def got_extends(self, type: str):
        self.extends_type = type

    def got_implements(self, type: str):
        self.implements_types.append(type)

    def _member_list(self, element):
        if isinstance(element, VarElement):
            return self.fields
        elif isinstance(element, ConstructorElement):
            return self.constructors
        elif isinstance(element, (NormalMethodElement, MethodProtoElement)):
            return self.methods
        return None

    def end(self, package, imports):
        self._flush_pending(self.methods, self.constructors)
        modifiers = list(self.modifiers)
        abstract = remove_keywords(modifiers, "abstract")
        # Public is the default so there is nothing to warn about
        remove_keywords(modifiers, "public")
        warn_unsupported_modifiers(self.add_warning, self.context, modifiers)
        return ClassElement(
            abstract=abstract,
            name=self.name,
            extends=type_slot(self.extends_type),
            implements=tuple(TypeSlot(t) for t in self.implements_types),
            fields=tuple(self.fields),
            constructors=tuple(self.constructors),
            methods=tuple(self.methods),
            doc=self.doc,
            package=package,
            imports=tuple(imports),
        )


class InterfaceDelegate(TypeDelegate):
    context = "interface"

    def __init__(self, modifiers: list[Modifier], doc: Optional[str], add_warning: AddWarning):
        super().__init__(modifiers, doc, add_warning)
        self.extends_types: list[str] = []

    def got_extends(self, type: str):
        self.extends_types.append(type)

    def _member_list(self, element):
        if isinstance(element, VarElement):
            return self.fields
        elif isinstance(element, MethodProtoElement):
            return self.methods
        return None

    def end(self, package, imports):
        self._flush_pending(self.methods)
        modifiers = list(self.modifiers)
        remove_keywords(modifiers, "public")
        warn_unsupported_modifiers(self.add_warning, self.context, modifiers)
        return InterfaceElement(
            name=self.name,
            extends=tuple(TypeSlot(t) for t in self.extends_types),
            fields=tuple(self.fields),
            methods=tuple(self.methods),
            doc=self.doc,
            package=package,
            imports=tuple(imports),
        )
