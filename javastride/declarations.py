"""
Declaration events: compilation unit, modifiers, types, methods, fields.
"""

import logging
from typing import Callable, Optional

from .builders import (
    ClassDelegate, FieldOrVarBuilder, InterfaceDelegate, MethodBuilder,
    TypeDefKind,
)
from .diagnostics import ConversionError, UnsupportedFeature
from .elements import AccessPermission, Param, TypeSlot
from .handlers import MethodBodyRole, TypeBodyRole, TypeDefHandler
from .modifiers import AnnotationModifier, KeywordModifier

logger = logging.getLogger(__name__)


class DeclarationEventsMixin:
    """Mixin handling declaration events."""

    # These are expected from the converter
    position: int
    statement_handlers: list
    type_slots: object
    modifiers: list
    type_defs: list
    methods: list
    fields: list
    package: Optional[str]
    imports: list
    add_warning: Callable
    _with_expression: Callable
    _with_argument_list: Callable
    _with_statement: Callable
    _pop_statement_handler: Callable
    _found_statement: Callable
    _content_of: Callable
    _current_modifiers: Callable
    _get_javadoc: Callable
    _imports_for_cu: Callable

    # ==================== COMPILATION UNIT ====================

    def got_package(self, name: str):
        self.package = name

    def got_import(self, name: str, wildcard: bool = False, static: bool = False):
        self.imports.append(name + ".*" if wildcard else name)

    # ==================== MODIFIERS ====================

    def got_decl_begin(self):
        self.modifiers.append([])

    def begin_formal_parameter(self):
        self.modifiers.append([])

    def modifiers_consumed(self):
        if not self.modifiers:
            raise ConversionError("Modifiers consumed with no declaration open")
        self.modifiers.pop()

    def got_modifier(self, keyword: str, start: int = -1, end: int = -1):
        if self.modifiers:
            self.modifiers[-1].append(KeywordModifier(start=start, end=end, keyword=keyword))

    def got_annotation(self, name: str, params_follow: bool, start: int = -1, end: int = -1):
        if self.modifiers:
            annotation = AnnotationModifier(start=start, end=end, name=name)
            self.modifiers[-1].append(annotation)
            if params_follow:
                self._with_argument_list(annotation.set_params)

    # ==================== TYPE DEFINITIONS ====================

    def got_top_level_decl(self):
        self.type_defs.append(TypeDefHandler(self._found_statement))

    def got_inner_type(self, keyword: str):
        if self.type_defs:
            self.type_defs[-1].enter_nested()
        else:
            self.type_defs.append(TypeDefHandler(None))
        self.add_warning(UnsupportedFeature("inner " + keyword))

    def got_type_def(self, kind: TypeDefKind):
        if not self.type_defs:
            raise ConversionError(f"Type definition ({kind.value}) outside a type declaration")
        type_def = self.type_defs[-1]
        if kind == TypeDefKind.ENUM or kind == TypeDefKind.ANNOTATION:
            self.add_warning(UnsupportedFeature(kind.value))
            return

        doc = self._get_javadoc()
        if not type_def.converting:
            return
        modifiers = self._current_modifiers()
        if kind == TypeDefKind.CLASS:
            type_def.delegate = ClassDelegate(modifiers, doc, self.add_warning)
        else:
            type_def.delegate = InterfaceDelegate(modifiers, doc, self.add_warning)
        for comment in self.statement_handlers[-1].steal_comments(self.position):
            type_def.delegate.got_content(comment)

    def _converting_delegate(self):
        if self.type_defs and self.type_defs[-1].converting:
            return self.type_defs[-1].delegate
        return None

    def got_type_def_name(self, name: str):
        delegate = self._converting_delegate()
        if delegate is not None:
            delegate.got_name(name)

    def begin_type_def_extends(self):
        self.type_slots.expect(self._type_def_extends)

    def _type_def_extends(self, type: str):
        delegate = self._converting_delegate()
        if delegate is not None:
            delegate.got_extends(type)

    def end_type_def_extends(self):
        self.type_slots.end_expect()

    def begin_type_def_implements(self):
        self.type_slots.expect(self._type_def_implements)

    def _type_def_implements(self, type: str):
        delegate = self._converting_delegate()
        if delegate is not None:
            delegate.got_implements(type)

    def end_type_def_implements(self):
        self.type_slots.end_expect()

    def begin_type_body(self):
        self._with_statement(False, TypeBodyRole())

    def end_type_body(self):
        content = self._content_of(self._pop_statement_handler())
        delegate = self._converting_delegate()
        if delegate is not None:
            for element in content:
                delegate.got_content(element)

    def got_type_def_end(self):
        if not self.type_defs:
            raise ConversionError("Type definition end with no type open")
        type_def = self.type_defs[-1]
        if type_def.leave():
            self.type_defs.pop()
            if type_def.consumer is not None and type_def.delegate is not None:
                type_def.consumer(type_def.delegate.end(self.package, self._imports_for_cu()))

    # ==================== TYPES ====================

    def got_type_spec(self, text: str):
        self.type_slots.deliver(text)

    def got_array_declarator(self):
        self.type_slots.add_array_dimension()

    # ==================== METHODS ====================

    def got_method_declaration(self, name: str):
        return_type = self.type_slots.claim()
        self.methods.append(MethodBuilder(return_type, name, self._current_modifiers(), self._get_javadoc()))

    def got_constructor_decl(self):
        self.methods.append(MethodBuilder(None, None, self._current_modifiers(), self._get_javadoc()))

    def got_method_type_params(self):
        self.add_warning(UnsupportedFeature("generic methods"))

    def got_method_parameter(self, name: str, varargs: bool = False):
        if varargs:
            self.add_warning(UnsupportedFeature("varargs"))
        type = self.type_slots.claim()
        self.methods[-1].parameters.append(Param(TypeSlot(type), name))

    def begin_throws(self):
        self.type_slots.expect(self.methods[-1].throws_types.append)

    def end_throws(self):
        self.type_slots.end_expect()

    def begin_method_body(self):
        self.methods[-1].has_body = True
        self._with_statement(False, MethodBodyRole())

    def end_method_decl(self):
        if not self.methods:
            raise ConversionError("Method end with no method open")
        method = self.methods.pop()
        body = self._content_of(self._pop_statement_handler()) if method.has_body else None
        self._found_statement(method.end(body, self.add_warning))

    def got_constructor_call(self, keyword: str):
        method = self.methods[-1]
        method.constructor_call = keyword
        # The call itself is not a statement; only its arguments are kept
        self._with_expression(lambda e: None)

        def got_args(args):
            method.constructor_args = args

        self._with_argument_list(got_args)

    # ==================== FIELDS AND VARIABLES ====================

    def begin_field_declarations(self):
        self.fields.append(FieldOrVarBuilder(self.type_slots.claim(), self._current_modifiers()))

    def got_field(self, name: str, init_follows: bool):
        self._handle_field_or_var(name, init_follows, AccessPermission.PROTECTED)

    def got_subsequent_field(self, name: str, init_follows: bool):
        self._handle_field_or_var(name, init_follows, AccessPermission.PROTECTED)

    def end_field_declarations(self):
        self.fields.pop()

    def got_variable_decl(self, name: str, init_follows: bool):
        self.fields.append(FieldOrVarBuilder(self.type_slots.claim(), self._current_modifiers()))
        self._handle_field_or_var(name, init_follows, None)

    def got_subsequent_var(self, name: str, init_follows: bool):
        self._handle_field_or_var(name, init_follows, None)

    def end_variable_decls(self):
        self.fields.pop()

    def _handle_field_or_var(self, name: str, init_follows: bool, default_access: Optional[AccessPermission]):
        build = self.fields[-1].declarator(name, default_access, self.add_warning)
        if init_follows:
            self._with_expression(lambda e: self._found_statement(build(e)))
        else:
            self._found_statement(build(None))
