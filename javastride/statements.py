"""
Statement events for the converter.
"""

import logging
from typing import Callable, Optional

from .builders import ForBuilder, IfBuilder, SwitchBuilder, TryBuilder
from .diagnostics import ConversionError, UnsupportedFeature
from .elements import BreakElement, ReturnElement, ThrowElement
from .expression import Expression
from .handlers import (
    BlockRole, CatchBodyRole, DiscardRole, FinallyBodyRole, ForBodyRole,
    IfBranchRole, SwitchSectionRole, TryBlockRole, WhileBodyRole,
)

logger = logging.getLogger(__name__)


def _discard(e: Expression):
    logger.debug("Discarding expression: %s", e.java)


class StatementEventsMixin:
    """Mixin handling statement events."""

    # These are expected from the converter
    statement_handlers: list
    modifiers: list
    if_builders: list
    for_builders: list
    switch_builders: list
    try_builders: list
    type_slots: object
    add_warning: Callable
    _with_expression: Callable
    _with_statement: Callable
    _pop_statement_handler: Callable
    _found_statement: Callable
    _found_statements: Callable
    _content_of: Callable
    _end_block: Callable

    # ==================== BLOCKS AND SIMPLE STATEMENTS ====================

    def begin_stmt_block(self):
        self._with_statement(False, BlockRole())

    def end_stmt_block(self):
        self._end_block(self._pop_statement_handler())

    def got_statement_expression(self):
        self._with_expression(lambda e: self._found_statement(e.to_statement()))

    def got_empty_statement(self):
        self._found_statements([])

    def got_return_statement(self, has_value: bool):
        if has_value:
            self._with_expression(lambda e: self._found_statement(ReturnElement(e.to_optional())))
        else:
            self._found_statement(ReturnElement())

    def got_throw(self):
        self._with_expression(lambda e: self._found_statement(ThrowElement(e.to_filled())))

    def got_break_continue(self, keyword: str, label: Optional[str] = None):
        if keyword == "break":
            self._found_statement(BreakElement())
            if label is not None:
                self.add_warning(UnsupportedFeature("break label"))
        else:
            self.add_warning(UnsupportedFeature(keyword))

    def got_labelled_statement(self, label: str):
        self.add_warning(UnsupportedFeature("label"))

    def got_assert(self):
        self.add_warning(UnsupportedFeature("assert"))

    # ==================== UNSUPPORTED BLOCKS ====================

    def begin_synchronized_block(self):
        self.add_warning(UnsupportedFeature("synchronized"))
        self._with_expression(_discard)
        self._with_statement(True, DiscardRole("synchronized"))

    def end_synchronized_block(self):
        logger.debug("End of discarded synchronized block")

    def begin_do_while(self):
        self.add_warning(UnsupportedFeature("do-while"))
        self._with_statement(True, DiscardRole("do-while"))

    def end_do_while(self):
        # The loop condition follows the discarded body
        self._with_expression(_discard)

    def begin_init_block(self):
        self.add_warning(UnsupportedFeature("initializer block"))
        self._with_statement(False, DiscardRole("initializer block"))

    def end_init_block(self):
        self._content_of(self._pop_statement_handler())

    # ==================== IF AND WHILE ====================

    def begin_while_loop(self):
        self._with_expression(lambda e: self._with_statement(True, WhileBodyRole(e)))

    def begin_if_stmt(self):
        self._with_expression(lambda e: self.if_builders.append(IfBuilder(e)))

    def begin_if_cond_block(self):
        self._with_statement(True, IfBranchRole(self.if_builders[-1]))

    def got_else_if(self):
        self._with_expression(self.if_builders[-1].add_condition)

    def end_if_stmt(self):
        if not self.if_builders:
            raise ConversionError("End of if statement with no if open")
        self._found_statement(self.if_builders.pop().end())

    # ==================== SWITCH ====================

    def begin_switch_stmt(self):
        builder = SwitchBuilder()
        self.switch_builders.append(builder)
        self._with_expression(builder.got_expression)

    def begin_switch_block(self):
        self._with_statement(False, SwitchSectionRole(self.switch_builders[-1]))

    def got_switch_case(self):
        self._with_expression(self._switch_case)

    def _switch_case(self, e: Expression):
        builder = self.switch_builders[-1]
        # The previous section must be stored before the case is added
        builder.store_prev_code(self._content_of(self._pop_statement_handler()))
        builder.got_case(e)
        self._with_statement(False, SwitchSectionRole(builder))

    def got_switch_default(self):
        builder = self.switch_builders[-1]
        builder.store_prev_code(self._content_of(self._pop_statement_handler()))
        builder.got_default()
        self._with_statement(False, SwitchSectionRole(builder))

    def end_switch_block(self):
        self._end_block(self._pop_statement_handler())

    # ==================== FOR ====================

    def begin_for_loop(self):
        self.for_builders.append(ForBuilder())
        self.modifiers.append([])

    def got_for_init(self, name: str):
        builder = self.for_builders[-1]
        builder.got_type(self.type_slots.claim(), self.modifiers[-1], self.add_warning)
        builder.got_name(name)

    def got_subsequent_for_init(self, name: str, init_follows: bool):
        builder = self.for_builders[-1]
        builder.got_name(name)
        if init_follows:
            self._with_expression(builder.got_var_init)

    def got_for_init_expression(self):
        self._with_expression(self.for_builders[-1].got_init_statement)

    def determined_for_loop(self, for_each: bool, init_follows: bool):
        builder = self.for_builders[-1]
        if for_each:
            self._with_expression(builder.got_each)
        elif init_follows:
            self._with_expression(builder.got_var_init)

    def got_for_test(self, present: bool):
        if present:
            self._with_expression(self.for_builders[-1].got_condition)

    def got_for_increment(self, present: bool):
        if present:
            self._with_expression(self.for_builders[-1].got_post)

    def begin_for_loop_body(self):
        self.modifiers.pop()
        self._with_statement(True, ForBodyRole(self.for_builders[-1]))

    # ==================== TRY ====================

    def begin_try_catch_stmt(self, has_resource: bool):
        if has_resource:
            self.add_warning(UnsupportedFeature("try-with-resource"))
        self.try_builders.append(TryBuilder())

    def begin_try_block(self):
        self._with_statement(False, TryBlockRole(self.try_builders[-1]))

    def end_try_block(self):
        self._end_block(self._pop_statement_handler())

    def got_catch(self):
        self.try_builders[-1].catch_types.append([])

    def got_multi_catch(self):
        self.try_builders[-1].catch_types[-1].append(self.type_slots.claim())

    def got_catch_var_name(self, name: str):
        builder = self.try_builders[-1]
        builder.catch_names.append(name)
        builder.catch_types[-1].append(self.type_slots.claim())
        self._with_statement(True, CatchBodyRole(builder))

    def got_finally(self):
        self._with_statement(True, FinallyBodyRole(self.try_builders[-1]))

    def end_try_catch_stmt(self):
        if not self.try_builders:
            raise ConversionError("End of try statement with no try open")
        self._found_statement(self.try_builders.pop().end())
