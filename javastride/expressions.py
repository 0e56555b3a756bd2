"""
Expression events: capture boundaries, operators, argument lists and
the constructs that are masked out of captured text.
"""

import logging
from typing import Callable, Optional

from .diagnostics import ConversionError, UnsupportedFeature, UnsupportedModifier
from .handlers import DiscardRole

logger = logging.getLogger(__name__)


class ExpressionEventsMixin:
    """Mixin handling expression events."""

    # These are expected from the converter
    expression_captures: list
    argument_handlers: list
    modifiers: list
    add_warning: Callable
    _get_text: Callable
    _with_expression: Callable
    _with_statement: Callable
    _pop_statement_handler: Callable

    def _top_capture(self):
        return self.expression_captures[-1] if self.expression_captures else None

    # ==================== CAPTURE ====================

    def begin_expression(self, pos: int):
        capture = self._top_capture()
        if capture is not None:
            capture.expression_begun(pos)

    def end_expression(self, pos: int):
        capture = self._top_capture()
        if capture is not None and capture.expression_end(pos):
            # Pop first so that the consumer may register new captures
            self.expression_captures.pop()
            capture.finish(self._get_text)

    def got_binary_operator(self, op: str):
        self._record_operator(op)

    def got_unary_operator(self, op: str):
        self._record_operator(op)

    def got_post_operator(self, op: str):
        self._record_operator(op)

    def _record_operator(self, op: str):
        capture = self._top_capture()
        if capture is not None:
            capture.operator(op)

    def got_question_operator(self, start: int, end: int):
        self.add_warning(UnsupportedFeature("conditional operator (.. ? .. : ..)"))
        self._mask(start, end)

    def got_question_colon(self, start: int, end: int):
        self._mask(start, end)

    def _mask(self, start: int, end: int):
        capture = self._top_capture()
        if capture is not None:
            capture.mask(start, end)

    # ==================== ARGUMENT LISTS ====================

    def begin_argument_list(self):
        if not self.argument_handlers:
            return
        handler = self.argument_handlers[-1]
        handler.outstanding += 1
        if handler.outstanding == 1:
            self._with_expression(handler.args.append)

    def end_argument(self):
        if not self.argument_handlers:
            return
        handler = self.argument_handlers[-1]
        if handler.outstanding == 1:
            self._with_expression(handler.args.append)

    def end_argument_list(self):
        if not self.argument_handlers:
            return
        handler = self.argument_handlers[-1]
        if handler.outstanding == 1:
            # Cancel the capture waiting for a further argument
            self.expression_captures.pop()
            self.argument_handlers.pop()
            handler.consumer(handler.args)
        handler.outstanding -= 1

    # ==================== ANONYMOUS CLASSES AND LAMBDAS ====================

    def begin_anon_class_body(self, pos: int):
        capture = self._top_capture()
        if capture is not None:
            capture.begin_mask(pos)
        self.add_warning(UnsupportedFeature("anonymous class"))
        self._with_statement(False, DiscardRole("anonymous class"))

    def end_anon_class_body(self, end: int):
        self._content_of(self._pop_statement_handler())
        capture = self._top_capture()
        if capture is not None:
            capture.end_mask(end)

    def got_lambda_formal_param(self):
        self.modifiers.append([])

    def got_lambda_formal_type(self, start: int, end: int):
        self.add_warning(UnsupportedFeature("lambda parameter type"))
        self._mask(start, end)

    def got_lambda_formal_name(self, name: str):
        if not self.modifiers:
            raise ConversionError(f"Lambda parameter {name} without a parameter begin")
        for modifier in self.modifiers.pop():
            self.add_warning(UnsupportedModifier("lambda parameter", str(modifier)))
            self._mask(modifier.start, modifier.end)

    def begin_lambda(self, is_block: bool, pos: Optional[int] = None):
        if is_block:
            self.add_warning(UnsupportedFeature("lambda block"))
            capture = self._top_capture()
            if capture is not None:
                capture.begin_mask(pos)
            # The body block is collected into this handler and dropped
            self._with_statement(True, DiscardRole("lambda block"))

    def end_lambda(self, end: Optional[int] = None):
        if end is not None:
            capture = self._top_capture()
            if capture is not None:
                capture.end_mask(end)
