"""Tests that drive the converter with events directly, without the parser."""

import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from javastride import ConversionError, JavaStrideConverter, ParseFailure, UnsupportedFeature
from javastride.elements import (
    BreakElement, CallElement, CallSlot, CaseElement, CommentElement,
    FilledSlot, OptionalSlot, ReturnElement, SwitchElement, WhileElement,
)
from javastride.builders import ClassDelegate, TypeDelegate
from javastride.handlers import TypeSlots


def converter_for(source, testing=True):
    return JavaStrideConverter(source, testing=testing)


class TestEvents:
    def test_return_with_value(self):
        source = "return a + b;"
        c = converter_for(source)
        c.scanned(0)
        c.got_return_statement(True)
        c.scanned(7)
        c.begin_expression(7)
        c.got_binary_operator("+")
        c.scanned(11)
        c.end_expression(12)
        assert c.get_elements() == [ReturnElement(OptionalSlot("a + b", "a + b"))]
        assert c.get_warnings() == []

    def test_while_with_comment(self):
        source = "while (x) /* c */ break;"
        c = converter_for(source)
        c.scanned(0)
        c.begin_while_loop()
        c.scanned(7)
        c.begin_expression(7)
        c.end_expression(8)
        c.got_comment("/* c */", 10, 17)
        c.scanned(23)
        c.got_break_continue("break")
        assert c.get_elements() == [WhileElement(FilledSlot("x", "x"), (CommentElement("c"), BreakElement()))]

    def test_nested_expression_counts(self):
        source = "return f(g(1));"
        c = converter_for(source)
        c.got_return_statement(True)
        for pos in (7, 9, 11):
            c.begin_expression(pos)
        c.end_expression(12)
        c.end_expression(13)
        assert c.get_elements() == []
        c.end_expression(14)
        assert c.get_elements() == [ReturnElement(OptionalSlot("f ( g ( 1 ) )", "f ( g ( 1 ) )"))]

    def test_question_operator_is_masked(self):
        source = "return a ? b : c;"
        c = converter_for(source)
        c.got_return_statement(True)
        c.begin_expression(7)
        c.got_question_operator(9, 10)
        c.got_question_colon(13, 14)
        c.end_expression(16)
        assert c.get_elements() == [
            CommentElement("WARNING:UnsupportedFeature"),
            ReturnElement(OptionalSlot("a b c", "a b c")),
        ]
        assert c.get_warnings() == [UnsupportedFeature("conditional operator (.. ? .. : ..)")]

    def test_warning_comment_outside_testing(self):
        c = converter_for("", testing=False)
        c.got_assert()
        assert c.get_elements() == [CommentElement("Unsupported feature: assert")]

    def test_annotation_arguments(self):
        source = "@Foo(1, 2)"
        c = converter_for(source)
        c.got_decl_begin()
        c.got_annotation("@Foo", True, 0, 10)
        c.begin_argument_list()
        c.begin_expression(5)
        c.end_expression(6)
        c.end_argument()
        c.begin_expression(8)
        c.end_expression(9)
        c.end_argument()
        c.end_argument_list()
        assert str(c.modifiers[-1][0]) == "@Foo(1, 2)"
        c.modifiers_consumed()
        assert c.modifiers == []

    def test_empty_argument_list(self):
        c = converter_for("@Foo()")
        c.got_decl_begin()
        c.got_annotation("@Foo", True, 0, 6)
        c.begin_argument_list()
        c.end_argument_list()
        assert str(c.modifiers[-1][0]) == "@Foo()"
        assert c.expression_captures == []

    def test_content_before_first_switch_label_is_dropped(self):
        source = "switch (x) { /* lost */ break; case 1: go(); }"
        c = converter_for(source)
        c.scanned(0)
        c.begin_switch_stmt()
        c.scanned(8)
        c.begin_expression(8)
        c.end_expression(9)
        c.scanned(11)
        c.begin_switch_block()
        c.got_comment("/* lost */", 13, 23)
        c.scanned(29)
        c.got_break_continue("break")
        c.scanned(31)
        c.got_switch_case()
        c.scanned(36)
        c.begin_expression(36)
        c.end_expression(37)
        c.scanned(39)
        c.got_statement_expression()
        c.begin_expression(39)
        c.end_expression(43)
        c.scanned(45)
        c.end_switch_block()
        assert c.get_elements() == [
            SwitchElement(FilledSlot("x", "x"), (
                CaseElement(FilledSlot("1", "1"), (CallElement(CallSlot("go ( )", "go ( )")),)),
            ))
        ]


class TestErrors:
    def test_parse_failed_raises(self):
        c = converter_for("class {")
        with pytest.raises(ParseFailure) as info:
            c.parse_failed(6, "unexpected '{'")
        assert info.value.position == 6

    def test_block_end_without_begin(self):
        c = converter_for("}")
        with pytest.raises(ConversionError):
            c.end_stmt_block()

    def test_expression_end_without_begin(self):
        c = converter_for("x;")
        c.got_statement_expression()
        with pytest.raises(ConversionError):
            c.end_expression(1)

    def test_if_end_without_begin(self):
        with pytest.raises(ConversionError):
            converter_for("").end_if_stmt()

    def test_modifiers_consumed_without_declaration(self):
        with pytest.raises(ConversionError):
            converter_for("").modifiers_consumed()


class TestTypeSlots:
    @pytest.fixture
    def slots(self):
        return TypeSlots()

    def test_parked_type_is_claimed(self, slots):
        slots.deliver("int")
        slots.add_array_dimension()
        assert slots.claim() == "int[]"

    def test_expected_type_goes_to_consumer(self, slots):
        received = []
        slots.expect(received.append)
        slots.deliver("A")
        slots.deliver("B")
        slots.end_expect()
        assert received == ["A", "B"]
        assert slots.entries == []

    def test_claim_with_nothing_parked(self, slots):
        with pytest.raises(ConversionError):
            slots.claim()

    def test_end_expect_with_parked_type_on_top(self, slots):
        slots.expect(lambda t: None)
        slots.end_expect()
        slots.deliver("int")
        with pytest.raises(ConversionError):
            slots.end_expect()


class TestTypeDelegates:
    def test_base_delegate_is_abstract(self):
        with pytest.raises(TypeError):
            TypeDelegate([], None, lambda w, sink=None: None)

    def test_class_delegate_is_concrete(self):
        delegate = ClassDelegate([], None, lambda w, sink=None: None)
        delegate.got_name("A")
        delegate.got_extends("B")
        assert delegate.end(None, ()).extends.text == "B"
