"""
Java front end: parses Java source with Lark and drives the converter.

The parse tree is walked in source order and each recognised construct
is reported to a JavaStrideConverter as an event. Before every event
the walker delivers the comments lying before the trigger token (plus
a configurable lookahead) and tells the converter where it is.
"""

import logging
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from lark import Lark, Token, Tree, UnexpectedInput
from lark.visitors import Interpreter

from .builders import TypeDefKind
from .converter import JavaStrideConverter
from .diagnostics import ConversionWarning, ParseFailure
from .elements import CodeElement

logger = logging.getLogger(__name__)

sys.setrecursionlimit(100000)


GRAMMAR_FILE = Path(__file__).parent / "java.lark"

DEFAULT_LOOKAHEAD = 1

_TYPE_DECLARATIONS = {
    "class_declaration": "class",
    "interface_declaration": "interface",
    "enum_declaration": "enum",
    "annotation_type_declaration": "@interface",
}


class JavaContext(Enum):
    """What kind of Java fragment is being converted."""
    TOP_LEVEL = "compilation_unit"
    CLASS_MEMBER = "class_member_declarations"
    STATEMENT = "block_statements"

    @property
    def start_rule(self) -> str:
        return self.value


@dataclass
class ConversionResult:
    elements: list[CodeElement]
    warnings: list[ConversionWarning]

    def to_dict(self) -> dict:
        return {
            "elements": [e.to_dict() for e in self.elements],
            "warnings": [w.message for w in self.warnings],
        }


def preprocess_unicode_escapes(source: str) -> str:
    r"""
    Preprocess Unicode escapes in Java source code.
    Java requires \\uXXXX escapes to be processed before lexical analysis.
    """
    result = []
    i = 0
    while i < len(source):
        if i < len(source) - 5 and source[i] == '\\' and source[i+1] == 'u':
            j = i + 2
            while j < len(source) and source[j] == 'u':
                j += 1
            if j + 4 <= len(source):
                hex_digits = source[j:j+4]
                if all(c in '0123456789abcdefABCDEF' for c in hex_digits):
                    result.append(chr(int(hex_digits, 16)))
                    i = j + 4
                    continue
        result.append(source[i])
        i += 1
    return ''.join(result)


# ==================== TREE HELPERS ====================

def _tokens(node) -> list[Token]:
    if isinstance(node, Token):
        return [node]
    result = []
    for child in node.children:
        if child is not None:
            result.extend(_tokens(child))
    return result


def _first_token(node) -> Optional[Token]:
    if isinstance(node, Token):
        return node
    for child in node.children:
        if child is not None:
            token = _first_token(child)
            if token is not None:
                return token
    return None


def _last_token(node) -> Optional[Token]:
    if isinstance(node, Token):
        return node
    for child in reversed(node.children):
        if child is not None:
            token = _last_token(child)
            if token is not None:
                return token
    return None


def _subtrees(tree: Tree, *names: str) -> list[Tree]:
    return [c for c in tree.children if isinstance(c, Tree) and (not names or c.data in names)]


def _subtree(tree: Tree, name: str) -> Optional[Tree]:
    found = _subtrees(tree, name)
    return found[0] if found else None


def _child_token(tree: Tree, value: str) -> Optional[Token]:
    for child in tree.children:
        if isinstance(child, Token) and child == value:
            return child
    return None


def _identifiers(tree: Tree) -> list[Token]:
    return [c for c in tree.children if isinstance(c, Token) and c.type == "IDENTIFIER"]


def _is_word(ch: str) -> bool:
    return ch.isalnum() or ch in "_$"


def _type_text(node) -> str:
    """Text of a type, without whitespace except where words meet."""
    text = ""
    prev = None
    for token in _tokens(node):
        if prev is not None and (
            (_is_word(prev[-1]) and _is_word(token[0]))
            or (prev == "?" and _is_word(token[0]))
            or prev == "&" or token == "&"
        ):
            text += " "
        text += token
        prev = token
    return text


def _dim_count(tree: Tree) -> int:
    dims = _subtree(tree, "dims")
    return len(dims.children) if dims is not None else 0


# ==================== PARSER ====================

class JavaParser:
    """Lark parser for the three conversion contexts."""

    def __init__(self):
        with open(GRAMMAR_FILE, "r") as f:
            grammar = f.read()

        self._parser = Lark(
            grammar,
            parser="earley",
            lexer="basic",
            propagate_positions=True,
            keep_all_tokens=True,
            maybe_placeholders=False,
            start=[context.start_rule for context in JavaContext],
        )

    def parse(self, source: str, context: JavaContext = JavaContext.TOP_LEVEL) -> Tree:
        try:
            return self._parser.parse(source, start=context.start_rule)
        except UnexpectedInput as e:
            position = e.pos_in_stream if e.pos_in_stream is not None else -1
            message = str(e).strip().splitlines()[0] if str(e).strip() else type(e).__name__
            raise ParseFailure(position, message) from e

    def lex(self, source: str) -> tuple[list[Token], list[Token]]:
        """Split the source into significant tokens and comments."""
        tokens = []
        comments = []
        for token in self._parser.lex(source, dont_ignore=True):
            if token.type == "COMMENT":
                comments.append(token)
            elif token.type != "WS":
                tokens.append(token)
        return tokens, comments


_parser: Optional[JavaParser] = None


def get_parser() -> JavaParser:
    global _parser
    if _parser is None:
        _parser = JavaParser()
    return _parser


# ==================== EVENT WALKER ====================

class EventWalker(Interpreter):
    """
    Walks a Java parse tree in source order, calling converter events.

    Rule-named methods are visited through Interpreter dispatch; rules
    with no method of their own just have their subtrees visited, which
    is right for expression nodes that carry no events.
    """

    def __init__(self, converter: JavaStrideConverter, source: str,
                 tokens: list[Token], comments: list[Token], lookahead: int = DEFAULT_LOOKAHEAD):
        super().__init__()
        self.converter = converter
        self.source = source
        self.tokens = tokens
        self.comments = comments
        self.lookahead = max(lookahead, 0)
        self._index = {token.start_pos: i for i, token in enumerate(tokens)}
        self._next_comment = 0

    # ==================== POSITION ====================

    def _at(self, token: Optional[Token]):
        """Deliver comments up to the lookahead boundary and mark the trigger token."""
        if token is None:
            boundary = None
            position = len(self.source)
        else:
            ahead = self._index[token.start_pos] + self.lookahead
            boundary = self.tokens[ahead].start_pos if ahead < len(self.tokens) else None
            position = token.start_pos
        while self._next_comment < len(self.comments):
            comment = self.comments[self._next_comment]
            if boundary is not None and comment.start_pos >= boundary:
                break
            self.converter.got_comment(str(comment), comment.start_pos, comment.end_pos)
            self._next_comment += 1
        self.converter.scanned(position)

    def _after(self, token: Token) -> Optional[Token]:
        index = self._index[token.start_pos] + 1
        return self.tokens[index] if index < len(self.tokens) else None

    def run(self, tree: Tree, context: JavaContext):
        if context == JavaContext.TOP_LEVEL:
            self.visit(tree)
            return
        for child in _subtrees(tree):
            if context == JavaContext.CLASS_MEMBER:
                self._member(child)
            else:
                self.visit(child)
        self._at(None)

    # ==================== COMPILATION UNIT ====================

    def compilation_unit(self, tree: Tree):
        has_types = False
        for child in _subtrees(tree):
            if child.data == "type_declaration":
                has_types = True
                self._at(_first_token(child))
                self.converter.got_top_level_decl()
                *modifiers, declaration = _subtrees(child)
                self._type_declaration(modifiers, declaration, inner=False)
            elif child.data != "empty_declaration":
                self.visit(child)
        self._at(None)
        self.converter.finished_cu(imports_only=not has_types)

    def package_declaration(self, tree: Tree):
        self._at(_child_token(tree, "package"))
        self.converter.got_package(_type_text(_subtree(tree, "qualified_name")))

    def import_declaration(self, tree: Tree):
        self._at(_last_token(tree))
        self.converter.got_import(
            _type_text(_subtree(tree, "qualified_name")),
            wildcard=_subtree(tree, "import_wildcard") is not None,
            static=_child_token(tree, "static") is not None,
        )

    # ==================== MODIFIERS ====================

    def _modifiers(self, modifiers: list[Tree]):
        for modifier in modifiers:
            child = modifier.children[0]
            if isinstance(child, Tree):
                self._annotation(child)
            else:
                self._at(child)
                self.converter.got_modifier(str(child), child.start_pos, child.end_pos)

    def _annotation(self, tree: Tree):
        first, last = _first_token(tree), _last_token(tree)
        arguments = _subtree(tree, "annotation_arguments")
        self._at(first)
        self.converter.got_annotation(
            "@" + _type_text(_subtree(tree, "qualified_name")),
            arguments is not None, first.start_pos, last.end_pos,
        )
        if arguments is None:
            return

        self._at(_first_token(arguments))
        self.converter.begin_argument_list()
        values = _subtrees(arguments)
        if values and values[0].data == "element_value_pairs":
            values = _subtrees(values[0])
        for value in values:
            if value.data in ("element_value_pair", "element_value_array", "annotation"):
                self._span(value)
            else:
                self._expression(value)
            self._at(self._after(_last_token(value)))
            self.converter.end_argument()
        self._at(_last_token(arguments))
        self.converter.end_argument_list()

    # ==================== TYPE DECLARATIONS ====================

    def _type_declaration(self, modifiers: list[Tree], declaration: Tree, inner: bool):
        self._at(_first_token(modifiers[0] if modifiers else declaration))
        self.converter.got_decl_begin()
        self._modifiers(modifiers)
        if inner:
            self._at(_first_token(declaration))
            self.converter.got_inner_type(_TYPE_DECLARATIONS[declaration.data])
        self.visit(declaration)
        self._at(_last_token(declaration))
        self.converter.modifiers_consumed()

    def _type_header(self, tree: Tree, kind: TypeDefKind):
        self._at(_first_token(tree))
        self.converter.got_type_def(kind)
        name = _identifiers(tree)[0]
        self._at(name)
        self.converter.got_type_def_name(str(name))

    def _type_list(self, tree: Tree, begin, end):
        self._at(_first_token(tree))
        begin()
        for class_type in _subtrees(tree, "class_type"):
            self._type_spec(class_type)
        end()

    def _extends(self, tree: Optional[Tree]):
        if tree is not None:
            self._type_list(tree, self.converter.begin_type_def_extends, self.converter.end_type_def_extends)

    def _implements(self, tree: Optional[Tree]):
        if tree is not None:
            self._type_list(tree, self.converter.begin_type_def_implements, self.converter.end_type_def_implements)

    def _type_end(self, tree: Tree):
        self._at(_last_token(tree))
        self.converter.got_type_def_end()

    def class_declaration(self, tree: Tree):
        self._type_header(tree, TypeDefKind.CLASS)
        self._extends(_subtree(tree, "superclass"))
        self._implements(_subtree(tree, "super_interfaces"))
        self._type_body(_subtree(tree, "class_body"))
        self._type_end(tree)

    def interface_declaration(self, tree: Tree):
        self._type_header(tree, TypeDefKind.INTERFACE)
        self._extends(_subtree(tree, "extends_interfaces"))
        self._type_body(_subtree(tree, "class_body"))
        self._type_end(tree)

    def enum_declaration(self, tree: Tree):
        self._type_header(tree, TypeDefKind.ENUM)
        self._implements(_subtree(tree, "super_interfaces"))
        body = _subtree(tree, "enum_body")
        self._at(_first_token(body))
        self.converter.begin_type_body()
        # Constants are dropped with the rest of the enum; members still produce their events
        declarations = _subtree(body, "enum_body_declarations")
        if declarations is not None:
            for member in _subtrees(declarations):
                self._member(member)
        self._at(_last_token(body))
        self.converter.end_type_body()
        self._type_end(tree)

    def annotation_type_declaration(self, tree: Tree):
        self._type_header(tree, TypeDefKind.ANNOTATION)
        body = _subtree(tree, "annotation_type_body")
        self._at(_first_token(body))
        self.converter.begin_type_body()
        self._at(_last_token(body))
        self.converter.end_type_body()
        self._type_end(tree)

    def _type_body(self, body: Tree):
        self._at(_first_token(body))
        self.converter.begin_type_body()
        for member in _subtrees(body):
            self._member(member)
        self._at(_last_token(body))
        self.converter.end_type_body()

    # ==================== MEMBERS ====================

    def _member(self, tree: Tree):
        if tree.data == "member_declaration":
            *modifiers, declaration = _subtrees(tree)
            if declaration.data in _TYPE_DECLARATIONS:
                self._type_declaration(modifiers, declaration, inner=True)
            elif declaration.data == "field_declaration":
                self._field(modifiers, declaration)
            elif declaration.data == "method_declaration":
                self._method(modifiers, declaration)
            elif declaration.data == "constructor_declaration":
                self._constructor(modifiers, declaration)
        elif tree.data == "initializer":
            block = _subtree(tree, "block")
            self._at(_first_token(block))
            self.converter.begin_init_block()
            self._statements(block)
            self._at(_last_token(block))
            self.converter.end_init_block()

    def _declaration_begin(self, modifiers: list[Tree], declaration: Tree):
        self._at(_first_token(modifiers[0] if modifiers else declaration))
        self.converter.got_decl_begin()
        self._modifiers(modifiers)

    def _field(self, modifiers: list[Tree], tree: Tree):
        self._declaration_begin(modifiers, tree)
        declarators = _subtrees(_subtree(tree, "variable_declarators"))
        self._type_spec(_subtree(tree, "type"), declarators[0])
        self.converter.begin_field_declarations()
        for i, declarator in enumerate(declarators):
            name, init = self._declarator(declarator)
            if i == 0:
                self.converter.got_field(name, init is not None)
            else:
                self.converter.got_subsequent_field(name, init is not None)
            if init is not None:
                self._expression(init)
        self._at(_last_token(tree))
        self.converter.end_field_declarations()
        self.converter.modifiers_consumed()

    def _declarator(self, declarator: Tree) -> tuple[str, Optional[Tree]]:
        """Position on a declarator; returns its name and initializer."""
        name = _identifiers(declarator)[0]
        self._at(self._after(name))
        init = _subtree(declarator, "variable_initializer")
        return str(name), init.children[0] if init is not None else None

    def _method(self, modifiers: list[Tree], tree: Tree):
        self._declaration_begin(modifiers, tree)
        type_parameters = _subtree(tree, "type_parameters")
        if type_parameters is not None:
            self._at(_first_token(type_parameters))
            self.converter.got_method_type_params()
        self._type_spec(_subtree(tree, "result_type"))
        name = _identifiers(tree)[0]
        self._at(name)
        self.converter.got_method_declaration(str(name))
        self._formal_parameters(_subtree(tree, "formal_parameters"))
        self._throws(_subtree(tree, "throws_clause"))

        body = _subtree(tree, "method_body")
        if body is not None:
            self._at(_first_token(body))
            self.converter.begin_method_body()
            self._statements(body)
        self._at(_last_token(tree))
        self.converter.end_method_decl()
        self.converter.modifiers_consumed()

    def _constructor(self, modifiers: list[Tree], tree: Tree):
        self._declaration_begin(modifiers, tree)
        type_parameters = _subtree(tree, "type_parameters")
        if type_parameters is not None:
            self._at(_first_token(type_parameters))
            self.converter.got_method_type_params()
        self._at(_identifiers(tree)[0])
        self.converter.got_constructor_decl()
        self._formal_parameters(_subtree(tree, "formal_parameters"))
        self._throws(_subtree(tree, "throws_clause"))

        body = _subtree(tree, "constructor_body")
        self._at(_first_token(body))
        self.converter.begin_method_body()
        invocation = _subtree(body, "explicit_constructor_invocation")
        if invocation is not None:
            keyword = _child_token(invocation, "this") or _child_token(invocation, "super")
            arguments = _subtree(invocation, "arguments")
            self._at(keyword)
            self.converter.got_constructor_call(str(keyword))
            self.converter.begin_expression(keyword.start_pos)
            self._arguments(arguments)
            self._at(_last_token(arguments))
            self.converter.end_expression(_last_token(arguments).end_pos)
        self._statements(body)
        self._at(_last_token(body))
        self.converter.end_method_decl()
        self.converter.modifiers_consumed()

    def _formal_parameters(self, tree: Tree):
        for parameter in _subtrees(tree, "formal_parameter"):
            modifiers = _subtrees(parameter, "local_modifier")
            self._at(_first_token(parameter))
            self.converter.begin_formal_parameter()
            self._modifiers(modifiers)
            self._type_spec(_subtree(parameter, "type"), parameter)
            name = _identifiers(parameter)[0]
            self._at(name)
            self.converter.got_method_parameter(str(name), _child_token(parameter, "...") is not None)
            self.converter.modifiers_consumed()

    def _throws(self, tree: Optional[Tree]):
        if tree is not None:
            self._type_list(tree, self.converter.begin_throws, self.converter.end_throws)

    def _type_spec(self, tree: Tree, declarator: Optional[Tree] = None):
        """Deliver a type, plus any array dimensions written after the declared name."""
        self._at(_first_token(tree))
        self.converter.got_type_spec(_type_text(tree))
        if declarator is not None:
            for _ in range(_dim_count(declarator)):
                self.converter.got_array_declarator()

    # ==================== STATEMENTS ====================

    def _statements(self, tree: Tree):
        for statement in _subtrees(tree):
            if statement.data != "explicit_constructor_invocation":
                self.visit(statement)

    def block(self, tree: Tree):
        self._at(_first_token(tree))
        self.converter.begin_stmt_block()
        self._statements(tree)
        self._at(_last_token(tree))
        self.converter.end_stmt_block()

    def local_variable_declaration_statement(self, tree: Tree):
        self._local_variables(_subtree(tree, "local_variable_declaration"))
        self._at(_last_token(tree))
        self.converter.end_variable_decls()
        self.converter.modifiers_consumed()

    def _local_variables(self, tree: Tree):
        modifiers = _subtrees(tree, "local_modifier")
        self._declaration_begin(modifiers, tree)
        declarators = _subtrees(_subtree(tree, "variable_declarators"))
        self._type_spec(_subtree(tree, "type"), declarators[0])
        for i, declarator in enumerate(declarators):
            name, init = self._declarator(declarator)
            if i == 0:
                self.converter.got_variable_decl(name, init is not None)
            else:
                self.converter.got_subsequent_var(name, init is not None)
            if init is not None:
                self._expression(init)

    def local_class_declaration(self, tree: Tree):
        *modifiers, declaration = _subtrees(tree)
        self._type_declaration(modifiers, declaration, inner=True)

    def empty_statement(self, tree: Tree):
        self._at(_last_token(tree))
        self.converter.got_empty_statement()

    def expression_statement(self, tree: Tree):
        expression = _subtrees(tree)[0]
        self._at(_first_token(expression))
        self.converter.got_statement_expression()
        self._expression(expression)

    def assert_statement(self, tree: Tree):
        self._at(_first_token(tree))
        self.converter.got_assert()
        for expression in _subtrees(tree):
            self._expression(expression)

    def labeled_statement(self, tree: Tree):
        label = _identifiers(tree)[0]
        self._at(label)
        self.converter.got_labelled_statement(str(label))
        self.visit(_subtrees(tree)[0])

    def break_statement(self, tree: Tree):
        self._break_continue(tree, "break")

    def continue_statement(self, tree: Tree):
        self._break_continue(tree, "continue")

    def _break_continue(self, tree: Tree, keyword: str):
        labels = _identifiers(tree)
        self._at(_last_token(tree))
        self.converter.got_break_continue(keyword, str(labels[0]) if labels else None)

    def return_statement(self, tree: Tree):
        expressions = _subtrees(tree)
        if expressions:
            self._at(_first_token(tree))
            self.converter.got_return_statement(True)
            self._expression(expressions[0])
        else:
            self._at(_last_token(tree))
            self.converter.got_return_statement(False)

    def throw_statement(self, tree: Tree):
        self._at(_first_token(tree))
        self.converter.got_throw()
        self._expression(_subtrees(tree)[0])

    def synchronized_statement(self, tree: Tree):
        expression, block = _subtrees(tree)
        self._at(_first_token(tree))
        self.converter.begin_synchronized_block()
        self._expression(expression)
        self.visit(block)
        self._at(_last_token(tree))
        self.converter.end_synchronized_block()

    def do_statement(self, tree: Tree):
        body, condition = _subtrees(tree)
        self._at(_first_token(tree))
        self.converter.begin_do_while()
        self.visit(body)
        self._at(_child_token(tree, "while"))
        self.converter.end_do_while()
        self._expression(condition)

    def while_statement(self, tree: Tree):
        condition, body = _subtrees(tree)
        self._at(_first_token(tree))
        self.converter.begin_while_loop()
        self._expression(condition)
        self.visit(body)

    # ==================== IF ====================

    def if_then_statement(self, tree: Tree):
        self._if(tree)

    def if_then_else_statement(self, tree: Tree):
        self._if(tree)

    def _if(self, tree: Tree):
        self._at(_first_token(tree))
        self.converter.begin_if_stmt()
        self._expression(_subtrees(tree)[0])
        self._if_branches(tree)
        self._at(_last_token(tree))
        self.converter.end_if_stmt()

    def _if_branches(self, tree: Tree):
        """Branches of an if whose condition has been delivered; else-if chains are flattened."""
        branches = _subtrees(tree)[1:]
        self._at(_child_token(tree, ")"))
        self.converter.begin_if_cond_block()
        self.visit(branches[0])
        if len(branches) < 2:
            return
        otherwise = branches[1]
        if otherwise.data in ("if_then_statement", "if_then_else_statement"):
            self._at(_first_token(otherwise))
            self.converter.got_else_if()
            self._expression(_subtrees(otherwise)[0])
            self._if_branches(otherwise)
        else:
            self._at(_child_token(tree, "else"))
            self.converter.begin_if_cond_block()
            self.visit(otherwise)

    # ==================== SWITCH ====================

    def switch_statement(self, tree: Tree):
        expression, block = _subtrees(tree)
        self._at(_first_token(tree))
        self.converter.begin_switch_stmt()
        self._expression(expression)
        self._at(_first_token(block))
        self.converter.begin_switch_block()
        for item in _subtrees(block):
            if item.data == "case_label":
                self._at(_first_token(item))
                self.converter.got_switch_case()
                self._expression(_subtrees(item)[0])
            elif item.data == "default_label":
                self._at(_first_token(item))
                self.converter.got_switch_default()
            else:
                self.visit(item)
        self._at(_last_token(block))
        self.converter.end_switch_block()

    # ==================== FOR ====================

    def for_statement(self, tree: Tree):
        control, body = _subtrees(tree)
        self._at(_first_token(tree))
        self.converter.begin_for_loop()
        if control.data == "enhanced_for_control":
            self._enhanced_for(control)
        else:
            self._basic_for(control)
        self._at(_child_token(tree, ")"))
        self.converter.begin_for_loop_body()
        self.visit(body)

    def _enhanced_for(self, control: Tree):
        self._modifiers(_subtrees(control, "local_modifier"))
        self._type_spec(_subtree(control, "type"))
        name = _identifiers(control)[0]
        self._at(self._after(name))
        self.converter.got_for_init(str(name))
        self.converter.determined_for_loop(True, False)
        self._expression(_subtrees(control)[-1])

    def _basic_for(self, control: Tree):
        init = _subtree(control, "for_init")
        if init is not None:
            declaration = _subtree(init, "local_variable_declaration")
            if declaration is not None:
                self._for_variables(declaration)
            else:
                for expression in _subtrees(_subtree(init, "statement_expression_list")):
                    self._at(_first_token(expression))
                    self.converter.got_for_init_expression()
                    self._expression(expression)

        test = _subtree(control, "for_test")
        self._at(_child_token(control, ";"))
        self.converter.got_for_test(test is not None)
        if test is not None:
            self._expression(test.children[0])

        update = _subtree(control, "for_update")
        if update is None:
            self.converter.got_for_increment(False)
            return
        for expression in _subtrees(_subtree(update, "statement_expression_list")):
            self._at(_first_token(expression))
            self.converter.got_for_increment(True)
            self._expression(expression)

    def _for_variables(self, declaration: Tree):
        self._modifiers(_subtrees(declaration, "local_modifier"))
        declarators = _subtrees(_subtree(declaration, "variable_declarators"))
        self._type_spec(_subtree(declaration, "type"), declarators[0])
        for i, declarator in enumerate(declarators):
            name, init = self._declarator(declarator)
            if i == 0:
                self.converter.got_for_init(name)
                self.converter.determined_for_loop(False, init is not None)
            else:
                self.converter.got_subsequent_for_init(name, init is not None)
            if init is not None:
                self._expression(init)

    # ==================== TRY ====================

    def try_statement(self, tree: Tree):
        self._at(_first_token(tree))
        self.converter.begin_try_catch_stmt(_subtree(tree, "resource_specification") is not None)

        block = _subtree(tree, "block")
        self._at(_first_token(block))
        self.converter.begin_try_block()
        self._statements(block)
        self._at(_last_token(block))
        self.converter.end_try_block()

        for clause in _subtrees(tree, "catch_clause"):
            self._catch(clause)

        finally_clause = _subtree(tree, "finally_clause")
        if finally_clause is not None:
            self._at(_first_token(finally_clause))
            self.converter.got_finally()
            self.visit(_subtree(finally_clause, "block"))

        self._at(_last_token(tree))
        self.converter.end_try_catch_stmt()

    def _catch(self, clause: Tree):
        self._at(_first_token(clause))
        self.converter.got_catch()
        modifiers = _subtrees(clause, "local_modifier")
        catch_type = _subtree(clause, "catch_type")
        self._at(_first_token(modifiers[0] if modifiers else catch_type))
        self.converter.begin_formal_parameter()
        self._modifiers(modifiers)
        for i, class_type in enumerate(_subtrees(catch_type, "class_type")):
            if i > 0:
                self.converter.got_multi_catch()
            self._type_spec(class_type)
        name = _identifiers(clause)[0]
        self._at(name)
        self.converter.got_catch_var_name(str(name))
        self.converter.modifiers_consumed()
        self.visit(_subtree(clause, "block"))

    # ==================== EXPRESSIONS ====================

    def _expression(self, tree: Tree):
        """Bracket an expression with begin/end events and walk it."""
        first, last = _first_token(tree), _last_token(tree)
        self._at(first)
        self.converter.begin_expression(first.start_pos)
        self.visit(tree)
        self._at(last)
        self.converter.end_expression(last.end_pos)

    def _span(self, tree: Tree):
        """Bracket text that is captured but not walked."""
        first, last = _first_token(tree), _last_token(tree)
        self._at(first)
        self.converter.begin_expression(first.start_pos)
        self._at(last)
        self.converter.end_expression(last.end_pos)

    def _operator(self, parts: list) -> tuple[Token, str]:
        tokens = [t for part in parts for t in _tokens(part)]
        return tokens[0], "".join(tokens)

    def binary(self, tree: Tree):
        left, *op, right = tree.children
        token, text = self._operator(op)
        self.visit(left)
        self._at(token)
        self.converter.got_binary_operator(text)
        self.visit(right)

    def assignment(self, tree: Tree):
        target, op, value = tree.children
        token, text = self._operator([op])
        self.visit(target)
        self._at(token)
        self.converter.got_binary_operator(text)
        self.visit(value)

    def instanceof_expression(self, tree: Tree):
        self.visit(tree.children[0])

    def ternary(self, tree: Tree):
        condition, question, then, colon, otherwise = tree.children
        self.visit(condition)
        self._at(question)
        self.converter.got_question_operator(question.start_pos, question.end_pos)
        self.visit(then)
        self._at(colon)
        self.converter.got_question_colon(colon.start_pos, colon.end_pos)
        self.visit(otherwise)

    def pre_inc_dec(self, tree: Tree):
        self._prefix(tree)

    def unary_operation(self, tree: Tree):
        self._prefix(tree)

    def _prefix(self, tree: Tree):
        op, operand = tree.children
        self._at(op)
        self.converter.got_unary_operator(str(op))
        self.visit(operand)

    def post_inc_dec(self, tree: Tree):
        operand, op = tree.children
        self.visit(operand)
        self._at(op)
        self.converter.got_post_operator(str(op))

    def cast_expression(self, tree: Tree):
        self.visit(tree.children[-1])

    def paren_expression(self, tree: Tree):
        self._expression(_subtrees(tree)[0])

    def method_invocation(self, tree: Tree):
        for child in _subtrees(tree):
            if child.data == "arguments":
                self._arguments(child)
            elif child.data != "type_arguments":
                self.visit(child)

    def class_instance_creation(self, tree: Tree):
        for child in _subtrees(tree):
            if child.data == "arguments":
                self._arguments(child)
            elif child.data == "class_body":
                self._anonymous_class_body(child)
            elif child.data not in ("type_arguments", "class_type", "class_type_part"):
                self.visit(child)

    def array_creation_expression(self, tree: Tree):
        for child in _subtrees(tree, "dim_expression", "array_initializer"):
            if child.data == "dim_expression":
                self._expression(_subtrees(child)[0])
            else:
                self.visit(child)

    def array_initializer(self, tree: Tree):
        for element in _subtrees(tree, "variable_initializer"):
            self._expression(element.children[0])

    def array_access(self, tree: Tree):
        array, index = _subtrees(tree)
        self.visit(array)
        self._expression(index)

    def method_reference(self, tree: Tree):
        for child in _subtrees(tree):
            if child.data not in ("type", "type_arguments"):
                self.visit(child)

    def _arguments(self, tree: Tree):
        self._at(_first_token(tree))
        self.converter.begin_argument_list()
        for argument in _subtrees(tree):
            self._expression(argument)
            self._at(self._after(_last_token(argument)))
            self.converter.end_argument()
        self._at(_last_token(tree))
        self.converter.end_argument_list()

    def _anonymous_class_body(self, body: Tree):
        start = _first_token(body)
        self._at(start)
        self.converter.begin_anon_class_body(start.start_pos)
        for member in _subtrees(body):
            self._member(member)
        end = _last_token(body)
        self._at(end)
        self.converter.end_anon_class_body(end.end_pos)

    # ==================== LAMBDAS ====================

    def lambda_expression(self, tree: Tree):
        parameters, body = _subtrees(tree)
        if parameters.data == "lambda_single_parameter":
            name = parameters.children[0]
            self._at(name)
            self.converter.got_lambda_formal_param()
            self.converter.got_lambda_formal_name(str(name))
        else:
            for parameter in _subtrees(parameters, "lambda_parameter"):
                self._lambda_parameter(parameter)

        if body.data == "block":
            start, end = _first_token(body), _last_token(body)
            self._at(start)
            self.converter.begin_lambda(True, start.start_pos)
            self.visit(body)
            self._at(end)
            self.converter.end_lambda(end.end_pos)
        else:
            self._at(_first_token(body))
            self.converter.begin_lambda(False)
            self._expression(body)
            self.converter.end_lambda()

    def _lambda_parameter(self, parameter: Tree):
        self._at(_first_token(parameter))
        self.converter.got_lambda_formal_param()
        self._modifiers(_subtrees(parameter, "local_modifier"))
        type_tree = _subtree(parameter, "type")
        if type_tree is not None:
            self._at(_first_token(type_tree))
            self.converter.got_lambda_formal_type(_first_token(type_tree).start_pos, _last_token(type_tree).end_pos)
        name = _identifiers(parameter)[0]
        self._at(name)
        self.converter.got_lambda_formal_name(str(name))


# ==================== ENTRY POINT ====================

def convert(source: str, context: JavaContext = JavaContext.TOP_LEVEL,
            testing: bool = False, lookahead: int = DEFAULT_LOOKAHEAD) -> ConversionResult:
    """Convert Java source text into Stride Code Elements."""
    parser = get_parser()
    source = preprocess_unicode_escapes(source)
    tree = parser.parse(source, context)
    tokens, comments = parser.lex(source)
    logger.debug("Parsed %d tokens and %d comments", len(tokens), len(comments))

    converter = JavaStrideConverter(source, testing)
    EventWalker(converter, source, tokens, comments, lookahead).run(tree, context)
    return ConversionResult(converter.get_elements(), converter.get_warnings())


def convert_file(path: str, context: JavaContext = JavaContext.TOP_LEVEL,
                 testing: bool = False, lookahead: int = DEFAULT_LOOKAHEAD) -> ConversionResult:
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        source = f.read()
    return convert(source, context, testing, lookahead)
