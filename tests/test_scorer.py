"""
Tests for the Cognitive Complexity scorer on hand-built syntax trees.
"""

import pytest
import os
import sys

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from cogscan.core.engine import score_ast
from cogscan.core.functions import find_function_identifier, function_name
from cogscan.core.nodes import DESCENDANT_KINDS, AstNode, Category, NodeKind
from cogscan.core.scorer import (
    CognitiveComplexityScorer, NoEnclosingFunctionError, ScoringContext, is_else_if
)
from cogscan.core.source import Metric, SourceFile
from cogscan.core.walker import AstVisitor, AstWalker, SourceCodeBuilderVisitor


def leaf(kind, value):
    return AstNode(kind=kind, value=value)


def punct(value):
    return leaf(NodeKind.OTHER, value)


def ident(name):
    return leaf(NodeKind.IDENTIFIER, name)


def node(kind, *children):
    return AstNode(kind=kind, children=list(children))


def statement(child):
    return node(NodeKind.STATEMENT, child)


def block(*statements):
    return node(NodeKind.OTHER, punct("{"), *map(statement, statements), punct("}"))


def call(name, *args):
    return node(NodeKind.OTHER, ident(name), punct("("), *args, punct(")"))


def if_stmt(condition, then, otherwise=None):
    children = [leaf(NodeKind.IF, "if"), punct("("), condition, punct(")"), then]
    if otherwise is not None:
        children += [leaf(NodeKind.ELSE, "else"), statement(otherwise)]
    return node(NodeKind.SELECTION_STATEMENT, *children)


def for_loop(body):
    return node(NodeKind.ITERATION_STATEMENT, punct("for"), punct("("), punct(";"), punct(";"), punct(")"), body)


def function(name, *body, return_type="void"):
    return node(
        NodeKind.FUNCTION_DEFINITION,
        node(NodeKind.DECL_SPECIFIER_SEQ, ident(return_type)),
        node(
            NodeKind.OTHER,
            ident(name),
            node(NodeKind.PARAMETERS_AND_QUALIFIERS, punct("("), ident("int"), ident("n"), punct(")")),
        ),
        node(NodeKind.FUNCTION_BODY, punct("{"), *map(statement, body), punct("}")),
    )


def unit(*children):
    return node(NodeKind.TRANSLATION_UNIT, *children)


def run(ast, strict=False):
    """Walk ``ast`` with a builder and a scorer, return (file unit, scorer)."""
    scorer = CognitiveComplexityScorer.builder().strict(strict).build()
    walker = AstWalker([SourceCodeBuilderVisitor(), scorer])
    source_file = walker.walk_and_visit(ast, SourceFile(key="test.cpp", name="test.cpp"))
    return source_file, scorer


def function_score(source_file, index=0):
    return source_file.functions[index].get_int(Metric.COGNITIVE_COMPLEXITY)


class TestNodeModel:
    """Tests for node classification and tree queries."""

    def test_categories_are_precomputed(self):
        assert node(NodeKind.SELECTION_STATEMENT).has(Category.NESTING_INCREMENT)
        assert node(NodeKind.LAMBDA_EXPRESSION).has(Category.NESTING_LEVEL)
        assert not node(NodeKind.LAMBDA_EXPRESSION).has(Category.FLAT_INCREMENT)
        assert ident("x").category == Category.DESCENDANT_SCAN
        assert node(NodeKind.FUNCTION_BODY).category == Category.NONE

    def test_descendant_scan_set(self):
        assert DESCENDANT_KINDS == {
            NodeKind.HANDLER,
            NodeKind.ITERATION_STATEMENT,
            NodeKind.LAMBDA_EXPRESSION,
            NodeKind.LOGICAL_AND_EXPRESSION,
            NodeKind.LOGICAL_OR_EXPRESSION,
            NodeKind.SELECTION_STATEMENT,
            NodeKind.ELSE,
            NodeKind.GOTO,
            NodeKind.QUEST,
            NodeKind.IDENTIFIER,
        }

    def test_structurally_equal_nodes_are_distinct(self):
        first, second = ident("x"), ident("x")
        assert first != second
        assert first.index != second.index
        assert len({first, second}) == 2

    def test_descendants_in_document_order(self):
        tree = block(ident("a"), call("b", ident("c")), ident("d"))
        names = [n.value for n in tree.descendants([NodeKind.IDENTIFIER])]
        assert names == ["a", "b", "c", "d"]

    def test_previous_ast_node_climbs_to_parent(self):
        inner = ident("x")
        wrapper = node(NodeKind.STATEMENT, inner)
        keyword = leaf(NodeKind.ELSE, "else")
        node(NodeKind.OTHER, keyword, wrapper)
        assert wrapper.previous_ast_node() is keyword
        assert inner.previous_ast_node() is keyword

    def test_has_ancestor(self):
        inner = ident("x")
        fn = function("f", block(inner))
        assert inner.has_ancestor(NodeKind.FUNCTION_BODY)
        assert inner.has_ancestor(NodeKind.FUNCTION_DEFINITION)
        assert not inner.has_ancestor(NodeKind.PARAMETERS_AND_QUALIFIERS)
        assert not fn.has_ancestor(NodeKind.FUNCTION_DEFINITION)

    def test_token_is_first_leaf(self):
        selection = if_stmt(ident("a"), block())
        assert selection.token.kind is NodeKind.IF
        assert selection.token_value == "if"


class TestScoring:
    """Tests for the scoring rules."""

    def test_straight_line_function_scores_zero(self):
        tree = unit(function("f", node(NodeKind.OTHER, ident("x"), punct("="), ident("y"), punct(";"))))
        source_file, _ = run(tree)
        assert function_score(source_file) == 0

    def test_single_if(self):
        tree = unit(function("f", if_stmt(ident("a"), block())))
        source_file, _ = run(tree)
        assert function_score(source_file) == 1

    def test_if_nested_in_for(self):
        # for: +1, if: +1 and +1 for one level of nesting
        tree = unit(function("f", for_loop(block(if_stmt(ident("a"), block())))))
        source_file, _ = run(tree)
        assert function_score(source_file) == 3

    def test_deep_nesting(self):
        inner = if_stmt(ident("a"), block())
        tree = unit(function("f", for_loop(block(for_loop(block(inner))))))
        source_file, _ = run(tree)
        # 1 + (1 + 1) + (1 + 2)
        assert function_score(source_file) == 6

    def test_else_if_chain_is_flat(self):
        chain = if_stmt(
            ident("a"), block(),
            if_stmt(ident("b"), block(), if_stmt(ident("c"), block())),
        )
        tree = unit(function("f", chain))
        source_file, _ = run(tree)
        # leading if and the two else keywords
        assert function_score(source_file) == 3

    def test_else_if_does_not_add_nesting(self):
        nested = if_stmt(ident("c"), block())
        chain = if_stmt(ident("a"), block(), if_stmt(ident("b"), block(nested)))
        tree = unit(function("f", chain))
        source_file, _ = run(tree)
        # if +1, else +1, else-if 0, nested if +1 +1
        assert function_score(source_file) == 4

    def test_else_if_detection(self):
        continuation = if_stmt(ident("b"), block())
        chain = if_stmt(ident("a"), block(), continuation)
        assert not is_else_if(chain)
        assert is_else_if(continuation)
        assert not is_else_if(ident("x"))

    def test_plain_else_block(self):
        tree = unit(function("f", if_stmt(ident("a"), block(), block())))
        source_file, _ = run(tree)
        assert function_score(source_file) == 2

    def test_if_inside_else_block_is_nested(self):
        inner = if_stmt(ident("b"), block())
        tree = unit(function("f", if_stmt(ident("a"), block(), block(inner))))
        source_file, _ = run(tree)
        assert not is_else_if(inner)
        # if +1, else +1, inner if +1 +1
        assert function_score(source_file) == 4

    def test_if_after_statement_in_else_block(self):
        inner = if_stmt(ident("b"), block(for_loop(block())))
        body = block(call("g"), inner)
        tree = unit(function("f", if_stmt(ident("a"), block(), body)))
        source_file, _ = run(tree)
        assert not is_else_if(inner)
        # if +1, else +1, inner if +1 +1, for +1 +2
        assert function_score(source_file) == 7

    def test_logical_operators_are_flat(self):
        condition = node(
            NodeKind.LOGICAL_OR_EXPRESSION,
            node(NodeKind.LOGICAL_AND_EXPRESSION, ident("a"), punct("&&"), ident("b")),
            punct("||"),
            ident("c"),
        )
        tree = unit(function("f", for_loop(block(if_stmt(condition, block())))))
        source_file, _ = run(tree)
        # for 1, if 1 + 1, || 1, && 1
        assert function_score(source_file) == 5

    def test_lambda_nests_without_increment(self):
        lam = node(NodeKind.LAMBDA_EXPRESSION, punct("["), punct("]"), block(if_stmt(ident("a"), block())))
        tree = unit(function("f", lam))
        source_file, _ = run(tree)
        assert function_score(source_file) == 2

    def test_ternary_and_goto(self):
        ternary = node(NodeKind.OTHER, ident("a"), leaf(NodeKind.QUEST, "?"), ident("b"), punct(":"), ident("c"))
        jump = node(NodeKind.OTHER, leaf(NodeKind.GOTO, "goto"), ident("done"), punct(";"))
        tree = unit(function("f", if_stmt(ident("x"), block(ternary)), jump))
        source_file, _ = run(tree)
        # if 1, ? 1 + 1, goto 1
        assert function_score(source_file) == 4

    def test_handler(self):
        handler = node(NodeKind.HANDLER, punct("catch"), punct("("), punct("..."), punct(")"), block())
        tree = unit(function("f", for_loop(block(handler))))
        source_file, _ = run(tree)
        assert function_score(source_file) == 3


class TestRecursion:
    """Tests for lexical recursion detection."""

    def test_recursive_call(self):
        tree = unit(function("f", call("f", ident("n"))))
        source_file, _ = run(tree)
        assert function_score(source_file) == 1

    def test_each_occurrence_counts(self):
        tree = unit(function("f", call("f", ident("n")), call("f", ident("n"))))
        source_file, _ = run(tree)
        assert function_score(source_file) == 2

    def test_recursion_is_independent_of_nesting(self):
        body = for_loop(block(if_stmt(ident("a"), block(call("f")))))
        tree = unit(function("f", body))
        source_file, _ = run(tree)
        assert function_score(source_file) == 4

    def test_declaration_name_is_not_recursion(self):
        tree = unit(function("f", call("g")))
        source_file, _ = run(tree)
        assert function_score(source_file) == 0

    def test_sequential_functions_use_their_own_name(self):
        tree = unit(
            function("f", call("g")),
            function("g", call("f")),
        )
        source_file, _ = run(tree)
        assert function_score(source_file, 0) == 0
        assert function_score(source_file, 1) == 0

    def test_identifier_before_any_function_is_skipped(self):
        tree = unit(node(NodeKind.OTHER, ident("x"), punct(";")), function("f", if_stmt(ident("a"), block())))
        source_file, _ = run(tree)
        assert source_file.aggregate(Metric.COGNITIVE_COMPLEXITY) == 1

    def test_strict_mode_raises_outside_function(self):
        tree = unit(node(NodeKind.OTHER, ident("x"), punct(";")), function("f"))
        with pytest.raises(NoEnclosingFunctionError):
            run(tree, strict=True)


class TestTraversal:
    """Tests for deduplication and pass state."""

    def test_every_node_scored_once(self):
        body = for_loop(block(if_stmt(ident("a"), block(call("g")), block())))
        fn = function("f", body)
        tree = unit(fn)
        _, scorer = run(tree)
        expected = {n.index for n in tree.descendants(DESCENDANT_KINDS)} | {fn.index}
        assert scorer.context.visited == expected

    def test_nesting_returns_to_zero(self):
        body = for_loop(block(for_loop(block(if_stmt(ident("a"), block())))))
        _, scorer = run(unit(function("f", body)))
        assert scorer.context.nesting == 0

    def test_repeated_delivery_does_not_double_count(self):
        statement = if_stmt(ident("a"), block())
        tree = unit(function("f", for_loop(block(statement))))
        source_file, scorer = run(tree)
        before = function_score(source_file)
        scorer.visit_node(statement)
        scorer.visit_node(tree.children[0])
        assert function_score(source_file) == before == 3

    def test_visit_file_resets_context(self):
        scorer = CognitiveComplexityScorer()
        scorer.context.nesting = 2
        scorer.context.visited.add(1)
        scorer.visit_file(None)
        assert scorer.context == ScoringContext()

    def test_file_score_is_sum_of_functions(self):
        tree = unit(
            function("f", if_stmt(ident("a"), block())),
            function("g", for_loop(block(if_stmt(ident("b"), block())))),
        )
        source_file, _ = run(tree)
        assert [function_score(source_file, i) for i in range(2)] == [1, 3]
        assert source_file.aggregate(Metric.COGNITIVE_COMPLEXITY) == 4

    def test_deep_tree_is_walked_without_recursion(self):
        expression = ident("a")
        for _ in range(sys.getrecursionlimit() * 2):
            expression = node(NodeKind.OTHER, expression, punct("+"), ident("a"))
        tree = unit(function("f", expression), function("g", if_stmt(ident("b"), block())))
        source_file, scorer = run(tree)
        assert [function_score(source_file, i) for i in range(2)] == [0, 1]
        assert scorer.context.nesting == 0

    def test_walker_enter_and_leave_order(self):
        events = []

        class Recorder(AstVisitor):
            def init(self):
                self.subscribe_to(NodeKind.SELECTION_STATEMENT, NodeKind.ITERATION_STATEMENT)

            def visit_node(self, node):
                events.append(("visit", node.kind))

            def leave_node(self, node):
                events.append(("leave", node.kind))

        tree = unit(function("f", for_loop(block(if_stmt(ident("a"), block()))), if_stmt(ident("b"), block())))
        AstWalker([Recorder()]).walk_and_visit(tree, SourceFile(key="t.cpp", name="t.cpp"))
        assert events == [
            ("visit", NodeKind.ITERATION_STATEMENT),
            ("visit", NodeKind.SELECTION_STATEMENT),
            ("leave", NodeKind.SELECTION_STATEMENT),
            ("leave", NodeKind.ITERATION_STATEMENT),
            ("visit", NodeKind.SELECTION_STATEMENT),
            ("leave", NodeKind.SELECTION_STATEMENT),
        ]

    def test_score_ast_without_tree(self):
        source_file = score_ast(None, "empty.cpp")
        assert source_file.functions == []
        assert source_file.aggregate(Metric.COGNITIVE_COMPLEXITY) == 0


class TestBuilder:
    """Tests for scorer construction."""

    def test_default_subscriptions(self):
        scorer = CognitiveComplexityScorer.builder().build()
        scorer.init()
        assert NodeKind.FUNCTION_DEFINITION in scorer.subscriptions
        assert set(DESCENDANT_KINDS) <= set(scorer.subscriptions)

    def test_subscribe_to_all_replaces(self):
        scorer = (
            CognitiveComplexityScorer.builder()
            .subscribe_to_all([NodeKind.FUNCTION_DEFINITION])
            .set_metric(Metric.FUNCTIONS)
            .build()
        )
        scorer.init()
        assert scorer.subscriptions == [NodeKind.FUNCTION_DEFINITION]
        assert scorer.metric is Metric.FUNCTIONS

    def test_subscribe_to_adds(self):
        scorer = CognitiveComplexityScorer.builder().subscribe_to(NodeKind.STATEMENT).build()
        assert NodeKind.STATEMENT in scorer.kinds
        assert NodeKind.IDENTIFIER in scorer.kinds

    def test_function_only_subscription_still_scores_whole_body(self):
        scorer = CognitiveComplexityScorer.builder().subscribe_to_all([NodeKind.FUNCTION_DEFINITION]).build()
        walker = AstWalker([SourceCodeBuilderVisitor(), scorer])
        tree = unit(function("f", for_loop(block(if_stmt(ident("a"), block())))))
        source_file = walker.walk_and_visit(tree, SourceFile(key="t.cpp", name="t.cpp"))
        assert function_score(source_file) == 3


class TestFunctionIdentifier:
    """Tests for locating a function's declared name."""

    def test_skips_return_type_and_parameters(self):
        fn = function("run", return_type="Result")
        assert find_function_identifier(fn).value == "run"

    def test_skips_scope_qualifier(self):
        qualified = node(
            NodeKind.OTHER,
            node(NodeKind.NESTED_NAME_SPECIFIER, ident("Parser"), punct("::")),
            ident("run"),
        )
        fn = node(
            NodeKind.FUNCTION_DEFINITION,
            node(NodeKind.DECL_SPECIFIER_SEQ, ident("int")),
            node(NodeKind.OTHER, qualified, node(NodeKind.PARAMETERS_AND_QUALIFIERS, punct("("), punct(")"))),
            node(NodeKind.FUNCTION_BODY, punct("{"), punct("}")),
        )
        assert find_function_identifier(fn).value == "run"
        assert function_name(fn) == "Parser::run"

    def test_falls_back_to_previous(self):
        previous = ident("outer")
        fn = node(
            NodeKind.FUNCTION_DEFINITION,
            node(NodeKind.OTHER, punct("operator"), punct("()"), node(NodeKind.PARAMETERS_AND_QUALIFIERS)),
            node(NodeKind.FUNCTION_BODY, punct("{"), ident("x"), punct("}")),
        )
        assert find_function_identifier(fn, previous) is previous
        assert find_function_identifier(fn) is None
        assert function_name(fn) == "<anonymous>"
