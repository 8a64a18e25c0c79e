"""
Tests for the tree-sitter C/C++ adapter and end-to-end scores.
"""

import pytest
import os
import sys

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from cogscan.core.engine import score_ast
from cogscan.core.functions import find_function_identifier
from cogscan.core.nodes import NodeKind
from cogscan.core.source import Metric
from cogscan.parsers import CppParser, UnsupportedLanguageError, get_parser, list_supported_languages


def scores(code):
    """Map function name to its score for a snippet of C++."""
    ast = CppParser().parse(code, "test.cpp")
    source_file = score_ast(ast, "test.cpp")
    return {
        function.qualified_name: function.get_int(Metric.COGNITIVE_COMPLEXITY)
        for function in source_file.functions
    }


class TestParserRegistry:
    """Tests for parser lookup."""

    def test_get_parser(self):
        assert isinstance(get_parser("cpp"), CppParser)
        assert isinstance(get_parser("C++"), CppParser)
        assert isinstance(get_parser("c"), CppParser)

    def test_unsupported_language(self):
        with pytest.raises(UnsupportedLanguageError):
            get_parser("cobol")

    def test_list_supported_languages(self):
        assert list_supported_languages() == ["c", "cpp"]


class TestTreeShape:
    """Tests for the mapping onto the node vocabulary."""

    def test_function_definition_parts(self):
        ast = CppParser().parse("static int add(int a, int b) { return a + b; }")
        definition = ast.descendants([NodeKind.FUNCTION_DEFINITION])[0]
        kinds = [child.kind for child in definition.children]
        assert kinds[0] is NodeKind.DECL_SPECIFIER_SEQ
        assert kinds[-1] is NodeKind.FUNCTION_BODY
        assert definition.descendants([NodeKind.PARAMETERS_AND_QUALIFIERS])
        assert find_function_identifier(definition).value == "add"

    def test_qualified_name(self):
        ast = CppParser().parse("int Parser::next() { return 0; }")
        definition = ast.descendants([NodeKind.FUNCTION_DEFINITION])[0]
        assert definition.descendants([NodeKind.NESTED_NAME_SPECIFIER])
        assert find_function_identifier(definition).value == "next"

    def test_qualified_return_type_is_not_the_name(self):
        ast = CppParser().parse("std::string name() { return \"\"; }")
        definition = ast.descendants([NodeKind.FUNCTION_DEFINITION])[0]
        assert find_function_identifier(definition).value == "name"

    def test_else_branch_is_wrapped(self):
        ast = CppParser().parse("void f(int a) { if (a) {} else if (a > 1) {} }")
        selections = ast.descendants([NodeKind.SELECTION_STATEMENT])
        assert len(selections) == 2
        inner = selections[1]
        assert inner.parent.kind is NodeKind.STATEMENT
        assert inner.parent.previous_ast_node().kind is NodeKind.ELSE

    def test_block_statements_are_wrapped(self):
        ast = CppParser().parse("void f(int a) { g(); if (a) { } }")
        body = ast.descendants([NodeKind.FUNCTION_BODY])[0]
        assert [child.kind for child in body.children] == [
            NodeKind.OTHER, NodeKind.STATEMENT, NodeKind.STATEMENT, NodeKind.OTHER,
        ]
        selection = ast.descendants([NodeKind.SELECTION_STATEMENT])[0]
        assert selection.parent.kind is NodeKind.STATEMENT
        assert selection.parent.previous_ast_node().kind is NodeKind.STATEMENT

    def test_logical_chain_is_one_node(self):
        ast = CppParser().parse("bool f(bool a, bool b, bool c) { return a && b && c; }")
        assert len(ast.descendants([NodeKind.LOGICAL_AND_EXPRESSION])) == 1

    def test_positions(self):
        ast = CppParser().parse("\nvoid f() {\n  return;\n}\n")
        definition = ast.descendants([NodeKind.FUNCTION_DEFINITION])[0]
        assert definition.start_line == 2
        assert definition.end_line == 4


class TestCppScores:
    """End-to-end scores of C++ snippets."""

    def test_straight_line(self):
        assert scores("int add(int a, int b) { int c = a + b; return c; }") == {"add": 0}

    def test_recursive_factorial(self):
        code = """
        int fact(int n) {
            if (n <= 1)
                return 1;
            return n * fact(n - 1);
        }
        """
        assert scores(code) == {"fact": 2}

    def test_if_in_for(self):
        code = """
        void clamp(int* v, int n) {
            for (int i = 0; i < n; i++) {
                if (v[i] < 0) {
                    v[i] = 0;
                }
            }
        }
        """
        assert scores(code) == {"clamp": 3}

    def test_else_if_chain(self):
        code = """
        int sign(int a) {
            if (a > 0) {
                return 1;
            } else if (a < 0) {
                return -1;
            } else {
                return 0;
            }
        }
        """
        # if +1, two else +1 each, the else-if itself is free
        assert scores(code) == {"sign": 3}

    def test_if_inside_else_block(self):
        code = "void f(int a, int b) { if (a) { } else { if (b) { } } }"
        # if +1, else +1, inner if +1 +1
        assert scores(code) == {"f": 4}

    def test_if_after_statement_in_else_block(self):
        code = """
        void f(int a, int b) {
            if (a) {
            } else {
                g();
                if (b) {
                    while (a) { a--; }
                }
            }
        }
        """
        # if +1, else +1, inner if +1 +1, while +1 +2
        assert scores(code) == {"f": 7}

    def test_long_expression(self):
        terms = " + ".join(["x"] * 600)
        code = f"int sum(int x) {{ return {terms}; }}\nvoid f(int a) {{ if (a) {{}} }}\n"
        assert scores(code) == {"sum": 0, "f": 1}

    def test_logical_operators(self):
        code = "bool f(bool a, bool b, bool c) { return a && b || c; }"
        assert scores(code) == {"f": 2}

    def test_switch_and_loops(self):
        code = """
        void run(int mode) {
            switch (mode) {
                case 1: break;
                default: break;
            }
            while (mode > 0) { mode--; }
            do { mode++; } while (mode < 3);
            for (int x : {1, 2, 3}) { mode += x; }
        }
        """
        assert scores(code) == {"run": 4}

    def test_try_catch(self):
        code = """
        void load() {
            try {
                parse();
            } catch (const std::exception& e) {
                report(e);
            }
        }
        """
        assert scores(code) == {"load": 1}

    def test_lambda_adds_nesting(self):
        code = """
        void apply(int k) {
            auto check = [](int x) {
                if (x > 0) { return true; }
                return false;
            };
        }
        """
        assert scores(code) == {"apply": 2}

    def test_ternary_and_goto(self):
        code = """
        int pick(int a) {
            int r = a > 0 ? 1 : 2;
            goto done;
        done:
            return r;
        }
        """
        assert scores(code) == {"pick": 2}

    def test_method_name_is_qualified(self):
        code = """
        int Tokenizer::next(int depth) {
            if (depth > 0) {
                return next(depth - 1);
            }
            return 0;
        }
        """
        assert scores(code) == {"Tokenizer::next": 2}

    def test_separate_functions(self):
        code = """
        void a(int x) { if (x) {} }
        void b(int x) { for (;;) { if (x) { break; } } }
        """
        assert scores(code) == {"a": 1, "b": 3}

    def test_comments_are_ignored(self):
        code = """
        // if (x) { }
        void quiet() {
            /* while (true) */
            return;
        }
        """
        assert scores(code) == {"quiet": 0}
