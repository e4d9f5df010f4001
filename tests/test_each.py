"""Tests for {{each}} loops."""

import pytest

from tmplc import Compiler, CompilerConfig, TemplateCompileError

from conftest import tree


def test_key_and_value(render):
    node = ["each", "(k,v) [10,20]", ["=", "k"], ":", ["=", "v"], ";"]
    assert render(node) == "0:10;1:20;"


def test_empty_container(render):
    assert render(["each", "(k, v) []", ["=", "v"]]) == ""


def test_none_container(render):
    assert render(["each", "items", "x"], data={"items": None}) == ""


def test_mapping_container(render):
    node = ["each", "(name, score) scores", ["=", "name"], "=", ["=", "score"], " "]
    assert render(node, data={"scores": {"ada": 3, "bob": 1}}) == "ada=3 bob=1 "


def test_default_variable_names(render):
    node = ["each", "letters", ["=", "index"], ["=", "value"]]
    assert render(node, data={"letters": "ab"}) == "0a1b"


def test_key_only_header(render):
    node = ["each", "(i) items", ["=", "i"], ["=", "value"]]
    assert render(node, data={"items": ["x", "y"]}) == "0x1y"


def test_configured_default_names(registry):
    config = CompilerConfig(default_key_name="n", default_value_name="item")
    template = Compiler(config=config, registry=registry).compile(
        tree(["each", "things", ["=", "n"], ["=", "item"]])
    )
    assert template.apply({"things": ["a"]}) == "0a"


def test_body_sees_data_and_options(render):
    node = ["each", "(i, x) items", ["=", "prefix"], ["=", "x"], ["=", "sep"]]
    out = render(node, data={"items": [1, 2], "prefix": "#"}, options={"sep": ","})
    assert out == "#1,#2,"


def test_loop_variables_shadow_data(render):
    node = ["each", "(i, name) names", ["=", "name"]]
    assert render(node, "/", ["=", "name"], data={"names": ["a", "b"], "name": "outer"}) == "ab/outer"


def test_literal_only_body(render):
    assert render(["each", "range(3)", "*"]) == "***"


def test_empty_body(render):
    assert render(["each", "range(3)"]) == ""


def test_nested_loops(render):
    node = [
        "each",
        "(i, row) rows",
        ["each", "(j, cell) row", ["=", "i"], ["=", "j"], ["=", "cell"], " "],
        "| ",
    ]
    out = render(node, data={"rows": [["a", "b"], ["c"]]})
    assert out == "00a 01b | 10c | "


def test_inner_loop_shadows_outer_names(render):
    node = ["each", "(i, x) outer", ["each", "(i, y) inner", ["=", "i"], ["=", "x"], ["=", "y"]], ";"]
    out = render(node, data={"outer": ["A", "B"], "inner": ["p", "q"]})
    assert out == "0Ap1Aq;0Bp1Bq;"


def test_sibling_loops_do_not_interfere(render):
    first = ["each", "(i, x) a", ["=", "x"]]
    second = ["each", "(i, x) b", ["=", "x"]]
    out = render(first, "|", second, "|", ["=", "x"], data={"a": [1, 2], "b": [3], "x": "top"})
    assert out == "12|3|top"


def test_substitution_after_loop_uses_fresh_value(render):
    node = ["each", "(i, v) items", ["=", "v"]]
    assert render(["=", "a"], node, ["=", "b"], data={"a": "A", "items": [1, 2], "b": "B"}) == "A12B"


def test_loop_inside_conditional(render):
    node = ["if", "items", ["each", "items", ["=", "value"]], ["else", ""], "empty"]
    assert render(node, data={"items": [1, 2]}) == "12"
    assert render(node, data={"items": []}) == "empty"


def test_conditional_inside_loop(render):
    node = ["each", "(i, n) nums", ["if", "n % 2", "odd", ["else", ""], "even"], " "]
    assert render(node, data={"nums": [1, 2]}) == "odd even "


def test_thunk_inside_loop_gets_ambient_arguments(render):
    node = ["each", "(i, f) funcs", ["=", "f"]]
    out = render(node, data={"funcs": [lambda data: data["tag"]], "tag": "T"})
    assert out == "T"


def test_lambda_sees_loop_variables(render):
    node = ["each", "(k, rows) tables", ["=", "[r[k] for r in sorted(rows, key=lambda r: r[k])]"], ";"]
    assert render(node, data={"tables": {"a": [{"a": 2}, {"a": 1}]}}) == "[1, 2];"


def test_container_evaluated_once(render):
    calls = []

    def items():
        calls.append(1)
        return ["a", "b"]

    assert render(["each", "items()", ["=", "value"]], data={"items": items}) == "ab"
    assert calls == [1]


def test_custom_iterate_collaborator(registry):
    def reversed_iterate(container, fn):
        for index, item in reversed(list(enumerate(container))):
            fn(index, item)

    template = Compiler(registry=registry, iterate=reversed_iterate).compile(
        tree(["each", "(i, x) items", ["=", "x"]])
    )
    assert template.apply({"items": "abc"}) == "cba"


@pytest.mark.parametrize("header", ["", "   "])
def test_malformed_header(header):
    from tmplc import compile_template

    with pytest.raises(TemplateCompileError, match="Malformed"):
        compile_template(tree(["each", header, "x"]))


@pytest.mark.parametrize("header", ["(for, v) items", "(_tmpl_var0, v) items", "(k, None) items"])
def test_invalid_variable_names(header):
    from tmplc import compile_template

    with pytest.raises(TemplateCompileError, match="variable name"):
        compile_template(tree(["each", header, "x"]))


def test_parenthesised_names_without_container_are_the_container():
    from tmplc import compile_template

    template = compile_template(tree(["each", "(k, v)", "x"]))
    with pytest.raises(NameError):
        template.apply()
