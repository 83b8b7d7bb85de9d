import pytest

from pseudoasm import (Emitter, Node, Parser, emit, tokenize, var_ref, number,
                       ADD, SUB, MUL, DIV, IF)


def emit_source(code, **kw):
    emitter = Emitter(**kw)
    lines = []
    for ast in Parser(tokenize(code)).parse():
        lines.extend(emitter.emit(ast))
    return lines


def test_assign_from_leaf():
    assert emit_source("x = 5") == ["MOV x, 5"]
    assert emit_source("x = y") == ["MOV x, y"]


def test_assign_from_expression_reads_empty_operand():
    # the Add node has no value of its own
    assert emit_source("x = 1 + 2") == ["MOV x, "]


def test_if_statement():
    assert emit_source("if ( x ) y = 1") == ["IF x == 0 GOTO LABEL", "MOV y, 1"]


def test_if_with_expression_condition():
    assert emit_source("if (a - 1) b = 2") == ["IF  == 0 GOTO LABEL", "MOV b, 2"]


def test_assignment_target_is_not_declared():
    assert not any(line.startswith("DECLARE") for line in emit_source("x = 1 + 2"))


@pytest.mark.parametrize("kind,opcode", [(ADD, "ADD"), (SUB, "SUB"), (MUL, "MUL"), (DIV, "DIV")])
def test_binary_nodes(kind, opcode):
    assert emit(Node(kind, left=var_ref("a"), right=number("2"))) == [f"{opcode} a, 2"]


def test_binary_node_does_not_descend():
    node = Node(ADD, left=var_ref("a"), right=Node(MUL, left=var_ref("b"), right=var_ref("c")))
    assert emit(node) == ["ADD a, "]


def test_leaves():
    assert emit(var_ref("x")) == ["DECLARE x"]
    assert emit(number("42")) == ["PUSH 42"]


def test_nothing_to_emit():
    assert emit(None) == []


def test_several_statements():
    assert emit_source("a = 1\nb = a\nif (b) { c = 3 }") == [
        "MOV a, 1",
        "MOV b, a",
        "IF b == 0 GOTO LABEL",
        "MOV c, 3",
    ]


def test_flatten_nested_expression():
    assert emit_source("x = 1 + 2 * 3", flatten=True) == [
        "MUL t1, 2, 3",
        "ADD t2, 1, t1",
        "MOV x, t2",
    ]


def test_flatten_left_associative_chain():
    assert emit_source("x = 10 - 2 - 3", flatten=True) == [
        "SUB t1, 10, 2",
        "SUB t2, t1, 3",
        "MOV x, t2",
    ]


def test_flatten_leaf_assignment_is_unchanged():
    assert emit_source("x = 5", flatten=True) == ["MOV x, 5"]


def test_flatten_if():
    assert emit_source("if (a - b) c = d * 2", flatten=True) == [
        "SUB t1, a, b",
        "IF t1 == 0 GOTO LABEL",
        "MUL t2, d, 2",
        "MOV c, t2",
    ]


def test_flatten_temporaries_continue_across_statements():
    assert emit_source("x = a + b\ny = (a + b) / 2", flatten=True) == [
        "ADD t1, a, b",
        "MOV x, t1",
        "ADD t2, a, b",
        "DIV t3, t2, 2",
        "MOV y, t3",
    ]


def test_flatten_top_level_binary():
    emitter = Emitter(flatten=True)
    assert emitter.emit(Node(ADD, left=var_ref("a"), right=var_ref("b"))) == ["ADD t1, a, b"]
    assert emitter.emit(number("3")) == ["PUSH 3"]


def test_if_node_built_by_hand():
    node = Node(IF, left=var_ref("c"), right=var_ref("d"))
    assert emit(node) == ["IF c == 0 GOTO LABEL", "DECLARE d"]
