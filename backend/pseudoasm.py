#!/usr/bin/env python3
"""
pseudoasm.py
Toy translator for a tiny imperative language (lexer → recursive-descent parser
→ AST → pseudo-assembly emitter).

Statements are `name = expression` and `if ( expression ) name = expression`.
Each statement is parsed, emitted and thrown away before the next one is read.
"""

import argparse
import re
import sys
from collections import namedtuple

# =====================================================
# ERRORS
# =====================================================
def error(phase, msg, lineno=None):
    if lineno is not None:
        return f"{phase} error (line {lineno}): {msg}"
    return f"{phase} error: {msg}"


class UnexpectedToken(SyntaxError):
    """The parser needed one thing at the cursor and found another."""

    def __init__(self, expected, token):
        self.expected = expected
        self.token = token
        got = 'end of input' if token.kind == EOF else f"{token.kind} {token.text!r}"
        super().__init__(error("Syntax", f"expected {expected}, got {got}", token.lineno))


class MalformedLexeme(SyntaxError):
    # never raised: every character maps to some token
    pass

# =====================================================
# LEXER
# =====================================================
Token = namedtuple('Token', ['kind', 'text', 'lineno'])

IDENTIFIER = 'IDENTIFIER'
NUMBER = 'NUMBER'
OPERATOR = 'OPERATOR'
ASSIGN = 'ASSIGN'
PAREN_OPEN = 'PAREN_OPEN'
PAREN_CLOSE = 'PAREN_CLOSE'
KEYWORD = 'KEYWORD'      # `if` is lexed as IDENTIFIER, see Parser.parse_statement
UNKNOWN = 'UNKNOWN'
EOF = 'EOF'


class Lexer:
    # order matters: first matching alternative wins
    token_specification = [
        ("NEWLINE",     r'\n'),
        ("SKIP",        r'[ \t\r\f\v]+'),
        ("IDENTIFIER",  r'[A-Za-z][A-Za-z0-9]*'),
        ("NUMBER",      r'[0-9]+'),
        ("OPERATOR",    r'[+\-*/]'),
        ("ASSIGN",      r'='),
        ("PAREN_OPEN",  r'\('),
        ("PAREN_CLOSE", r'\)'),
        ("BRACE",       r'[{}]'),
        ("UNKNOWN",     r'.'),
    ]
    tok_regex = '|'.join(f'(?P<{n}>{p})' for n, p in token_specification)
    master_re = re.compile(tok_regex, re.DOTALL)

    def __init__(self, code):
        self.code = code
        self.lineno = 1
        self.tokens = []
        self._tokenize()

    def _tokenize(self):
        for mo in self.master_re.finditer(self.code):
            kind = mo.lastgroup
            val = mo.group()
            if kind == "NEWLINE":
                self.lineno += 1
            elif kind == "SKIP" or kind == "BRACE":
                pass
            else:
                self.tokens.append(Token(kind, val, self.lineno))


def tokenize(code):
    return list(Lexer(code).tokens)

# =====================================================
# AST NODES
# =====================================================
VAR_REF = 'VarRef'
ASSIGN_NODE = 'Assign'
ADD = 'Add'
SUB = 'Sub'
MUL = 'Mul'
DIV = 'Div'
IF = 'If'
NUMBER_LITERAL = 'NumberLiteral'

BINARY_KINDS = {'+': ADD, '-': SUB, '*': MUL, '/': DIV}


class Node:
    """One AST node. Leaves carry `value`; binary and If nodes leave it empty.

    Assign keeps the target name in `value` and the target VarRef in `left`.
    Equality ignores `lineno`.
    """

    def __init__(self, kind, value='', left=None, right=None, lineno=None):
        self.kind = kind
        self.value = value
        self.left = left
        self.right = right
        self.lineno = lineno

    def __eq__(self, other):
        if not isinstance(other, Node):
            return NotImplemented
        return (self.kind, self.value, self.left, self.right) == \
               (other.kind, other.value, other.left, other.right)

    def __repr__(self):
        if self.kind in (VAR_REF, NUMBER_LITERAL):
            return f"{self.kind}({self.value})"
        return f"{self.kind}({self.left!r}, {self.right!r})"


def var_ref(name, lineno=None):
    return Node(VAR_REF, name, lineno=lineno)


def number(text, lineno=None):
    return Node(NUMBER_LITERAL, text, lineno=lineno)

# =====================================================
# PARSER (recursive-descent)
# =====================================================
class Parser:
    def __init__(self, tokens, strict_targets=False):
        self.tokens = tokens
        self.pos = 0
        self.strict_targets = strict_targets

    def peek(self):
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        last = self.tokens[-1].lineno if self.tokens else None
        return Token(EOF, '', last)

    def advance(self):
        tok = self.peek()
        self.pos += 1
        return tok

    def expect(self, kind, what):
        tok = self.peek()
        if tok.kind != kind:
            raise UnexpectedToken(what, tok)
        return self.advance()

    def at_end(self):
        return self.pos >= len(self.tokens)

    def parse(self):
        while not self.at_end():
            yield self.parse_statement()

    def parse_statement(self):
        tok = self.peek()
        if tok.kind == IDENTIFIER and tok.text == 'if':
            return self.if_statement()
        return self.assignment()

    def if_statement(self):
        tok = self.advance()  # if
        self.expect(PAREN_OPEN, "'(' after if")
        cond = self.expression()
        self.expect(PAREN_CLOSE, "')' after if condition")
        # exactly one guarded statement, and it is always an assignment
        body = self.assignment()
        return Node(IF, left=cond, right=body, lineno=tok.lineno)

    def assignment(self):
        target = self.peek()
        if target.kind == EOF:
            raise UnexpectedToken("assignment target", target)
        if self.strict_targets and target.kind != IDENTIFIER:
            raise UnexpectedToken("identifier as assignment target", target)
        self.advance()
        self.expect(ASSIGN, "'=' after assignment target")
        expr = self.expression()
        return Node(ASSIGN_NODE, target.text,
                    left=var_ref(target.text, target.lineno), right=expr,
                    lineno=target.lineno)

    # Precedence climbing by iteration: each loop folds the tree built so far
    # into the left child of a new node, which keeps operators left-associative.
    def expression(self):
        node = self.term()
        while self._at_operator('+', '-'):
            op = self.advance()
            right = self.term()
            node = Node(BINARY_KINDS[op.text], left=node, right=right, lineno=op.lineno)
        return node

    def term(self):
        node = self.factor()
        while self._at_operator('*', '/'):
            op = self.advance()
            right = self.factor()
            node = Node(BINARY_KINDS[op.text], left=node, right=right, lineno=op.lineno)
        return node

    def factor(self):
        tok = self.peek()
        if tok.kind == NUMBER:
            self.advance()
            return number(tok.text, tok.lineno)
        if tok.kind == IDENTIFIER:
            self.advance()
            return var_ref(tok.text, tok.lineno)
        if tok.kind == PAREN_OPEN:
            self.advance()
            node = self.expression()
            self.expect(PAREN_CLOSE, "')' to close parenthesized expression")
            return node
        raise UnexpectedToken("number, identifier or '('", tok)

    def _at_operator(self, *ops):
        tok = self.peek()
        return tok.kind == OPERATOR and tok.text in ops

# =====================================================
# EMITTER
# =====================================================
OPCODES = {ADD: 'ADD', SUB: 'SUB', MUL: 'MUL', DIV: 'DIV'}


def _value(node):
    return node.value if node is not None else ''


class Emitter:
    """Turns one statement tree into pseudo-assembly lines.

    The default mode prints operands straight from the children's `value`
    fields, so a nested operand such as the `Mul` in `a + b * c` prints as an
    empty string. With `flatten=True` nested expressions are lowered first
    into temporaries (t1, t2, ...) and the temporary is used as the operand.
    """

    def __init__(self, flatten=False):
        self.flatten = flatten
        self.temp_count = 0

    def new_temp(self):
        self.temp_count += 1
        return f"t{self.temp_count}"

    def emit(self, node):
        lines = []
        if node is not None:
            self._emit(node, lines)
        return lines

    def _emit(self, node, lines):
        if node.kind == ASSIGN_NODE:
            lines.append(f"MOV {_value(node.left)}, {self._operand(node.right, lines)}")
        elif node.kind in OPCODES:
            if self.flatten:
                self._operand(node, lines)
            else:
                lines.append(f"{OPCODES[node.kind]} {_value(node.left)}, {_value(node.right)}")
        elif node.kind == VAR_REF:
            lines.append(f"DECLARE {node.value}")
        elif node.kind == NUMBER_LITERAL:
            lines.append(f"PUSH {node.value}")
        elif node.kind == IF:
            lines.append(f"IF {self._operand(node.left, lines)} == 0 GOTO LABEL")
            self._emit(node.right, lines)

    def _operand(self, node, lines):
        if not self.flatten or node is None or node.kind not in OPCODES:
            return _value(node)
        a = self._operand(node.left, lines)
        b = self._operand(node.right, lines)
        dest = self.new_temp()
        lines.append(f"{OPCODES[node.kind]} {dest}, {a}, {b}")
        return dest


def emit(node):
    return Emitter().emit(node)

# =====================================================
# DRIVER
# =====================================================
def compile_source(code, flatten=False, strict_targets=False):
    result = {
        'tokens': [],
        'ast': [],
        'asm': [],
        'errors': [],
    }

    toks = tokenize(code)
    result['tokens'] = toks

    parser = Parser(toks, strict_targets=strict_targets)
    emitter = Emitter(flatten=flatten)
    try:
        for ast in parser.parse():
            result['ast'].append(ast)
            result['asm'].extend(emitter.emit(ast))
    except UnexpectedToken as e:
        result['errors'].append(str(e))

    return result


def format_token(tok):
    return f"{tok.lineno}: {tok.kind} {tok.text!r}"


def main(argv=None):
    ap = argparse.ArgumentParser(prog='pseudoasm',
                                 description="Translate a toy program into pseudo-assembly.")
    ap.add_argument('path', nargs='?', default='input.txt')
    ap.add_argument('--tokens', action='store_true', help="print the raw token list first")
    ap.add_argument('--ast', action='store_true', help="print each statement tree before its code")
    ap.add_argument('--flatten', action='store_true', help="lower nested expressions into temporaries")
    ap.add_argument('--strict-targets', action='store_true',
                    help="reject assignment targets that are not identifiers")
    args = ap.parse_args(argv)

    try:
        with open(args.path) as f:
            code = f.read()
    except OSError as e:
        print(f"Error opening file: {e}", file=sys.stderr)
        return 2

    toks = tokenize(code)
    if args.tokens:
        for tok in toks:
            print(format_token(tok))

    parser = Parser(toks, strict_targets=args.strict_targets)
    emitter = Emitter(flatten=args.flatten)
    try:
        for ast in parser.parse():
            if args.ast:
                print(f"; {ast!r}")
            for line in emitter.emit(ast):
                print(line)
    except UnexpectedToken as e:
        print(e, file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
