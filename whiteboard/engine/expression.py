"""
expression.py — Sandboxed evaluator for plotted equations.

Equations arrive as untrusted text from the agent ("sin(x)", "y = x^2 - 3",
"2x + 1"). They are tokenized and parsed by a small recursive-descent parser
into an expression tree that is evaluated once per sample. Nothing is ever
compiled or executed as Python code.

Grammar (``^`` is right-associative and binds tighter than unary minus):

    expr    := term (("+" | "-") term)*
    term    := unary (("*" | "/") unary | <implicit> power)*
    unary   := ("+" | "-") unary | power
    power   := atom ("^" unary)?
    atom    := NUMBER | "x" | "pi" | FUNC "(" expr ")" | "(" expr ")"
    FUNC    := "sin" | "cos" | "tan"

Implicit multiplication covers the forms agents commonly write: ``2x``,
``3sin(x)``, ``2(x + 1)`` and ``(x + 1)(x - 1)``.
"""

import math
import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Union

from whiteboard.errors import ExpressionError


FUNCTIONS: Dict[str, Callable[[float], float]] = {
    "sin": math.sin,
    "cos": math.cos,
    "tan": math.tan,
}

CONSTANTS: Dict[str, float] = {
    "pi": math.pi,
}

_TOKEN_RE = re.compile(
    r"\s*(?:(?P<number>\d+\.\d*|\.\d+|\d+)|(?P<name>[a-z]+)|(?P<op>[-+*/^()]))"
)


# =============================================================================
# TOKENS
# =============================================================================

@dataclass(frozen=True)
class Token:
    """A lexical token."""
    kind: str           # "number", "name", "op" or "end"
    value: str
    position: int


def tokenize(text: str) -> List[Token]:
    """
    Split an expression into tokens.

    Args:
        text: Expression source, already lower-cased

    Returns:
        Token list terminated by an "end" token

    Raises:
        ExpressionError: On any character outside the supported alphabet
    """
    tokens: List[Token] = []
    pos = 0
    stripped = text.rstrip()
    while pos < len(stripped):
        match = _TOKEN_RE.match(stripped, pos)
        if not match:
            raise ExpressionError(f"Unexpected character {stripped[pos]!r} at {pos}", text)
        kind = match.lastgroup
        tokens.append(Token(kind=kind, value=match.group(kind), position=match.start(kind)))
        pos = match.end()
    tokens.append(Token(kind="end", value="", position=len(stripped)))
    return tokens


# =============================================================================
# EXPRESSION TREE
# =============================================================================

@dataclass(frozen=True)
class Number:
    value: float


@dataclass(frozen=True)
class Variable:
    pass


@dataclass(frozen=True)
class UnaryOp:
    op: str
    operand: "Node"


@dataclass(frozen=True)
class BinaryOp:
    op: str
    left: "Node"
    right: "Node"


@dataclass(frozen=True)
class Call:
    func: str
    argument: "Node"


Node = Union[Number, Variable, UnaryOp, BinaryOp, Call]


def _evaluate(node: Node, x: float) -> float:
    if isinstance(node, Number):
        return node.value
    if isinstance(node, Variable):
        return x
    if isinstance(node, UnaryOp):
        value = _evaluate(node.operand, x)
        return -value if node.op == "-" else value
    if isinstance(node, Call):
        return FUNCTIONS[node.func](_evaluate(node.argument, x))

    left = _evaluate(node.left, x)
    right = _evaluate(node.right, x)
    if node.op == "+":
        return left + right
    if node.op == "-":
        return left - right
    if node.op == "*":
        return left * right
    if node.op == "/":
        return left / right
    return math.pow(left, right)


# =============================================================================
# PARSER
# =============================================================================

class _Parser:
    """Recursive-descent parser over a token list."""

    def __init__(self, source: str, tokens: List[Token]):
        self.source = source
        self.tokens = tokens
        self.index = 0

    @property
    def current(self) -> Token:
        return self.tokens[self.index]

    def _advance(self) -> Token:
        token = self.tokens[self.index]
        self.index += 1
        return token

    def _expect(self, value: str) -> None:
        if self.current.value != value:
            raise ExpressionError(
                f"Expected {value!r} at {self.current.position}", self.source
            )
        self._advance()

    def _starts_atom(self) -> bool:
        token = self.current
        return token.kind in ("number", "name") or token.value == "("

    def parse(self) -> Node:
        node = self._expr()
        if self.current.kind != "end":
            raise ExpressionError(
                f"Unexpected {self.current.value!r} at {self.current.position}",
                self.source,
            )
        return node

    def _expr(self) -> Node:
        node = self._term()
        while self.current.value in ("+", "-"):
            op = self._advance().value
            node = BinaryOp(op, node, self._term())
        return node

    def _term(self) -> Node:
        node = self._unary()
        while True:
            if self.current.value in ("*", "/"):
                op = self._advance().value
                node = BinaryOp(op, node, self._unary())
            elif self._starts_atom():
                node = BinaryOp("*", node, self._power())
            else:
                return node

    def _unary(self) -> Node:
        if self.current.value in ("+", "-"):
            op = self._advance().value
            return UnaryOp(op, self._unary())
        return self._power()

    def _power(self) -> Node:
        base = self._atom()
        if self.current.value == "^":
            self._advance()
            return BinaryOp("^", base, self._unary())
        return base

    def _atom(self) -> Node:
        token = self.current

        if token.kind == "number":
            self._advance()
            return Number(float(token.value))

        if token.kind == "name":
            self._advance()
            if token.value == "x":
                return Variable()
            if token.value in CONSTANTS:
                return Number(CONSTANTS[token.value])
            if token.value in FUNCTIONS:
                self._expect("(")
                argument = self._expr()
                self._expect(")")
                return Call(token.value, argument)
            raise ExpressionError(f"Unknown name {token.value!r}", self.source)

        if token.value == "(":
            self._advance()
            node = self._expr()
            self._expect(")")
            return node

        raise ExpressionError(
            f"Unexpected {token.value or 'end of input'!r} at {token.position}",
            self.source,
        )


# =============================================================================
# PUBLIC API
# =============================================================================

class Expression:
    """A parsed single-variable expression."""

    def __init__(self, source: str, tree: Node):
        self.source = source
        self.tree = tree

    def evaluate(self, x: float) -> Optional[float]:
        """
        Evaluate at ``x``.

        Returns None where the expression is undefined (division by zero,
        domain errors, overflow or a non-finite result).
        """
        try:
            value = _evaluate(self.tree, x)
        except (ZeroDivisionError, ValueError, OverflowError):
            return None
        if math.isnan(value) or math.isinf(value):
            return None
        return value

    def __repr__(self) -> str:
        return f"Expression({self.source!r})"


def normalize_equation(equation: str) -> str:
    """Strip a left-hand side such as ``y =`` or ``f(x) =`` and lower-case."""
    text = equation.strip().lower()
    if "=" in text:
        text = text.rsplit("=", 1)[1]
    return text.strip()


def parse_expression(equation: str) -> Expression:
    """
    Parse an equation into an evaluable Expression.

    Args:
        equation: Equation text, with or without a left-hand side

    Returns:
        Parsed Expression

    Raises:
        ExpressionError: If the text is empty or not a valid expression
    """
    source = normalize_equation(equation)
    if not source:
        raise ExpressionError("Empty expression", equation)
    return Expression(source, _Parser(source, tokenize(source)).parse())


def evaluate(equation: str, x: float) -> Optional[float]:
    """Parse and evaluate ``equation`` at a single ``x``."""
    return parse_expression(equation).evaluate(x)
