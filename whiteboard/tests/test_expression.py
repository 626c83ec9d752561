"""Tests for the sandboxed equation evaluator."""

import math

import pytest

from whiteboard.engine.expression import evaluate, normalize_equation, parse_expression, tokenize
from whiteboard.errors import ExpressionError


class TestParsing:
    """Tests for parsing equation text."""

    @pytest.mark.parametrize(
        "equation, x, expected",
        [
            ("x^2", 3, 9),
            ("y = 2x + 1", 2, 5),
            ("f(x) = 3sin(x)", math.pi / 2, 3),
            ("2(x + 1)", 1, 4),
            ("(x + 1)(x - 1)", 3, 8),
            ("-x^2", 2, -4),
            ("2^3^2", 0, 512),
            ("pi", 0, math.pi),
            ("cos(0) + tan(0)", 0, 1),
            ("10 / 4 - 1.5", 0, 1),
        ],
    )
    def test_evaluates(self, equation, x, expected):
        assert evaluate(equation, x) == pytest.approx(expected)

    def test_left_hand_side_is_stripped(self):
        assert normalize_equation("Y = X + 1") == "x + 1"

    def test_tokens_end_with_end_marker(self):
        tokens = tokenize("2x")
        assert [t.kind for t in tokens] == ["number", "name", "end"]

    @pytest.mark.parametrize(
        "equation",
        ["", "y = ", "x + * 2", "import os", "sqrt(x)", "(x + 1", "x $ 2", "__class__"],
    )
    def test_rejects_invalid(self, equation):
        with pytest.raises(ExpressionError):
            parse_expression(equation)


class TestEvaluation:
    """Tests for values where the expression is undefined."""

    def test_division_by_zero_is_undefined(self):
        assert parse_expression("1 / x").evaluate(0) is None

    def test_domain_error_is_undefined(self):
        assert parse_expression("(0 - 1)^0.5").evaluate(0) is None

    def test_overflow_is_undefined(self):
        assert parse_expression("10^x").evaluate(400) is None

    def test_expression_is_reusable(self):
        expression = parse_expression("x^2 - 1")
        assert [expression.evaluate(v) for v in (-1, 0, 1)] == [0, -1, 0]
