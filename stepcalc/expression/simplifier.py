"""Algebraic simplification of expression trees through SymPy."""

from __future__ import annotations

import sympy as sp

from stepcalc.utils.logger import get_logger

from .tree import BinaryOp, BinaryOperator, Node, Number, UnaryFunc, UnaryFunction, Variable

logger = get_logger("stepcalc.simplifier")

_TO_SYMPY_FUNCTIONS = {
    UnaryFunction.SIN: sp.sin,
    UnaryFunction.COS: sp.cos,
    UnaryFunction.TAN: sp.tan,
    UnaryFunction.LN: sp.log,
    UnaryFunction.EXP: sp.exp,
    UnaryFunction.SQRT: sp.sqrt,
}

_FROM_SYMPY_FUNCTIONS = {
    sp.sin: UnaryFunction.SIN,
    sp.cos: UnaryFunction.COS,
    sp.tan: UnaryFunction.TAN,
    sp.log: UnaryFunction.LN,
    sp.exp: UnaryFunction.EXP,
}


class UnrepresentableExpressionError(ValueError):
    """Raised when a SymPy result has no counterpart in the expression tree."""


# Compares by value so that Float(1.0) and Integer(1) both match 1.0.
def _is_number(expr: sp.Basic, value: float) -> bool:
    return bool(expr.is_Number) and float(expr) == value


def to_sympy(node: Node) -> sp.Expr:
    if isinstance(node, Number):
        if node.value.is_integer():
            return sp.Integer(int(node.value))
        return sp.Float(node.value)
    if isinstance(node, Variable):
        return sp.Symbol(node.name)
    if isinstance(node, UnaryFunc):
        return _TO_SYMPY_FUNCTIONS[node.func](to_sympy(node.arg))
    if isinstance(node, BinaryOp):
        left = to_sympy(node.left)
        right = to_sympy(node.right)
        if node.op is BinaryOperator.ADD:
            return left + right
        if node.op is BinaryOperator.SUB:
            return left - right
        if node.op is BinaryOperator.MUL:
            return left * right
        if node.op is BinaryOperator.DIV:
            return left / right
        return left**right
    raise TypeError("Unknown expression node: {!r}".format(node))


def from_sympy(expr: sp.Basic) -> Node:
    if expr.is_Symbol:
        return Variable(str(expr))
    if expr.is_Number or expr.is_NumberSymbol:
        if not expr.is_real:
            raise UnrepresentableExpressionError("Non-real constant: {}".format(expr))
        return Number(float(expr))
    if expr.is_Add:
        return _from_sympy_sum(expr)
    if expr.is_Mul or expr.is_Pow:
        numerator, denominator = sp.fraction(expr)
        if denominator != 1:
            return BinaryOp(BinaryOperator.DIV, from_sympy(numerator), from_sympy(denominator))
        if numerator.is_Pow:
            base, exponent = numerator.as_base_exp()
            if _is_number(exponent, 1.0):
                return from_sympy(base)
            if _is_number(exponent, 0.5):
                return UnaryFunc(UnaryFunction.SQRT, from_sympy(base))
            return BinaryOp(BinaryOperator.POW, from_sympy(base), from_sympy(exponent))
        if not numerator.is_Mul:
            return from_sympy(numerator)
        return _from_sympy_product(numerator)
    function = _FROM_SYMPY_FUNCTIONS.get(expr.func)
    if function is not None and len(expr.args) == 1:
        return UnaryFunc(function, from_sympy(expr.args[0]))
    raise UnrepresentableExpressionError("Unsupported SymPy construct: {}".format(type(expr).__name__))


def _from_sympy_product(expr: sp.Expr) -> Node:
    coefficient, rest = expr.as_coeff_Mul()
    factors = [from_sympy(factor) for factor in sp.Mul.make_args(rest)]
    result = factors[0]
    for factor in factors[1:]:
        result = BinaryOp(BinaryOperator.MUL, result, factor)
    if _is_number(coefficient, 1.0):
        return result
    return BinaryOp(BinaryOperator.MUL, from_sympy(coefficient), result)


def _from_sympy_sum(expr: sp.Expr) -> Node:
    terms = expr.as_ordered_terms()
    result = from_sympy(terms[0])
    for term in terms[1:]:
        if term.could_extract_minus_sign():
            result = BinaryOp(BinaryOperator.SUB, result, from_sympy(-term))
        else:
            result = BinaryOp(BinaryOperator.ADD, result, from_sympy(term))
    return result


def simplify(tree: Node) -> Node:
    """Returns an algebraically reduced tree; the input is returned if SymPy's form cannot be mapped back.

    The result is not guaranteed to be canonical.
    """
    try:
        reduced = sp.simplify(to_sympy(tree))
        return from_sympy(reduced)
    except UnrepresentableExpressionError as exc:
        logger.warning("simplify_fallback expression=%s reason=%s", tree, exc)
        return tree.clone()
