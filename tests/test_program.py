import math

import pytest

from plotexpr.errors import ErrorCode, ParseError
from plotexpr.functions import sqr, vmax, vmin
from plotexpr.program import Instruction, Op, Program
from plotexpr.vector import Vector


def const(v):
    return Instruction(Op.KONST, value=v)


def binary(a, b, op):
    return Program([const(a), Instruction(Op.PUSH), const(b),
                    Instruction(op), Instruction(Op.ENDE)])


def test_empty_program_is_zero():
    assert Program().evaluate() == 0.0


def test_constant():
    assert Program([const(2.5), Instruction(Op.ENDE)]).evaluate() == 2.5


@pytest.mark.parametrize("op,a,b,expected", [
    (Op.PLUS, 2.0, 3.0, 2.0 + 3.0),
    (Op.MINUS, 2.0, 7.0, 2.0 - 7.0),
    (Op.MULT, 4.0, 1.5, 4.0 * 1.5),
    (Op.DIV, 9.0, 2.0, 9.0 / 2.0),
    (Op.POW, 2.0, 10.0, 2.0 ** 10.0),
])
def test_binary_arithmetic(op, a, b, expected):
    assert binary(a, b, op).evaluate() == expected


def test_division_by_zero_is_positive_infinity():
    assert binary(-3.0, 0.0, Op.DIV).evaluate() == math.inf


def test_pow_edge_cases():
    assert binary(0.0, -1.0, Op.POW).evaluate() == math.inf
    assert math.isnan(binary(-8.0, 1 / 3, Op.POW).evaluate())


@pytest.mark.parametrize("op,a,b,expected", [
    (Op.GT, 2.0, 1.0, 1.0),
    (Op.GT, 1.0, 1.0, 0.0),
    (Op.GE, 1.0, 1.0, 1.0),
    (Op.LT, 1.0, 2.0, 1.0),
    (Op.LT, 2.0, 2.0, 0.0),
    (Op.LE, 2.0, 2.0, 1.0),
])
def test_comparisons(op, a, b, expected):
    assert binary(a, b, op).evaluate() == expected


def test_unary_ops():
    neg = Program([const(4.0), Instruction(Op.NEG), Instruction(Op.ENDE)])
    assert neg.evaluate() == -4.0
    root = Program([const(16.0), Instruction(Op.SQRT), Instruction(Op.ENDE)])
    assert root.evaluate() == 4.0
    fact = Program([const(4.0), Instruction(Op.FACT), Instruction(Op.ENDE)])
    assert fact.evaluate() == pytest.approx(math.factorial(4))


def test_sqrt_of_negative_is_nan():
    prog = Program([const(-1.0), Instruction(Op.SQRT), Instruction(Op.ENDE)])
    result = prog.evaluate()
    assert str(result) == "nan"


def test_variables_and_missing_variable_reads_zero():
    prog = Program([Instruction(Op.VAR, index=1), Instruction(Op.ENDE)])
    assert prog.evaluate([1.0, 7.5]) == 7.5
    assert prog.evaluate([1.0]) == 0.0


def test_plus_minus_signature():
    prog = Program([const(5.0), Instruction(Op.PUSH), const(2.0),
                    Instruction(Op.PM, index=0), Instruction(Op.ENDE)])
    assert prog.evaluate(pm_signature=[True]) == 5.0 + 2.0
    assert prog.evaluate(pm_signature=[False]) == 5.0 - 2.0
    with pytest.raises(ValueError):
        prog.evaluate()


def test_scalar_function():
    prog = Program([const(3.0), Instruction(Op.FKT_1, func=sqr),
                    Instruction(Op.ENDE)])
    assert prog.evaluate() == sqr(3.0)


def test_vector_function_consumes_arguments():
    prog = Program([
        const(1.0), Instruction(Op.PUSH), const(9.0), Instruction(Op.PUSH),
        const(4.0), Instruction(Op.FKT_N, func=vmax, arg_count=3),
        Instruction(Op.ENDE),
    ])
    assert prog.evaluate() == 9.0


def test_vector_function_without_arguments():
    prog = Program([Instruction(Op.FKT_N, func=vmin, arg_count=0),
                    Instruction(Op.ENDE)])
    assert prog.evaluate() == math.inf


def test_user_function_receives_vector():
    seen = []

    def f(args):
        seen.append(args)
        return args[0] * 10 + args[1]

    prog = Program([const(3.0), Instruction(Op.PUSH), const(4.0),
                    Instruction(Op.UFKT, key="f", arg_count=2),
                    Instruction(Op.ENDE)])
    assert prog.evaluate(functions={"f": f}) == 3.0 * 10 + 4.0
    assert seen == [Vector([3.0, 4.0])]


def test_missing_user_function_raises():
    prog = Program([const(1.0), Instruction(Op.UFKT, key="g", arg_count=1),
                    Instruction(Op.ENDE)])
    with pytest.raises(ParseError) as info:
        prog.evaluate()
    assert info.value.code is ErrorCode.NO_SUCH_FUNCTION


def test_error_instruction_resets_stack():
    prog = Program([const(4.0), Instruction(Op.PUSH), Instruction(Op.ERROR),
                    Instruction(Op.ENDE)])
    assert prog.has_error
    assert prog.evaluate() == 4.0


def test_unbalanced_program_raises():
    prog = Program([const(1.0), Instruction(Op.PUSH), Instruction(Op.ENDE)])
    with pytest.raises(RuntimeError):
        prog.evaluate()


def test_program_length_and_iteration():
    ins = [const(1.0), Instruction(Op.ENDE)]
    prog = Program(ins)
    assert len(prog) == 2
    assert list(prog) == ins
    assert not prog.has_error