"""Compiled expressions: a flat list of stack-machine instructions."""

from __future__ import annotations

import enum
import math
from collections.abc import Callable, Hashable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Optional

from .errors import ErrorCode, ParseError
from .functions import factorial
from .vector import Vector


class Op(enum.IntEnum):
    """Instruction opcodes."""

    KONST = 0  # load a constant into the top slot
    VAR = 1  # load a variable into the top slot
    PUSH = 2  # open a new slot on the stack
    PLUS = 3
    MINUS = 4
    PM = 5  # add or subtract depending on the plus-minus signature
    MULT = 6
    DIV = 7
    POW = 8
    NEG = 9
    FKT_1 = 10  # predefined function of one argument
    FKT_N = 11  # predefined function of any number of arguments
    UFKT = 12  # user-defined function
    SQRT = 13
    FACT = 14
    GT = 15
    GE = 16
    LT = 17
    LE = 18
    ENDE = 19  # end of program
    ERROR = 20  # the expression failed to parse


@dataclass(frozen=True)
class Instruction:
    """One instruction with the operands its opcode uses.

    ``value`` is the constant for KONST; ``index`` the variable index for
    VAR and the plus-minus index for PM; ``func`` the callable for FKT_1
    and FKT_N; ``arg_count`` the number of stack values FKT_N and UFKT
    consume; ``key`` identifies the user function for UFKT.
    """

    op: Op
    value: float = 0.0
    index: int = 0
    func: Optional[Callable[..., float]] = None
    arg_count: int = 0
    key: Hashable = None


def _is_odd_integer(y: float) -> bool:
    return math.isfinite(y) and y == math.floor(y) and math.fmod(y, 2.0) != 0


def _pow(x: float, y: float) -> float:
    """Power with IEEE results instead of exceptions."""
    try:
        return math.pow(x, y)
    except ValueError:
        if x == 0 and y < 0:
            if _is_odd_integer(y):
                return math.copysign(math.inf, x)
            return math.inf
        return math.nan
    except OverflowError:
        if x < 0 and _is_odd_integer(y):
            return -math.inf
        return math.inf


def _sqrt(x: float) -> float:
    if math.isnan(x) or x < 0:
        return math.nan
    return math.sqrt(x)


_BINARY: dict[Op, Callable[[float, float], float]] = {
    Op.PLUS: lambda a, b: a + b,
    Op.MINUS: lambda a, b: a - b,
    Op.MULT: lambda a, b: a * b,
    Op.POW: _pow,
    Op.GT: lambda a, b: 1.0 if a > b else 0.0,
    Op.GE: lambda a, b: 1.0 if a >= b else 0.0,
    Op.LT: lambda a, b: 1.0 if a < b else 0.0,
    Op.LE: lambda a, b: 1.0 if a <= b else 0.0,
}

_UNARY: dict[Op, Callable[[float], float]] = {
    Op.NEG: lambda a: -a,
    Op.SQRT: _sqrt,
    Op.FACT: factorial,
}


def _take_args(stack: list[float], count: int) -> Vector:
    """Collect the top ``count`` values and leave one slot for the result."""
    if count <= 0:
        return Vector()
    args = Vector(stack[-count:])
    del stack[len(stack) - count + 1:]
    return args


class Program:
    """An evaluable sequence of instructions."""

    def __init__(self, instructions: Sequence[Instruction] = ()) -> None:
        self.instructions = tuple(instructions)

    def __len__(self) -> int:
        return len(self.instructions)

    def __iter__(self) -> Iterator[Instruction]:
        return iter(self.instructions)

    def __repr__(self) -> str:
        return f"Program({list(self.instructions)!r})"

    @property
    def has_error(self) -> bool:
        """Whether the program holds an ERROR instruction."""
        return any(ins.op is Op.ERROR for ins in self.instructions)

    def evaluate(
        self,
        variables: Sequence[float] = (),
        functions: Optional[Mapping[Hashable, Callable[[Vector], float]]] = None,
        pm_signature: Sequence[bool] = (),
    ) -> float:
        """Run the program and return its result.

        Variables beyond the end of ``variables`` read as zero. ``functions``
        maps the keys of UFKT instructions to callables taking a Vector of
        arguments; ``pm_signature`` chooses plus (true) or minus for each
        plus-minus symbol.
        """
        if not self.instructions:
            return 0.0
        functions = functions if functions is not None else {}
        stack: list[float] = [0.0]

        for ins in self.instructions:
            op = ins.op
            if op is Op.KONST:
                stack[-1] = ins.value
            elif op is Op.VAR:
                stack[-1] = (
                    float(variables[ins.index])
                    if 0 <= ins.index < len(variables) else 0.0
                )
            elif op is Op.PUSH:
                stack.append(0.0)
            elif op in _BINARY:
                right = stack.pop()
                stack[-1] = _BINARY[op](stack[-1], right)
            elif op is Op.DIV:
                right = stack.pop()
                stack[-1] = math.inf if right == 0 else stack[-1] / right
            elif op is Op.PM:
                if not 0 <= ins.index < len(pm_signature):
                    raise ValueError(
                        f"no plus-minus sign given for symbol {ins.index}"
                    )
                right = stack.pop()
                if pm_signature[ins.index]:
                    stack[-1] += right
                else:
                    stack[-1] -= right
            elif op in _UNARY:
                stack[-1] = _UNARY[op](stack[-1])
            elif op is Op.FKT_1:
                stack[-1] = ins.func(stack[-1])
            elif op is Op.FKT_N:
                args = _take_args(stack, ins.arg_count)
                stack[-1] = ins.func(args)
            elif op is Op.UFKT:
                function: Any = functions.get(ins.key)
                if function is None:
                    raise ParseError(ErrorCode.NO_SUCH_FUNCTION)
                args = _take_args(stack, ins.arg_count)
                stack[-1] = function(args)
            elif op is Op.ERROR:
                del stack[1:]
                return stack[0]
            elif op is Op.ENDE:
                break

        if len(stack) != 1:
            raise RuntimeError(
                f"unbalanced program: {len(stack)} values left on the stack"
            )
        return stack[0]