"""Parsing of expressions into programs, and a registry of user functions."""

from __future__ import annotations

import math
import re
from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from functools import partial
from itertools import chain, count
from typing import Optional

from .errors import ErrorCode, ParseError
from .functions import (
    SCALAR_FUNCTIONS,
    VECTOR_FUNCTIONS,
    AngleMode,
    predefined_function_names,
    set_angle_mode,
)
from .program import Instruction, Op, Program
from .sanitizer import GE_SYMBOL, LE_SYMBOL, PM_SYMBOL, ExpressionSanitizer
from .vector import Vector

PI_SYMBOL = "\u03c0"
INFINITY_SYMBOL = "\u221e"
SQRT_SYMBOL = "\u221a"

_BUILTIN_CONSTANTS: tuple[tuple[str, float], ...] = (
    ("pi", math.pi),
    (PI_SYMBOL, math.pi),
    ("e", math.e),
    (INFINITY_SYMBOL, math.inf),
)

_COMPARISON_OPS = {"<": Op.LT, ">": Op.GT, LE_SYMBOL: Op.LE, GE_SYMBOL: Op.GE}
_ADDITIVE_OPS = {"+": Op.PLUS, "-": Op.MINUS, PM_SYMBOL: Op.PM}
_MULTIPLICATIVE_OPS = {"*": Op.MULT, "/": Op.DIV}

# What strtod accepts as a number: hex floats, decimals, infinity and NaN.
_NUMBER = re.compile(
    r"""[+-]?(?:
        (?P<hex>0[xX](?:[0-9a-fA-F]+\.?[0-9a-fA-F]*|\.[0-9a-fA-F]+)
            (?:[pP][+-]?[0-9]+)?)
      | (?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?
      | [iI][nN][fF](?:[iI][nN][iI][tT][yY])?
      | [nN][aA][nN]
    )""",
    re.VERBOSE,
)


@dataclass(eq=False)
class Equation:
    """A compiled expression, named when it is a registered user function.

    Calling an equation evaluates it with the given variable values; values
    not given read as zero. ``pm_signature`` chooses plus (true) or minus
    for each plus-minus symbol and defaults to all plus.
    """

    name: str
    variables: tuple[str, ...]
    expression: str
    program: Program = field(default_factory=Program, repr=False)
    pm_count: int = 0
    error: ErrorCode = ErrorCode.PARSE_SUCCESS
    id: int = -1
    dependencies: frozenset[int] = frozenset()
    _parser: Optional[Parser] = field(default=None, repr=False)

    def __call__(
        self, *args: float, pm_signature: Optional[Sequence[bool]] = None
    ) -> float:
        if self._parser is not None:
            return self._parser._run(self, args, pm_signature)
        signature = (
            pm_signature if pm_signature is not None else [True] * self.pm_count
        )
        return self.program.evaluate(list(args), None, signature)


@dataclass
class _Parsed:
    program: Program
    pm_count: int
    dependencies: frozenset[int]
    error: ErrorCode
    position: int


class _Failure(Exception):
    def __init__(self, code: ErrorCode) -> None:
        super().__init__(code)
        self.code = code


class _FunctionTable(Mapping):
    """Maps user-function ids to callables that evaluate them."""

    def __init__(self, parser: Parser) -> None:
        self._parser = parser

    def __getitem__(self, key: int) -> Callable[[Vector], float]:
        return partial(self._parser._run, self._parser._functions[key])

    def __iter__(self) -> Iterator[int]:
        return iter(self._parser._functions)

    def __len__(self) -> int:
        return len(self._parser._functions)


class _Compiler:
    """Recursive-descent parser emitting stack-machine instructions."""

    def __init__(
        self,
        parser: Parser,
        text: str,
        start: int,
        variables: tuple[str, ...],
        name: str,
        current_id: int,
        allow_pm: bool,
    ) -> None:
        self.parser = parser
        self.text = text
        self.pos = start
        self.variables = variables
        self.name = name
        self.current_id = current_id
        self.allow_pm = allow_pm
        self.code: list[Instruction] = []
        self.pm_count = 0
        self.dependencies: set[int] = set()
        self._sorted_variables = sorted(variables, key=lambda v: -len(v))
        user_constants = sorted(
            parser._constants.items(), key=lambda item: (-len(item[0]), item[0])
        )
        self._constants = [*user_constants, *_BUILTIN_CONSTANTS]

    # --- helpers --------------------------------------------------------------

    def _emit(self, op: Op, **operands) -> None:
        self.code.append(Instruction(op, **operands))

    def _match(self, literal: str) -> bool:
        if not literal or not self.text.startswith(literal, self.pos):
            return False
        self.pos += len(literal)
        return True

    def _peek_op(self, table: Mapping[str, Op]) -> Optional[Op]:
        if self.pos >= len(self.text):
            return None
        return table.get(self.text[self.pos])

    @property
    def remaining(self) -> str:
        return self.text[self.pos:]

    # --- grammar --------------------------------------------------------------

    def run(self) -> None:
        self._comparison()
        if self.remaining:
            raise _Failure(ErrorCode.SYNTAX_ERROR)

    def _comparison(self) -> None:
        self._sum()
        while (op := self._peek_op(_COMPARISON_OPS)) is not None:
            self.pos += 1
            self._emit(Op.PUSH)
            self._sum()
            self._emit(op)

    def _sum(self) -> None:
        self._root()
        while (op := self._peek_op(_ADDITIVE_OPS)) is not None:
            if op is Op.PM and not self.allow_pm:
                raise _Failure(ErrorCode.INVALID_PM)
            self.pos += 1
            self._emit(Op.PUSH)
            self._root()
            if op is Op.PM:
                self._emit(Op.PM, index=self.pm_count)
                self.pm_count += 1
            else:
                self._emit(op)

    def _root(self) -> None:
        if self._match(SQRT_SYMBOL):
            self._root()
            self._emit(Op.SQRT)
        else:
            self._product()

    def _product(self) -> None:
        self._unary()
        while (op := self._peek_op(_MULTIPLICATIVE_OPS)) is not None:
            self.pos += 1
            self._emit(Op.PUSH)
            self._unary()
            self._emit(op)

    def _unary(self) -> None:
        if self._match("-"):
            self._unary()
            self._emit(Op.NEG)
        elif self._match("+"):
            self._unary()
        else:
            self._power()

    def _power(self) -> None:
        self._primary()
        while True:
            if self._match("^"):
                self._emit(Op.PUSH)
                self._unary()
                self._emit(Op.POW)
            elif self._match("!"):
                self._emit(Op.FACT)
            else:
                return

    def _primary(self) -> bool:
        # Variables come before user functions since a differential equation
        # may use a function name as a variable; constants come before user
        # functions so that a constant shadows a function of the same name.
        return (
            self._try_bracket()
            or self._try_predefined_function()
            or self._try_variable()
            or self._try_constant()
            or self._try_user_function()
            or self._try_number()
        )

    def _try_bracket(self) -> bool:
        if not self._match("(") and not self._match(","):
            return False
        self._comparison()
        if not self._match(")") and not self._match(","):
            raise _Failure(ErrorCode.MISSING_BRACKET)
        return True

    def _try_predefined_function(self) -> bool:
        for scalar in SCALAR_FUNCTIONS:
            if self._match(scalar.name) or self._match(scalar.alias):
                self._primary()
                self._emit(Op.FKT_1, func=scalar.func)
                return True
        for vector in VECTOR_FUNCTIONS:
            if self._match(vector.name):
                arg_count = self._read_arguments()
                self._emit(Op.FKT_N, func=vector.func, arg_count=arg_count)
                return True
        return False

    def _try_variable(self) -> bool:
        for variable in self._sorted_variables:
            if self._match(variable):
                self._emit(Op.VAR, index=self.variables.index(variable))
                return True
        return False

    def _try_constant(self) -> bool:
        for name, value in self._constants:
            if self._match(name):
                self._emit(Op.KONST, value=value)
                return True
        return False

    def _try_user_function(self) -> bool:
        for candidate in self.parser._functions.values():
            if not self._match(candidate.name):
                continue
            if candidate.id == self.current_id or (
                self.current_id >= 0
                and self.parser._depends_on(candidate, self.current_id)
            ):
                raise _Failure(ErrorCode.RECURSIVE_FUNCTION_CALL)
            arg_count = self._read_arguments()
            if arg_count != len(candidate.variables):
                raise _Failure(ErrorCode.INCORRECT_ARGUMENT_COUNT)
            self._emit(Op.UFKT, key=candidate.id, arg_count=arg_count)
            self.dependencies.add(candidate.id)
            return True
        if self._match(self.name):
            raise _Failure(ErrorCode.RECURSIVE_FUNCTION_CALL)
        return False

    def _try_number(self) -> bool:
        found = _NUMBER.match(self.text, self.pos)
        if found is None:
            return False
        literal = found.group()
        value = float.fromhex(literal) if found.group("hex") else float(literal)
        self.pos = found.end()
        self._emit(Op.KONST, value=value)
        return True

    def _read_arguments(self) -> int:
        """Read a bracketed, comma-separated argument list; return its length."""
        if not self.remaining.startswith("("):
            return 0
        arg_count = 0
        while True:
            arg_count += 1
            self._primary()
            more = self.text[self.pos - 1] == ","
            if more:
                self._emit(Op.PUSH)
                self.pos -= 1
            if not more or not self.remaining:
                return arg_count


class Parser:
    """Compiles and evaluates expressions, and keeps user functions and constants."""

    def __init__(self) -> None:
        self._functions: dict[int, Equation] = {}
        self._constants: dict[str, float] = {}
        self._next_id = 0
        self._table = _FunctionTable(self)

    # --- settings -------------------------------------------------------------

    def set_angle_mode(self, mode: AngleMode | int) -> None:
        """Select radians or degrees for trigonometric functions."""
        set_angle_mode(mode)

    def set_constant(self, name: str, value: float) -> None:
        """Define or change a constant; all functions are reparsed."""
        if not name:
            raise ValueError("constant name must not be empty")
        self._constants[name] = float(value)
        self.reparse_all()

    def remove_constant(self, name: str) -> None:
        """Remove a constant; all functions are reparsed.

        Raises KeyError if there is no such constant.
        """
        del self._constants[name]
        self.reparse_all()

    # --- user functions ---------------------------------------------------------

    def define(
        self, name: str, variables: Iterable[str], expression: str
    ) -> Equation:
        """Compile and register a user function; return its equation."""
        if not name:
            raise ValueError("function name must not be empty")
        variables = tuple(variables)
        parsed = self._parse(name, variables, expression, allow_pm=True)
        if parsed.error is not ErrorCode.PARSE_SUCCESS:
            raise ParseError(parsed.error, parsed.position)
        if self._find(name) is not None:
            raise ParseError(ErrorCode.FUNCTION_NAME_REUSED)
        equation = Equation(
            name=name,
            variables=variables,
            expression=expression,
            program=parsed.program,
            pm_count=parsed.pm_count,
            id=self._new_id(),
            dependencies=parsed.dependencies,
            _parser=self,
        )
        self._functions[equation.id] = equation
        return equation

    def remove_function(self, name: str) -> tuple[str, ...]:
        """Remove a function and every function depending on it.

        Returns the names removed, the named function first.
        """
        item = self._find(name)
        if item is None:
            raise ParseError(ErrorCode.NO_SUCH_FUNCTION)
        to_remove = [item]
        new = [item]
        while new:
            current, new = new, []
            for removed in current:
                for other in self._functions.values():
                    if other in to_remove:
                        continue
                    if removed.id in other.dependencies or self._depends_on(
                        other, removed.id
                    ):
                        to_remove.append(other)
                        new.append(other)
        for equation in to_remove:
            del self._functions[equation.id]
        return tuple(equation.name for equation in to_remove)

    def remove_all_functions(self) -> None:
        """Remove every user function."""
        self._functions.clear()

    def user_functions(self) -> list[str]:
        """Sorted names of the user functions."""
        return sorted(eq.name for eq in self._functions.values() if eq.name)

    def predefined_functions(self, include_aliases: bool) -> list[str]:
        """Names of the predefined functions."""
        return predefined_function_names(include_aliases)

    def reparse_all(self) -> None:
        """Recompile every user function, e.g. after a constant changed.

        Failures are recorded in each equation's ``error`` instead of raised.
        """
        for equation in list(self._functions.values()):
            parsed = self._parse(
                equation.name,
                equation.variables,
                equation.expression,
                allow_pm=True,
                current_id=equation.id,
            )
            equation.program = parsed.program
            equation.pm_count = parsed.pm_count
            equation.dependencies = parsed.dependencies
            equation.error = parsed.error

    # --- compiling and evaluating --------------------------------------------------

    def compile(
        self, expression: str, variables: Iterable[str] = ()
    ) -> Equation:
        """Compile an anonymous expression in the given variables."""
        variables = tuple(variables)
        parsed = self._parse("", variables, expression, allow_pm=True)
        if parsed.error is not ErrorCode.PARSE_SUCCESS:
            raise ParseError(parsed.error, parsed.position)
        return Equation(
            name="",
            variables=variables,
            expression=expression,
            program=parsed.program,
            pm_count=parsed.pm_count,
            dependencies=parsed.dependencies,
            _parser=self,
        )

    def evaluate(self, expression: str) -> float:
        """Evaluate a constant expression; plus-minus symbols are not allowed."""
        parsed = self._parse("", (), expression, allow_pm=False)
        if parsed.error is not ErrorCode.PARSE_SUCCESS:
            raise ParseError(parsed.error, parsed.position)
        return parsed.program.evaluate((), self._table, ())

    def call(self, name: str, *args: float) -> float:
        """Evaluate the user function ``name`` with the given arguments."""
        equation = self._find(name)
        if equation is None:
            raise ParseError(ErrorCode.NO_SUCH_FUNCTION)
        return self._run(equation, args)

    @staticmethod
    def number(value: float) -> str:
        """Format ``value`` so that it can be parsed back.

        The exponent is written as ``*10^`` since ``e`` is a constant.
        """
        return format(float(value), ".16g").replace("e", "*10^")

    # --- internals -----------------------------------------------------------------

    def _new_id(self) -> int:
        new_id = self._next_id
        while new_id in self._functions:
            new_id += 1
        self._next_id = new_id + 1
        return new_id

    def _find(self, name: str) -> Optional[Equation]:
        return next(
            (eq for eq in self._functions.values() if eq.name == name), None
        )

    def _free_name(self) -> str:
        taken = {eq.name for eq in self._functions.values()}
        candidates = chain(["f"], (f"f{i}" for i in count(1)))
        return next(name for name in candidates if name not in taken)

    def _depends_on(self, equation: Equation, target_id: int) -> bool:
        """Whether ``equation`` calls the function ``target_id``, directly or not."""
        seen: set[int] = set()
        pending = list(equation.dependencies)
        while pending:
            dependency = pending.pop()
            if dependency == target_id:
                return True
            if dependency in seen:
                continue
            seen.add(dependency)
            other = self._functions.get(dependency)
            if other is not None:
                pending.extend(other.dependencies)
        return False

    def _run(
        self,
        equation: Equation,
        args: Iterable[float],
        pm_signature: Optional[Sequence[bool]] = None,
    ) -> float:
        signature = (
            pm_signature
            if pm_signature is not None
            else [True] * equation.pm_count
        )
        return equation.program.evaluate(list(args), self._table, signature)

    def _parse(
        self,
        name: str,
        variables: tuple[str, ...],
        expression: str,
        *,
        allow_pm: bool,
        current_id: int = -1,
    ) -> _Parsed:
        head_name = name or self._free_name()
        head = (
            f"{head_name}({','.join(variables)})=" if variables
            else f"{head_name}="
        )
        function_names = [eq.name for eq in self._functions.values()]
        if name:
            function_names.append(name)
        sanitizer = ExpressionSanitizer(function_names, self._constants, ".")
        text = sanitizer.fix_expression(head + expression)

        compiler = _Compiler(
            self, text, text.index("=") + 1, variables, name, current_id,
            allow_pm,
        )
        error = ErrorCode.PARSE_SUCCESS
        position = -1
        try:
            compiler.run()
        except _Failure as failure:
            error = failure.code
            real = sanitizer.real_pos(compiler.pos)
            position = real - len(head) if real >= len(head) else -1
            compiler.code.append(Instruction(Op.ERROR))
        compiler.code.append(Instruction(Op.ENDE))
        return _Parsed(
            program=Program(compiler.code),
            pm_count=compiler.pm_count,
            dependencies=frozenset(compiler.dependencies),
            error=error,
            position=position,
        )