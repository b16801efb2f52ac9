"""Predefined mathematical functions usable inside expressions.

The functions follow IEEE floating-point conventions: domain errors give
NaN and poles give a signed infinity instead of raising.
"""

from __future__ import annotations

import enum
import math
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from functools import partial

_INF = math.inf
_NAN = math.nan


class AngleMode(enum.Enum):
    """Unit in which trigonometric functions take and return angles."""

    RADIANS = 0
    DEGREES = 1


_radians_per_angle_unit = 1.0


def set_angle_mode(mode: AngleMode | int) -> None:
    """Select radians or degrees for the trigonometric functions."""
    global _radians_per_angle_unit
    mode = AngleMode(mode)
    if mode is AngleMode.RADIANS:
        _radians_per_angle_unit = 1.0
    else:
        _radians_per_angle_unit = math.pi / 180


def radians_per_angle_unit() -> float:
    """Return 1.0 in radians mode and pi/180 in degrees mode."""
    return _radians_per_angle_unit


# --- floating-point helpers -------------------------------------------------

def _recip(y: float) -> float:
    if y == 0:
        return math.copysign(_INF, y)
    return 1 / y


def _sinh(x: float) -> float:
    try:
        return math.sinh(x)
    except OverflowError:
        return math.copysign(_INF, x)


def _cosh(x: float) -> float:
    try:
        return math.cosh(x)
    except OverflowError:
        return _INF


def _tanh(x: float) -> float:
    return math.tanh(x)


def _asinh(x: float) -> float:
    return math.asinh(x)


def _acosh(x: float) -> float:
    if math.isnan(x) or x < 1:
        return _NAN
    return math.acosh(x)


def _atanh(x: float) -> float:
    if math.isnan(x) or abs(x) > 1:
        return _NAN
    if abs(x) == 1:
        return math.copysign(_INF, x)
    return math.atanh(x)


def _asin(x: float) -> float:
    if math.isnan(x) or abs(x) > 1:
        return _NAN
    return math.asin(x)


def _acos(x: float) -> float:
    if math.isnan(x) or abs(x) > 1:
        return _NAN
    return math.acos(x)


def _trig(func: Callable[[float], float], x: float) -> float:
    if math.isinf(x) or math.isnan(x):
        return _NAN
    return func(x)


def _sqrt(x: float) -> float:
    if x < 0:
        return _NAN
    return math.sqrt(x)


def _log10(x: float) -> float:
    if x == 0:
        return -_INF
    if math.isnan(x) or x < 0:
        return _NAN
    return math.log10(x)


def _ln(x: float) -> float:
    if x == 0:
        return -_INF
    if math.isnan(x) or x < 0:
        return _NAN
    return math.log(x)


def _exp(x: float) -> float:
    try:
        return math.exp(x)
    except OverflowError:
        return _INF


def _abs(x: float) -> float:
    return math.fabs(x)


def _floor(x: float) -> float:
    if not math.isfinite(x):
        return x
    return float(math.floor(x))


def _ceil(x: float) -> float:
    if not math.isfinite(x):
        return x
    return float(math.ceil(x))


def _round(x: float) -> float:
    """Round half away from zero."""
    if not math.isfinite(x):
        return x
    magnitude = abs(x)
    whole = math.floor(magnitude)
    if magnitude - whole >= 0.5:
        whole += 1
    return math.copysign(float(whole), x)


def _is_non_positive_integer(x: float) -> bool:
    return x <= 0 and math.isfinite(x) and x == math.floor(x)


def _gamma(x: float) -> float:
    if x == 0:
        return math.copysign(_INF, x)
    if math.isnan(x) or x == -_INF or _is_non_positive_integer(x):
        return _NAN
    try:
        return math.gamma(x)
    except OverflowError:
        return _INF


def _lgamma(x: float) -> float:
    if math.isnan(x):
        return _NAN
    if math.isinf(x) or _is_non_positive_integer(x):
        return _INF
    try:
        return math.lgamma(x)
    except OverflowError:
        return _INF


def _erf(x: float) -> float:
    return math.erf(x)


def _erfc(x: float) -> float:
    return math.erfc(x)


# --- public scalar functions -------------------------------------------------

def sign(x: float) -> float:
    """Signum: -1, 0 or 1."""
    if x < 0.0:
        return -1.0
    if x > 0.0:
        return 1.0
    return 0.0


def heaviside(x: float) -> float:
    """Heaviside step function, with value 0.5 at zero."""
    if x < 0.0:
        return 0.0
    if x > 0.0:
        return 1.0
    return 0.5


def sqr(x: float) -> float:
    """Square of x."""
    return x * x


def sin(x: float) -> float:
    return _trig(math.sin, x * _radians_per_angle_unit)


def cos(x: float) -> float:
    return _trig(math.cos, x * _radians_per_angle_unit)


def tan(x: float) -> float:
    return _trig(math.tan, x * _radians_per_angle_unit)


def arcsin(x: float) -> float:
    return _asin(x) / _radians_per_angle_unit


def arccos(x: float) -> float:
    return _acos(x) / _radians_per_angle_unit


def arctan(x: float) -> float:
    return math.atan(x) / _radians_per_angle_unit


def sec(x: float) -> float:
    return _recip(cos(x))


def cosec(x: float) -> float:
    return _recip(sin(x))


def cot(x: float) -> float:
    return _recip(tan(x))


def arcsec(x: float) -> float:
    return _acos(_recip(x)) / _radians_per_angle_unit


def arccosec(x: float) -> float:
    return _asin(_recip(x)) / _radians_per_angle_unit


def arccot(x: float) -> float:
    return (math.pi / 2 - math.atan(x)) / _radians_per_angle_unit


def sech(x: float) -> float:
    return _recip(_cosh(x))


def cosech(x: float) -> float:
    return _recip(_sinh(x))


def coth(x: float) -> float:
    return _recip(_tanh(x))


def arsech(x: float) -> float:
    return _acosh(_recip(x))


def arcosech(x: float) -> float:
    return _asinh(_recip(x))


def arcoth(x: float) -> float:
    return _atanh(_recip(x))


def factorial(x: float) -> float:
    """Gamma(x + 1); defined for non-integers too."""
    return _gamma(x + 1)


_LEGENDRE: tuple[Callable[[float], float], ...] = (
    lambda x: 1.0,
    lambda x: x,
    lambda x: (3 * x * x - 1) / 2,
    lambda x: (5 * x * x * x - 3 * x) / 2,
    lambda x: (35 * x * x * x * x - 30 * x * x + 3) / 8,
    lambda x: (63 * x * x * x * x * x - 70 * x * x * x + 15 * x) / 8,
    lambda x: (231 * x * x * x * x * x * x - 315 * x * x * x * x
               + 105 * x * x - 5) / 16,
)


def legendre(n: int, x: float) -> float:
    """Legendre polynomial P_n(x) for n from 0 to 6."""
    if not 0 <= n < len(_LEGENDRE):
        raise ValueError(f"Legendre polynomial of order {n} is not available")
    return float(_LEGENDRE[n](x))


# --- vector functions ---------------------------------------------------------

def vmin(args: Iterable[float]) -> float:
    """Smallest value; +inf for no values."""
    best = _INF
    for value in args:
        if value < best:
            best = value
    return best


def vmax(args: Iterable[float]) -> float:
    """Largest value; -inf for no values."""
    best = -_INF
    for value in args:
        if value > best:
            best = value
    return best


def modulus(args: Iterable[float]) -> float:
    """Euclidean (l2) norm of the values."""
    return math.sqrt(sum(value * value for value in args))


# --- function tables ------------------------------------------------------------

@dataclass(frozen=True)
class ScalarFunction:
    """A predefined function of one argument, with an optional alias."""

    name: str
    alias: str
    func: Callable[[float], float]


@dataclass(frozen=True)
class VectorFunction:
    """A predefined function of any number of arguments."""

    name: str
    func: Callable[[Iterable[float]], float]


# Longer names that contain shorter ones come first: matching stops at the
# first name found.
SCALAR_FUNCTIONS: tuple[ScalarFunction, ...] = (
    # hyperbolic
    ScalarFunction("sinh", "", _sinh),
    ScalarFunction("cosh", "", _cosh),
    ScalarFunction("tanh", "", _tanh),
    ScalarFunction("arcsinh", "arsinh", _asinh),
    ScalarFunction("arccosh", "arcosh", _acosh),
    ScalarFunction("arctanh", "artanh", _atanh),
    # reciprocal hyperbolic
    ScalarFunction("cosech", "", cosech),
    ScalarFunction("sech", "", sech),
    ScalarFunction("coth", "", coth),
    ScalarFunction("arccosech", "arcosech", arcosech),
    ScalarFunction("arcsech", "arsech", arsech),
    ScalarFunction("arccoth", "arcoth", arcoth),
    # reciprocal trigonometric
    ScalarFunction("cosec", "", cosec),
    ScalarFunction("sec", "", sec),
    ScalarFunction("cot", "", cot),
    ScalarFunction("arccosec", "arcosech", arccosec),
    ScalarFunction("arcsec", "arsec", arcsec),
    ScalarFunction("arccot", "arcot", arccot),
    # trigonometric
    ScalarFunction("sin", "", sin),
    ScalarFunction("cos", "", cos),
    ScalarFunction("tan", "", tan),
    ScalarFunction("arcsin", "", arcsin),
    ScalarFunction("arccos", "", arccos),
    ScalarFunction("arctan", "", arctan),
    # other
    ScalarFunction("sqrt", "", _sqrt),
    ScalarFunction("sqr", "", sqr),
    ScalarFunction("sign", "", sign),
    ScalarFunction("H", "", heaviside),
    ScalarFunction("log", "", _log10),
    ScalarFunction("ln", "", _ln),
    ScalarFunction("exp", "", _exp),
    ScalarFunction("abs", "", _abs),
    ScalarFunction("floor", "", _floor),
    ScalarFunction("ceil", "", _ceil),
    ScalarFunction("round", "", _round),
    ScalarFunction("gamma", "", _gamma),
    ScalarFunction("lgamma", "", _lgamma),
    ScalarFunction("factorial", "", factorial),
    ScalarFunction("erfc", "", _erfc),
    ScalarFunction("erf", "", _erf),
    # Legendre polynomials
    *(
        ScalarFunction(f"P_{n}", "", partial(legendre, n))
        for n in range(len(_LEGENDRE))
    ),
)

VECTOR_FUNCTIONS: tuple[VectorFunction, ...] = (
    VectorFunction("min", vmin),
    VectorFunction("max", vmax),
    VectorFunction("mod", modulus),
)


def predefined_function_names(include_aliases: bool) -> list[str]:
    """Names of all predefined functions, optionally with their aliases."""
    names: list[str] = []
    for function in SCALAR_FUNCTIONS:
        names.append(function.name)
        if include_aliases and function.alias:
            names.append(function.alias)
    names.extend(function.name for function in VECTOR_FUNCTIONS)
    return names