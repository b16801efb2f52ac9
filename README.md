# plotexpr

`plotexpr` reads mathematical expressions the way people type them and evaluates them.
It accepts input such as `2x²`, `|x-1|`, `√x`, `sin(x)cos(x)`, `½π` and `x ≥ 0`.

## Features

- **Tolerant syntax.** Spaces are ignored and implied multiplication is added, so
  `2x` is read as `2*x` and `2(3+4)` as `2*(3+4)`. Unicode symbols are accepted for
  minus, times, divide, superscript powers, vulgar fractions, `≤`, `≥`, plus-minus
  `±`, square root `√`, π, ∞ and absolute-value bars.
- **Predefined functions.** These are the trigonometric and hyperbolic functions
  and their inverses, the reciprocal functions (`sec`, `cosec`, `cot`, `sech`, ...),
  `sqrt`, `sqr`, `sign`, the Heaviside step `H`, `log` (base 10), `ln`, `exp`,
  `abs`, `floor`, `ceil`, `round`, `gamma`, `lgamma`, `factorial`, `erf`, `erfc`,
  the Legendre polynomials `P_0` to `P_6`, and `min`, `max` and `mod` (the
  Euclidean norm), which take any number of arguments.
- **Operators.** The operators are `+ - * / ^`, postfix `!`, and the comparisons
  `< > ≤ ≥`. A comparison gives 1 or 0. Division by zero gives infinity.
- **User-defined functions and constants.** Functions can call each other. A
  recursive call is rejected, and so is a call with the wrong number of arguments.
- **Angles in radians or degrees.**
- **Errors.** Every failure raises `ParseError`, which carries an `ErrorCode` and
  the position of the error in the text as typed. The position is -1 when there
  is no position to report.

## Installation

```
pip install .
```

## Usage

```python
from plotexpr.parser import Parser
from plotexpr.functions import AngleMode
from plotexpr.errors import ParseError

parser = Parser()

parser.evaluate("2(3+4)")          # 14.0
parser.evaluate("sqrt(16) + 2^3")  # 12.0
parser.evaluate("max(1, 5, 3)")    # 5.0

parser.set_constant("g", 9.81)
parser.define("f", ["x"], "g*x²")
parser.call("f", 2)                # 9.81 * 4

parser.set_angle_mode(AngleMode.DEGREES)
parser.evaluate("sin(90)")         # 1.0

try:
    parser.evaluate("(1+2")
except ParseError as exc:
    print(exc.code, exc.position)  # ErrorCode.MISSING_BRACKET ...
```

### The `Parser` class (`plotexpr.parser`)

- `evaluate(expression)` evaluates an expression that has no variables. A
  plus-minus symbol in it raises `ParseError` with `ErrorCode.INVALID_PM`.
- `compile(expression, variables)` parses an expression once and returns an
  `Equation`. Calling the equation evaluates it: `eq(1.5, 2.0)` binds the values
  to the variables in order, and a variable with no value given reads as zero.
  The keyword `pm_signature` picks plus (`True`) or minus for each `±` symbol. By
  default every `±` is plus.
- `define(name, variables, expression)` registers a user function and returns its
  `Equation`. Other expressions can then call it as `name(a, b)`. If the name is
  already taken, it raises `ParseError` with `ErrorCode.FUNCTION_NAME_REUSED`.
- `call(name, *args)` evaluates a registered function.
- `remove_function(name)` removes the function and every function that depends on
  it. It returns the removed names, with the named function first.
  `remove_all_functions()` removes every function.
- `user_functions()` returns the sorted names of the user functions.
  `predefined_functions(include_aliases)` returns the names of the built-in
  functions.
- `set_constant(name, value)` and `remove_constant(name)` manage constants.
  Both recompile every function through `reparse_all()`. A function that no
  longer parses keeps its failure in `Equation.error` and is not raised.
- `set_angle_mode(mode)` selects `AngleMode.RADIANS` or `AngleMode.DEGREES`. The
  setting is shared by all parsers in the process.
- `Parser.number(value)` formats a float so that the parser reads back the same
  value. The exponent is written as `*10^` because a lone `e` is the constant e.
  For example, `Parser.number(1e-20)` returns `"1*10^-20"`.

### Other modules

- `plotexpr.functions` holds the predefined functions as plain Python
  functions, such as `sin`, `arcsec`, `factorial`, `legendre(n, x)`, `vmin`,
  `vmax` and `modulus`. It also has the module-level `set_angle_mode` and
  `radians_per_angle_unit`. Domain errors give NaN and poles give an infinity;
  none of these raise.
- `plotexpr.errors` defines `ErrorCode`, `ParseError` and `error_string(code)`.
- `plotexpr.sanitizer.ExpressionSanitizer` rewrites raw input into the form the
  parser reads. `real_pos(i)` maps a position in the rewritten text back to the
  input.
- `plotexpr.program` has the compiled form. A `Program` is a sequence of
  `Instruction`s for a small stack machine, and its opcodes are in `Op`.
- `plotexpr.vector.Vector` is a mutable float vector with element-wise `+`, `-`
  and scalar `*`. It also has `combine(a, k, b)`, which sets the vector to
  `a + k*b`, and `add_rk4(dx, k1, k2, k3, k4)`, which adds one Runge–Kutta step.

## What it does not do

`plotexpr` only parses and evaluates expressions. It does not draw plots,
solve differential equations or save functions to files. It has no
command-line tool and no graphical interface.

## Running the tests

```
pip install .[test]
pytest
```