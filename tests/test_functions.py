import math

import pytest

from plotexpr import functions as fn
from plotexpr.functions import AngleMode


@pytest.fixture
def degrees():
    fn.set_angle_mode(AngleMode.DEGREES)
    yield
    fn.set_angle_mode(AngleMode.RADIANS)


def scalar(name):
    return next(f.func for f in fn.SCALAR_FUNCTIONS if f.name == name)


def test_default_is_radians():
    fn.set_angle_mode(AngleMode.RADIANS)
    assert fn.radians_per_angle_unit() == 1.0


def test_degrees_mode_factor(degrees):
    assert fn.radians_per_angle_unit() == math.pi / 180


def test_set_angle_mode_accepts_int_and_rejects_unknown():
    fn.set_angle_mode(1)
    try:
        assert fn.radians_per_angle_unit() == math.pi / 180
    finally:
        fn.set_angle_mode(0)
    with pytest.raises(ValueError):
        fn.set_angle_mode(7)


def test_trig_in_degrees(degrees):
    assert fn.sin(30) == pytest.approx(math.sin(math.radians(30)))
    assert fn.cos(60) == pytest.approx(math.cos(math.radians(60)))
    assert fn.arctan(fn.tan(40)) == pytest.approx(40)
    assert fn.arcsin(fn.sin(25)) == pytest.approx(25)


def test_inverse_trig_round_trips():
    for x in (0.1, 0.5, 1.2):
        assert fn.arccos(fn.cos(x)) == pytest.approx(x)
        assert fn.arcsec(fn.sec(x)) == pytest.approx(x)
        assert fn.arccot(fn.cot(x)) == pytest.approx(x)
        assert fn.arccosec(fn.cosec(x)) == pytest.approx(x)


def test_reciprocal_relations():
    for x in (0.3, 1.1, -0.7):
        assert fn.sec(x) == pytest.approx(1 / math.cos(x))
        assert fn.cosec(x) == pytest.approx(1 / math.sin(x))
        assert fn.cot(x) == pytest.approx(1 / math.tan(x))
        assert fn.sech(x) == pytest.approx(1 / math.cosh(x))
        assert fn.cosech(x) == pytest.approx(1 / math.sinh(x))
        assert fn.coth(x) == pytest.approx(1 / math.tanh(x))


def test_inverse_reciprocal_hyperbolic_round_trips():
    for x in (0.4, 1.5, 3.0):
        assert fn.arsech(fn.sech(x)) == pytest.approx(x)
        assert fn.arcosech(fn.cosech(x)) == pytest.approx(x)
        assert fn.arcoth(fn.coth(x)) == pytest.approx(x)


def test_poles_give_infinity():
    assert fn.cosech(0.0) == math.inf
    assert fn.coth(0.0) == math.inf
    assert fn.cot(0.0) == math.inf


def test_domain_errors_give_nan():
    assert str(fn.arcsin(2.0)) == "nan"
    assert str(fn.arccos(-3.0)) == "nan"
    assert str(fn.arsech(2.0)) == "nan"
    assert str(scalar("sqrt")(-1.0)) == "nan"
    assert str(scalar("ln")(-1.0)) == "nan"


def test_log_of_zero_is_minus_infinity():
    names = fn.predefined_function_names(False)
    assert "ln" in names and "log" in names
    assert scalar("ln")(0.0) == -math.inf
    assert scalar("log")(0.0) == -math.inf


def test_sign_and_heaviside():
    assert [fn.sign(v) for v in (-2.5, 0.0, 3.0)] == [-1.0, 0.0, 1.0]
    assert [fn.heaviside(v) for v in (-1.0, 0.0, 2.0)] == [0.0, 0.5, 1.0]


def test_sqr_is_square():
    for x in (-3.5, 0.0, 7.25):
        assert fn.sqr(x) == x * x


def test_factorial_matches_integer_factorial():
    for n in range(8):
        assert fn.factorial(n) == pytest.approx(math.factorial(n))


def test_factorial_of_minus_one_is_infinite():
    assert fn.factorial(-1) == math.inf


def test_round_half_away_from_zero():
    assert "round" in fn.predefined_function_names(False)
    rnd = scalar("round")
    assert rnd(2.5) == 3.0
    assert rnd(-2.5) == -3.0


def test_legendre_endpoints():
    for n in range(7):
        assert fn.legendre(n, 1.0) == pytest.approx(1.0)
        assert fn.legendre(n, -1.0) == pytest.approx((-1.0) ** n)


def test_legendre_order_out_of_range():
    with pytest.raises(ValueError):
        fn.legendre(7, 0.5)
    with pytest.raises(ValueError):
        fn.legendre(-1, 0.5)


def test_legendre_table_entries_match():
    for n in range(7):
        assert scalar(f"P_{n}")(0.3) == fn.legendre(n, 0.3)


def test_vector_functions():
    values = [3.0, -1.5, 2.0]
    assert fn.vmin(values) == min(values)
    assert fn.vmax(values) == max(values)
    assert fn.modulus([3.0, 4.0]) == math.hypot(3.0, 4.0)


def test_vector_functions_empty():
    assert fn.vmin([]) == math.inf
    assert fn.vmax([]) == -math.inf
    assert fn.modulus([]) == 0.0


def test_predefined_names_order_and_count():
    names = fn.predefined_function_names(False)
    assert len(names) == 47 + 3
    assert names[0] == "sinh"
    assert names[-3:] == ["min", "max", "mod"]


def test_predefined_names_with_aliases():
    plain = fn.predefined_function_names(False)
    full = fn.predefined_function_names(True)
    aliases = [f.alias for f in fn.SCALAR_FUNCTIONS if f.alias]
    assert len(full) == len(plain) + len(aliases)
    assert "arsinh" in full and "arsinh" not in plain


def test_longer_names_precede_their_prefixes():
    names = fn.predefined_function_names(False)[:47]
    assert len(names) == 47
    for i, name in enumerate(names):
        for later in names[i + 1:]:
            assert not later.startswith(name) or later == name