"""Normalisation of user-entered expressions before parsing."""

from __future__ import annotations

import enum
import re
import unicodedata
from collections.abc import Iterable

from .functions import predefined_function_names

GE_SYMBOL = "\u2265"
LE_SYMBOL = "\u2264"
PM_SYMBOL = "\u00b1"
ABS_SYMBOL = "\u2223"

_DASHES = "\u2012\u2013\u2014\u2015\u2053\u2212"

_CHAR_REPLACEMENTS: tuple[tuple[str, str], ...] = (
    *((dash, "-") for dash in _DASHES),
    ("\u00f7", "/"),
    ("\u2215", "/"),
    ("\u00d7", "*"),
    ("\u2219", "*"),
    ("\u2213", PM_SYMBOL),
    # powers
    ("\u00b2", "^2"),
    ("\u00b3", "^3"),
    ("\u2070", "^0"),
    ("\u2074", "^4"),
    ("\u2075", "^5"),
    ("\u2076", "^6"),
    ("\u2077", "^7"),
    ("\u2078", "^8"),
    ("\u2079", "^9"),
    # fractions
    ("\u00bc", "(1/4)"),
    ("\u00bd", "(1/2)"),
    ("\u00be", "(3/4)"),
    ("\u2153", "(1/3)"),
    ("\u2154", "(2/3)"),
    ("\u2155", "(1/5)"),
    ("\u2156", "(2/5)"),
    ("\u2157", "(3/5)"),
    ("\u2158", "(4/5)"),
    ("\u2159", "(1/6)"),
    ("\u215a", "(5/6)"),
    ("\u215b", "(1/8)"),
    ("\u215c", "(3/8)"),
    ("\u215d", "(5/8)"),
    ("\u215e", "(7/8)"),
)

_COMMA_DECIMAL = re.compile(r"(\d),(\d)", re.ASCII)


class _Kind(enum.Enum):
    CONSTANT = enum.auto()
    NUMBER = enum.auto()
    UNKNOWN_LETTER = enum.auto()
    FUNCTION = enum.auto()
    OTHER = enum.auto()


_PRODUCT_LEFT = (_Kind.NUMBER, _Kind.CONSTANT, _Kind.UNKNOWN_LETTER)
_PRODUCT_RIGHT = (_Kind.FUNCTION, _Kind.UNKNOWN_LETTER, _Kind.CONSTANT)


def _is_number(ch: str) -> bool:
    return unicodedata.category(ch) in ("Nd", "Nl", "No")


def _is_letter(ch: str) -> bool:
    return unicodedata.category(ch).startswith("L")


class ExpressionSanitizer:
    """Rewrites expressions into the form the parser reads.

    Spaces are removed, Unicode operators and symbols are replaced by
    their ASCII forms, ``|x|`` becomes ``abs(x)`` and implicit
    multiplication is made explicit. The sanitizer remembers, for each
    character of its last output, the position in the input it came from.

    ``function_names`` are the names of user-defined functions (the
    predefined ones are always known); ``constant_names`` are the names of
    user-defined constants.
    """

    def __init__(
        self,
        function_names: Iterable[str] = (),
        constant_names: Iterable[str] = (),
        decimal_symbol: str = ".",
    ) -> None:
        self.function_names = tuple(function_names)
        self.constant_names = tuple(constant_names)
        self.decimal_symbol = decimal_symbol
        self._text = ""
        self._map: list[int] = []

    # --- editing that keeps the position map in step -------------------------

    def _replace_span(self, pos: int, length: int, after: str) -> None:
        origin = self._map[pos]
        self._map[pos:pos + length] = [origin] * len(after)
        self._text = self._text[:pos] + after + self._text[pos + length:]

    def _replace_all(self, before: str, after: str) -> None:
        start = 0
        while (index := self._text.find(before, start)) != -1:
            self._replace_span(index, len(before), after)
            start = index + len(after)

    def _insert(self, pos: int, ch: str) -> None:
        self._map.insert(pos, self._map[pos])
        self._text = self._text[:pos] + ch + self._text[pos:]

    def _append(self, ch: str) -> None:
        self._map.append(self._map[-1])
        self._text += ch

    def _strip_whitespace(self) -> None:
        kept = [(ch, origin) for ch, origin in zip(self._text, self._map)
                if not ch.isspace()]
        self._text = "".join(ch for ch, _ in kept)
        self._map = [origin for _, origin in kept]

    # --- rewriting steps -------------------------------------------------------

    def _replace_abs_bars(self) -> None:
        self._text = self._text.replace(ABS_SYMBOL, "|")
        open_at_depth = [False] * (self._text.count("(") + 1)
        depth = 0
        i = 0
        while i < len(self._text):
            ch = self._text[i]
            if ch == "|":
                if open_at_depth[depth]:
                    self._replace_span(i, 1, ")")
                    open_at_depth[depth] = False
                else:
                    self._replace_span(i, 1, "abs(")
                    i += 3
                    open_at_depth[depth] = True
            elif ch == "(":
                depth += 1
            elif ch == ")":
                depth = max(depth - 1, 0)
            i += 1

    def _fix_decimal_symbol(self) -> None:
        if self.decimal_symbol == ",":
            # Same length, so the position map is unaffected.
            self._text = _COMMA_DECIMAL.sub(r"\1.\2", self._text)
        elif self.decimal_symbol and self.decimal_symbol != ".":
            self._replace_all(self.decimal_symbol, ".")

    def _known_strings(self) -> list[tuple[str, _Kind]]:
        kinds: dict[str, _Kind] = {}
        for name in predefined_function_names(True):
            kinds[name] = _Kind.FUNCTION
        for name in self.function_names:
            kinds[name] = _Kind.FUNCTION
        for name in self.constant_names:
            kinds[name] = _Kind.CONSTANT
        kinds["pi"] = _Kind.CONSTANT
        kinds.pop("", None)
        return sorted(kinds.items(), key=lambda item: (-len(item[0]), item[0]))

    def _insert_multiplications(self) -> None:
        known = self._known_strings()
        previous = _Kind.OTHER
        i = 1
        while i < len(self._text):
            text = self._text
            ch = text[i]
            current, step = next(
                ((kind, len(name)) for name, kind in known
                 if text.startswith(name, i)),
                (_Kind.OTHER, 1),
            )
            if current is _Kind.OTHER:
                if _is_number(ch) or ch == ".":
                    current = _Kind.NUMBER
                elif _is_letter(ch):
                    current = _Kind.UNKNOWN_LETTER

            if ((current in _PRODUCT_RIGHT or ch == "(")
                    and (previous in _PRODUCT_LEFT or text[i - 1] == ")")):
                self._insert(i, "*")
                step += 1

            previous = current
            i += step

    # --- public interface --------------------------------------------------------

    def fix_expression(self, text: str) -> str:
        """Return ``text`` rewritten for the parser."""
        self._text = text
        self._map = list(range(len(text)))

        # Must run before the implicit-equation step, which counts '='.
        self._replace_all(">=", GE_SYMBOL)
        self._replace_all("<=", LE_SYMBOL)

        # "y = x + 2" becomes "y - (x + 2)" so it can be compared with zero.
        if self._text.count("=") > 1:
            self._replace_span(self._text.rindex("="), 1, "-(")
            self._append(")")

        self._strip_whitespace()

        for before, after in _CHAR_REPLACEMENTS:
            self._replace_all(before, after)

        self._replace_abs_bars()
        self._fix_decimal_symbol()
        self._insert_multiplications()
        return self._text

    def real_pos(self, eval_pos: int) -> int:
        """Position in the last input that produced ``eval_pos`` of the output.

        Returns -1 when the position is out of range or nothing was fixed yet.
        """
        if not self._map or eval_pos < 0 or eval_pos >= len(self._map):
            return -1
        return self._map[eval_pos]