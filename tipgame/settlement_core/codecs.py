"""
Result codecs.

Every question stores its answers in a canonical, directly comparable form
(the ``result``) next to a display ``label``. A codec converts raw user input
into the canonical form and canonical values back into labels. Codecs are
resolved once per question from the ``CODECS`` table keyed by ``ResultType``.

Codecs that support margin ladders also map canonical values to and from
``Decimal`` so that ``variants.generate_variants`` can work on them.
"""

import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Dict, Hashable, Optional, Type

from tipgame.settlement_core.errors import InvalidInputError
from tipgame.settlement_core.lookups import LookupCache
from tipgame.settlement_core.structure import Question, ResultType
from tipgame.settlement_core.variants import decimals_from_step

TIME_PATTERN = re.compile(r"^(\d{1,3}):([0-5]\d):([0-5]\d)$")
SECONDS_PATTERN = re.compile(r"^\d+$")
LOOSE_DECIMAL_PATTERN = re.compile(r"^[+-]?\d+(\.\d+)?$")
SCORE_PATTERN = re.compile(r"^(\d+)\s*-\s*(\d+)(?:\s+([A-Za-z]+))?$")

DRAW_TAG = "draw"
DRAW_TAGS = (DRAW_TAG, "twnv", "uwnv", "twns", "uwns")


def parse_loose_decimal(raw: str) -> Decimal:
    """Parse a number typed with either ',' or '.' as decimal separator.

    The rightmost separator is the decimal separator, every other separator
    is treated as a thousands separator: "1.234,5" and "1,234.5" both give
    1234.5.
    """
    if raw is None:
        raise InvalidInputError("margin value must be numeric")
    text = str(raw).strip().replace(" ", "").replace("'", "")
    split_at = max(text.rfind(","), text.rfind("."))
    if split_at >= 0:
        whole = text[:split_at].replace(",", "").replace(".", "")
        text = f"{whole}.{text[split_at + 1:]}"
    if not LOOSE_DECIMAL_PATTERN.match(text):
        raise InvalidInputError("margin value must be numeric")
    try:
        return Decimal(text)
    except InvalidOperation:
        raise InvalidInputError("margin value must be numeric")


def format_plain(value: Decimal) -> str:
    """Shortest dot-decimal representation, without exponent or trailing zeros."""
    if value == 0:
        return "0"
    return format(value.normalize(), "f")


def format_comma(value: Decimal, decimals: int) -> str:
    """Comma-decimal label with a fixed number of decimals."""
    quantum = Decimal(1).scaleb(-decimals)
    text = format(value.quantize(quantum, rounding=ROUND_HALF_UP), "f")
    return text.replace(".", ",")


class ResultCodec:
    """Base class for all codecs.

    ``encode`` and ``decode`` must be implemented by every codec; the numeric
    hooks only by codecs that set ``supports_margin``.
    """

    result_type: ResultType
    supports_margin = False
    allows_negative = True
    decimals = 0

    def encode(self, raw: str) -> str:
        raise NotImplementedError

    def decode(self, canonical: str) -> str:
        return canonical

    @classmethod
    def key(cls, result: str, list_item_id: Optional[int] = None) -> Hashable:
        """Comparison key shared by answers and solutions."""
        return ("v", result)

    def to_number(self, canonical: str) -> Decimal:
        raise InvalidInputError("margin value must be numeric")

    def from_number(self, value: Decimal) -> str:
        raise InvalidInputError("margin value must be numeric")

    def ladder_decimals(self, step: Optional[Decimal]) -> int:
        return self.decimals


class ExactTextCodec(ResultCodec):
    result_type = ResultType.EXACT_TEXT

    def encode(self, raw: str) -> str:
        text = (raw or "").strip()
        if not text:
            raise InvalidInputError("answer must not be empty")
        return text


class ListSelectionCodec(ResultCodec):
    """Answers are list items; the canonical result is the item's label."""

    result_type = ResultType.LIST_SELECTION

    def __init__(self, question_id: int, lookups: LookupCache):
        self.question_id = question_id
        self.lookups = lookups

    def encode(self, raw) -> str:
        try:
            list_item_id = int(str(raw).strip())
        except (TypeError, ValueError):
            raise InvalidInputError("list selection must be a list item id")
        item = self.lookups.list_item(list_item_id)
        if item.question_id != self.question_id:
            raise InvalidInputError(
                f"list item {list_item_id} does not belong to question {self.question_id}"
            )
        return item.label

    @classmethod
    def key(cls, result: str, list_item_id: Optional[int] = None) -> Hashable:
        if list_item_id is None:
            return ("v", result)
        return ("li", list_item_id)


class NumericCodec(ResultCodec):
    """Whole numbers."""

    result_type = ResultType.NUMERIC
    supports_margin = True

    def encode(self, raw: str) -> str:
        value = parse_loose_decimal(raw)
        if value != value.to_integral_value():
            raise InvalidInputError("answer must be a whole number")
        return str(int(value))

    def decode(self, canonical: str) -> str:
        return format_comma(self.to_number(canonical), 0)

    def to_number(self, canonical: str) -> Decimal:
        return parse_loose_decimal(canonical)

    def from_number(self, value: Decimal) -> str:
        return str(int(value.to_integral_value(rounding=ROUND_HALF_UP)))


class DecimalCodec(ResultCodec):
    """Decimal numbers rounded half-up to ``decimals`` places."""

    result_type = ResultType.DECIMAL
    supports_margin = True

    def __init__(self, decimals: int = 2):
        self.decimals = max(0, int(decimals))

    def _round(self, value: Decimal, decimals: int) -> Decimal:
        return value.quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP)

    def encode(self, raw: str) -> str:
        return format_plain(self._round(parse_loose_decimal(raw), self.decimals))

    def decode(self, canonical: str) -> str:
        return format_comma(self.to_number(canonical), self.decimals)

    def to_number(self, canonical: str) -> Decimal:
        return parse_loose_decimal(canonical)

    def from_number(self, value: Decimal) -> str:
        return format_plain(value)

    def ladder_decimals(self, step: Optional[Decimal]) -> int:
        if step is None:
            return self.decimals
        return max(self.decimals, decimals_from_step(step))


class TimeCodec(ResultCodec):
    """Durations; canonical form is a whole number of seconds."""

    result_type = ResultType.TIME
    supports_margin = True
    allows_negative = False

    def encode(self, raw: str) -> str:
        text = (raw or "").strip()
        match = TIME_PATTERN.match(text)
        if match:
            hours, minutes, seconds = (int(g) for g in match.groups())
            return str(hours * 3600 + minutes * 60 + seconds)
        if SECONDS_PATTERN.match(text):
            return str(int(text))
        raise InvalidInputError("time must be given as HH:MM:SS")

    def decode(self, canonical: str) -> str:
        total = max(0, int(self.to_number(canonical)))
        hours, rest = divmod(total, 3600)
        minutes, seconds = divmod(rest, 60)
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}"

    def to_number(self, canonical: str) -> Decimal:
        if not SECONDS_PATTERN.match(str(canonical).strip()):
            raise InvalidInputError("margin value must be numeric")
        return Decimal(int(canonical))

    def from_number(self, value: Decimal) -> str:
        return str(int(value.to_integral_value(rounding=ROUND_HALF_UP)))


class LengthCodec(ResultCodec):
    """Lengths typed in meters; canonical form is whole centimetres."""

    result_type = ResultType.LENGTH
    supports_margin = True
    allows_negative = False

    def encode(self, raw: str) -> str:
        meters = parse_loose_decimal(raw)
        if meters < 0:
            raise InvalidInputError("length must not be negative")
        centimetres = meters * 100
        if centimetres != centimetres.to_integral_value():
            raise InvalidInputError("length allows at most two decimals")
        return str(int(centimetres))

    def decode(self, canonical: str) -> str:
        meters, centimetres = divmod(int(self.to_number(canonical)), 100)
        return f"{meters},{centimetres:02d}"

    def to_number(self, canonical: str) -> Decimal:
        if not SECONDS_PATTERN.match(str(canonical).strip()):
            raise InvalidInputError("margin value must be numeric")
        return Decimal(int(canonical))

    def from_number(self, value: Decimal) -> str:
        return str(int(value.to_integral_value(rounding=ROUND_HALF_UP)))


class ScoreWithDrawCodec(ResultCodec):
    """Match scores such as "2-1"; draws carry a tag ("1-1 draw")."""

    result_type = ResultType.SCORE_WITH_DRAW

    def encode(self, raw: str) -> str:
        match = SCORE_PATTERN.match((raw or "").strip())
        if not match:
            raise InvalidInputError("score must look like 2-1")
        home, away = int(match.group(1)), int(match.group(2))
        tag = (match.group(3) or "").lower()
        if home != away:
            if tag:
                raise InvalidInputError("only a draw can carry a tag")
            return f"{home}-{away}"
        tag = tag or DRAW_TAG
        if tag not in DRAW_TAGS:
            raise InvalidInputError(f"unknown draw tag: {tag}")
        return f"{home}-{away} {tag}"

    def decode(self, canonical: str) -> str:
        score, _, tag = canonical.partition(" ")
        if not tag or tag == DRAW_TAG:
            return score
        return canonical


CODECS: Dict[ResultType, Type[ResultCodec]] = {
    ResultType.EXACT_TEXT: ExactTextCodec,
    ResultType.LIST_SELECTION: ListSelectionCodec,
    ResultType.NUMERIC: NumericCodec,
    ResultType.DECIMAL: DecimalCodec,
    ResultType.TIME: TimeCodec,
    ResultType.LENGTH: LengthCodec,
    ResultType.SCORE_WITH_DRAW: ScoreWithDrawCodec,
}


def codec_for(question: Question, lookups: Optional[LookupCache] = None) -> ResultCodec:
    """Resolve the codec of a question."""
    codec_class = CODECS[question.result_type]
    if codec_class is ListSelectionCodec:
        if lookups is None:
            raise ValueError("List questions need a lookup cache")
        return ListSelectionCodec(question.question_id, lookups)
    if codec_class is DecimalCodec:
        if question.decimals is not None:
            return DecimalCodec(question.decimals)
        if question.step is not None:
            return DecimalCodec(decimals_from_step(question.step))
        return DecimalCodec()
    return codec_class()
