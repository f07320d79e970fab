"""
Tests for result codecs and submission expansion.
"""

import unittest
from decimal import Decimal

from tipgame.settlement_core.codecs import (
    DecimalCodec,
    ExactTextCodec,
    LengthCodec,
    ListSelectionCodec,
    NumericCodec,
    ScoreWithDrawCodec,
    TimeCodec,
    codec_for,
    parse_loose_decimal,
)
from tipgame.settlement_core.errors import InvalidInputError, NotFoundError
from tipgame.settlement_core.lookups import LookupCache
from tipgame.settlement_core.structure import ListItem, Question, ResultType
from tipgame.settlement_core.submission import build_answer_rows


def make_question(result_type, **kwargs):
    defaults = dict(question_id=1, event_id=1, group_code=1, points=20)
    defaults.update(kwargs)
    return Question(result_type=result_type, **defaults)


class LooseDecimalTests(unittest.TestCase):
    def test_separators(self):
        self.assertEqual(parse_loose_decimal("394,5"), Decimal("394.5"))
        self.assertEqual(parse_loose_decimal("394.5"), Decimal("394.5"))
        self.assertEqual(parse_loose_decimal("1.234,5"), Decimal("1234.5"))
        self.assertEqual(parse_loose_decimal("1,234.5"), Decimal("1234.5"))
        self.assertEqual(parse_loose_decimal(" -7 "), Decimal("-7"))

    def test_rejects_non_numeric(self):
        for raw in ["", "abc", "12a", "1..", None]:
            with self.subTest(raw=raw):
                with self.assertRaises(InvalidInputError) as ctx:
                    parse_loose_decimal(raw)
                self.assertEqual(ctx.exception.message, "margin value must be numeric")


class CodecTests(unittest.TestCase):
    def test_exact_text(self):
        codec = ExactTextCodec()
        self.assertEqual(codec.encode("  Pogacar "), "Pogacar")
        self.assertEqual(codec.decode("Pogacar"), "Pogacar")
        with self.assertRaises(InvalidInputError):
            codec.encode("   ")

    def test_numeric(self):
        codec = NumericCodec()
        self.assertEqual(codec.encode("42"), "42")
        self.assertEqual(codec.encode("42,0"), "42")
        self.assertEqual(codec.decode("42"), "42")
        with self.assertRaises(InvalidInputError):
            codec.encode("42,5")

    def test_decimal(self):
        codec = DecimalCodec(decimals=2)
        self.assertEqual(codec.encode("394,5"), "394.5")
        self.assertEqual(codec.encode("394,555"), "394.56")
        self.assertEqual(codec.encode("10,00"), "10")
        self.assertEqual(codec.decode("394.5"), "394,50")
        with self.assertRaises(InvalidInputError):
            codec.encode("fast")

    def test_time(self):
        codec = TimeCodec()
        self.assertEqual(codec.encode("01:02:03"), "3723")
        self.assertEqual(codec.encode("123:00:00"), "442800")
        self.assertEqual(codec.encode("3723"), "3723")
        self.assertEqual(codec.decode("3723"), "01:02:03")
        self.assertFalse(codec.allows_negative)
        for raw in ["1:60:00", "01:02", "-5", "a:b:c"]:
            with self.subTest(raw=raw):
                with self.assertRaises(InvalidInputError):
                    codec.encode(raw)

    def test_length(self):
        codec = LengthCodec()
        self.assertEqual(codec.encode("7,23"), "723")
        self.assertEqual(codec.encode("7.2"), "720")
        self.assertEqual(codec.decode("723"), "7,23")
        self.assertEqual(codec.decode("705"), "7,05")
        with self.assertRaises(InvalidInputError):
            codec.encode("7,235")
        with self.assertRaises(InvalidInputError):
            codec.encode("-1")

    def test_score_with_draw(self):
        codec = ScoreWithDrawCodec()
        self.assertEqual(codec.encode("2-1"), "2-1")
        self.assertEqual(codec.encode(" 2 - 1 "), "2-1")
        self.assertEqual(codec.encode("1-1"), "1-1 draw")
        self.assertEqual(codec.encode("1-1 TWNV"), "1-1 twnv")
        self.assertEqual(codec.decode("1-1 draw"), "1-1")
        self.assertEqual(codec.decode("1-1 twnv"), "1-1 twnv")
        with self.assertRaises(InvalidInputError):
            codec.encode("2-1 twnv")
        with self.assertRaises(InvalidInputError):
            codec.encode("1-1 later")
        with self.assertRaises(InvalidInputError):
            codec.encode("two-one")

    def test_list_selection(self):
        items = {
            7: ListItem(list_item_id=7, question_id=1, label="Belgium"),
            8: ListItem(list_item_id=8, question_id=2, label="France"),
        }
        lookups = LookupCache(lambda qid: None, items.get)
        codec = ListSelectionCodec(question_id=1, lookups=lookups)
        self.assertEqual(codec.encode(7), "Belgium")
        self.assertEqual(codec.key("Belgium", 7), ("li", 7))
        with self.assertRaises(InvalidInputError):
            codec.encode(8)
        with self.assertRaises(NotFoundError):
            codec.encode(99)
        with self.assertRaises(InvalidInputError):
            codec.encode("Belgium")

    def test_codec_for_resolves_by_result_type(self):
        self.assertIsInstance(codec_for(make_question(ResultType.TIME)), TimeCodec)
        self.assertIsInstance(codec_for(make_question(ResultType.SCORE_WITH_DRAW)), ScoreWithDrawCodec)
        codec = codec_for(make_question(ResultType.DECIMAL, step=Decimal("0.25")))
        self.assertEqual(codec.decimals, 2)
        codec = codec_for(make_question(ResultType.DECIMAL, decimals=1))
        self.assertEqual(codec.decimals, 1)
        with self.assertRaises(ValueError):
            codec_for(make_question(ResultType.LIST_SELECTION))


class BuildAnswerRowsTests(unittest.TestCase):
    """Expanding one submission into stored rows."""

    def test_time_margin_ladder(self):
        question = make_question(ResultType.TIME, margin=2, step=Decimal(60))
        rows = build_answer_rows(question, 5, "01:02:03", TimeCodec())

        self.assertEqual([r.result for r in rows], ["3603", "3663", "3723", "3783", "3843"])
        posted = [r for r in rows if r.posted]
        self.assertEqual(len(posted), 1)
        self.assertEqual(posted[0].result, "3723")
        self.assertEqual(posted[0].label, "01:02:03")
        self.assertEqual(
            [r.label for r in rows if not r.posted],
            ["01:00:03", "01:01:03", "01:03:03", "01:04:03"],
        )

    def test_center_keeps_exact_input(self):
        question = make_question(ResultType.TIME, margin=1, step=Decimal(60))
        rows = build_answer_rows(question, 5, "3723", TimeCodec())
        posted = [r for r in rows if r.posted][0]
        self.assertEqual(posted.label, "3723")

    def test_decimal_margin_ladder(self):
        question = make_question(ResultType.DECIMAL, margin=2, step=Decimal("0.5"))
        rows = build_answer_rows(question, 5, "394,5", codec_for(question))
        self.assertEqual(
            [r.result for r in rows], ["393.5", "394", "394.5", "395", "395.5"]
        )
        self.assertEqual([r.label for r in rows if not r.posted], ["393,5", "394,0", "395,0", "395,5"])

    def test_length_ladder_never_negative(self):
        question = make_question(ResultType.LENGTH, margin=3, step=Decimal(5))
        rows = build_answer_rows(question, 5, "0,05", LengthCodec())
        self.assertEqual([r.result for r in rows], ["0", "5", "10", "15", "20"])

    def test_non_margin_single_posted_row(self):
        question = make_question(ResultType.SCORE_WITH_DRAW)
        rows = build_answer_rows(question, 5, "1-1", ScoreWithDrawCodec())
        self.assertEqual(len(rows), 1)
        self.assertTrue(rows[0].posted)
        self.assertEqual(rows[0].result, "1-1 draw")
        self.assertEqual(rows[0].label, "1-1")

    def test_margin_on_text_question_rejected(self):
        question = make_question(ResultType.EXACT_TEXT, margin=2, step=Decimal(1))
        with self.assertRaises(InvalidInputError) as ctx:
            build_answer_rows(question, 5, "Pogacar", ExactTextCodec())
        self.assertEqual(ctx.exception.message, "margin value must be numeric")

    def test_invalid_input_builds_nothing(self):
        question = make_question(ResultType.DECIMAL, margin=2, step=Decimal("0.5"))
        with self.assertRaises(InvalidInputError):
            build_answer_rows(question, 5, "fast", codec_for(question))

    def test_list_selection_row(self):
        items = {3: ListItem(list_item_id=3, question_id=1, label="Red")}
        lookups = LookupCache(lambda qid: None, items.get)
        question = make_question(ResultType.LIST_SELECTION)
        rows = build_answer_rows(
            question, 5, None, codec_for(question, lookups), list_item_id=3
        )
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0].result, "Red")
        self.assertEqual(rows[0].list_item_id, 3)


if __name__ == "__main__":
    unittest.main()
