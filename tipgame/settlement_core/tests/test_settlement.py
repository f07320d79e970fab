"""
Tests for bundle settlement using the event builder and fluent assertions.
No database, no Django models - just pure function tests.
"""

import unittest

from tipgame.settlement_core.assertions import assert_report
from tipgame.settlement_core.builder import EventBuilder
from tipgame.settlement_core.settlement import settle, settle_bundle
from tipgame.settlement_core.structure import ResultType, SettlementStatus


class SimpleBundleTests(unittest.TestCase):
    """Bundles made of a single main question."""

    def test_budget_split_between_matching_answers(self):
        event = (
            EventBuilder()
            .main("winner", points=20)
            .answer("alice", "winner", "Pogacar")
            .answer("bob", "winner", "Pogacar")
            .answer("carol", "winner", "Pogacar ")
            .answer("dave", "winner", "Vingegaard")
            .solution("winner", "Pogacar")
            .build()
        )
        report = event.settle()

        (
            assert_report(report, event)
            .settled()
            .covers_every_answer()
            .total_points(20)
        )
        for name in ["alice", "bob", "carol"]:
            assert_report(report, event).player(name).points(20 / 3).correct("winner")
        assert_report(report, event).player("dave").points(0).incorrect("winner")

    def test_losing_rows_have_zero_points(self):
        event = (
            EventBuilder()
            .main("score", result_type=ResultType.SCORE_WITH_DRAW, points=20)
            .answer("alice", "score", "2-1")
            .answer("bob", "score", "1-1")
            .answer("carol", "score", "1-1 twnv")
            .solution("score", "1-1")
            .build()
        )
        report = event.settle()
        assert_report(report, event).settled().total_points(20)
        assert_report(report, event).player("bob").points(20).correct("score")
        assert_report(report, event).player("alice").points(0).incorrect("score")
        assert_report(report, event).player("carol").points(0).incorrect("score")
        for allocation in report.allocations:
            if not allocation.correct:
                self.assertEqual(allocation.points, 0)
                self.assertEqual(allocation.score, 0)

    def test_no_winner_allocates_nothing(self):
        event = (
            EventBuilder()
            .main("winner")
            .answer("alice", "winner", "Evenepoel")
            .solution("winner", "Pogacar")
            .build()
        )
        report = event.settle()
        assert_report(report, event).settled().total_points(0)
        self.assertEqual(len(report.allocations), 1)

    def test_several_accepted_solutions_share_one_budget(self):
        event = (
            EventBuilder()
            .main("winner", points=20)
            .answer("alice", "winner", "Pogacar")
            .answer("bob", "winner", "Vingegaard")
            .answer("carol", "winner", "Evenepoel")
            .solution("winner", "Pogacar")
            .solution("winner", "Vingegaard")
            .build()
        )
        report = event.settle()
        assert_report(report, event).total_points(20)
        assert_report(report, event).player("alice").points(10)
        assert_report(report, event).player("bob").points(10)
        assert_report(report, event).player("carol").points(0)

    def test_list_questions_compare_list_items(self):
        event = (
            EventBuilder()
            .main("country", result_type=ResultType.LIST_SELECTION, points=20)
            .list_item("country", "Belgium")
            .list_item("country", "France")
            .answer("alice", "country", "Belgium")
            .answer("bob", "country", "France")
            .solution("country", "Belgium")
            .build()
        )
        report = event.settle()
        assert_report(report, event).player("alice").points(20).correct("country")
        assert_report(report, event).player("bob").points(0)

    def test_gray_rows_never_win(self):
        event = (
            EventBuilder()
            .main("winner", points=20)
            .answer("alice", "winner", "Pogacar")
            .answer("bob", "winner", "Pogacar", gray=True)
            .solution("winner", "Pogacar")
            .build()
        )
        report = event.settle()
        assert_report(report, event).covers_every_answer()
        assert_report(report, event).player("alice").points(20)
        assert_report(report, event).player("bob").points(0).incorrect("winner")

    def test_pending_without_solution(self):
        event = (
            EventBuilder()
            .main("winner")
            .answer("alice", "winner", "Pogacar")
            .build()
        )
        report = event.settle()
        assert_report(report, event).pending()
        self.assertEqual(report.pending_question_ids, (event.question_id("winner"),))
        self.assertEqual(settle(event.bundle(1), event.solutions, event.answers), ())

    def test_rerun_is_identical(self):
        event = (
            EventBuilder()
            .main("time", result_type=ResultType.TIME, points=12, margin=1, step=60)
            .bonus("score", points=8, result_type=ResultType.SCORE_WITH_DRAW)
            .answer("alice", "time", "01:00:00")
            .answer("bob", "time", "01:01:00")
            .answer("alice", "score", "2-0")
            .answer("bob", "score", "2-0")
            .solution("time", "01:01:00")
            .solution("score", "2-0")
            .build()
        )
        first = event.settle()
        settled = event.apply(first)
        second = settled.settle()
        self.assertEqual(first, second)
        self.assertEqual(repr(first.allocations), repr(second.allocations))


class MarginTests(unittest.TestCase):
    """Margin questions credit every ladder row."""

    def build_event(self):
        return (
            EventBuilder()
            .main("time", result_type=ResultType.TIME, points=20, margin=2, step=60)
            .answer("alice", "time", "01:02:03")
            .answer("bob", "time", "01:03:03")
            .answer("carol", "time", "02:00:00")
            .solution("time", "01:01:03")
        )

    def test_variant_match_wins(self):
        event = self.build_event().build()
        report = event.settle()

        assert_report(report, event).settled().covers_every_answer().total_points(20)
        (
            assert_report(report, event)
            .player("alice")
            .points(10)
            .winning_label("time", "01:01:03")
        )
        assert_report(report, event).player("bob").points(10)
        assert_report(report, event).player("carol").points(0).incorrect("time")

    def test_posted_row_preferred(self):
        event = self.build_event().answer("dave", "time", "01:01:03").build()
        report = event.settle()
        assert_report(report, event).total_points(20)
        assert_report(report, event).player("dave").points(20 / 3).winning_label(
            "time", "01:01:03"
        )

    def test_one_winning_row_per_user(self):
        event = (
            EventBuilder()
            .main("distance", result_type=ResultType.LENGTH, points=20, margin=2, step=10)
            .answer("alice", "distance", "7,00")
            .solution("distance", "6,90")
            .solution("distance", "7,10")
            .build()
        )
        report = event.settle()
        winners = [a for a in report.allocations if a.correct]
        self.assertEqual(len(winners), 1)
        self.assertEqual(winners[0].points, 20)

    def test_resubmission_replaces_ladder(self):
        event = (
            self.build_event()
            .answer("alice", "time", "03:00:00")
            .build()
        )
        alice = event.player_id("alice")
        rows = [a for a in event.answers if a.user_id == alice]
        self.assertEqual(len(rows), 5)
        self.assertEqual(len([r for r in rows if r.posted]), 1)

        report = event.settle()
        assert_report(report, event).player("alice").points(0)
        assert_report(report, event).player("bob").points(20)


class BundleWithBonusTests(unittest.TestCase):
    """Main question plus bonus questions sharing the rest of the ceiling."""

    def test_two_users_matching_main_and_bonus(self):
        event = (
            EventBuilder()
            .main("winner", points=12)
            .bonus("gap", points=8)
            .answer("alice", "winner", "Pogacar")
            .answer("bob", "winner", "Pogacar")
            .answer("alice", "gap", "1 minute")
            .answer("bob", "gap", "1 minute")
            .solution("winner", "Pogacar")
            .solution("gap", "1 minute")
            .build()
        )
        report = event.settle()

        assert_report(report, event).settled().covers_every_answer().total_points(20)
        for name in ["alice", "bob"]:
            (
                assert_report(report, event)
                .player(name)
                .points(6, question="winner")
                .points(4, question="gap")
                .correct("gap")
            )

    def test_partial_match_wins_nothing_on_bonuses(self):
        event = (
            EventBuilder()
            .main("winner", points=12)
            .bonus("gap", points=4)
            .bonus("team", points=4)
            .answer("alice", "winner", "Pogacar")
            .answer("alice", "gap", "1 minute")
            .answer("alice", "team", "UAE")
            .answer("bob", "winner", "Pogacar")
            .answer("bob", "gap", "1 minute")
            .answer("bob", "team", "Visma")
            .answer("carol", "winner", "Vingegaard")
            .answer("carol", "gap", "1 minute")
            .answer("carol", "team", "UAE")
            .solution("winner", "Pogacar")
            .solution("gap", "1 minute")
            .solution("team", "UAE")
            .build()
        )
        report = event.settle()

        assert_report(report, event).total_points(20)
        (
            assert_report(report, event)
            .player("alice")
            .points(6, question="winner")
            .points(4, question="gap")
            .points(4, question="team")
        )
        (
            assert_report(report, event)
            .player("bob")
            .points(6, question="winner")
            .points(0, question="gap")
            .correct("gap")
            .incorrect("team")
        )
        assert_report(report, event).player("carol").points(0).correct("gap")

    def test_bonus_without_winners_leaves_remainder_unallocated(self):
        event = (
            EventBuilder()
            .main("winner", points=12)
            .bonus("gap", points=8)
            .answer("alice", "winner", "Pogacar")
            .answer("alice", "gap", "2 minutes")
            .solution("winner", "Pogacar")
            .solution("gap", "1 minute")
            .build()
        )
        report = event.settle()
        assert_report(report, event).total_points(12)

    def test_subs_only_carry_the_correct_flag(self):
        event = (
            EventBuilder()
            .main("winner", points=20)
            .sub("second")
            .sub("third")
            .answer("alice", "winner", "Pogacar")
            .answer("alice", "second", "Vingegaard")
            .answer("alice", "third", "Evenepoel")
            .answer("bob", "second", "Vingegaard")
            .solution("winner", "Pogacar")
            .solution("second", "Vingegaard")
            .build()
        )
        report = event.settle()

        assert_report(report, event).settled().covers_every_answer().total_points(20)
        (
            assert_report(report, event)
            .player("alice")
            .points(20, question="winner")
            .points(0, question="second")
            .correct("second")
            .incorrect("third")
        )
        assert_report(report, event).player("bob").points(0).correct("second")
        self.assertEqual(report.pending_question_ids, (event.question_id("third"),))

    def test_pending_main_leaves_bonus_untouched(self):
        event = (
            EventBuilder()
            .main("winner", points=12)
            .bonus("gap", points=8)
            .answer("alice", "gap", "1 minute")
            .solution("gap", "1 minute")
            .build()
        )
        report = event.settle()
        self.assertEqual(report.status, SettlementStatus.PENDING)
        self.assertEqual(report.allocations, ())


class FallbackBundleTests(unittest.TestCase):
    """Groups with several parent-less questions settle each one alone."""

    def build_event(self):
        return (
            EventBuilder()
            .main("winner", points=12)
            .sub("second")
            .orphan("duplicate", group_code=1, points=5)
            .answer("alice", "winner", "Pogacar")
            .answer("bob", "duplicate", "yes")
            .answer("alice", "second", "Vingegaard")
        )

    def test_every_parentless_question_gets_the_ceiling(self):
        event = (
            self.build_event()
            .solution("winner", "Pogacar")
            .solution("duplicate", "yes")
            .solution("second", "Vingegaard")
            .build()
        )
        with self.assertLogs("tipgame.settlement_core.bundles", level="WARNING"):
            report = event.settle()

        assert_report(report, event).settled().covers_every_answer().total_points(40)
        assert_report(report, event).player("alice").points(20).correct("second")
        assert_report(report, event).player("bob").points(20)
        self.assertEqual(len(report.warnings), 1)

    def test_pending_until_every_parentless_question_is_solved(self):
        event = self.build_event().solution("winner", "Pogacar").build()
        with self.assertLogs("tipgame.settlement_core.bundles", level="WARNING"):
            report = settle_bundle(event.bundle(1), event.solutions, event.answers)
        self.assertEqual(report.status, SettlementStatus.PENDING)


class CorrectionTests(unittest.TestCase):
    """Declaring a corrected solution recomputes allocations from scratch."""

    def test_correction_flips_rows(self):
        builder = (
            EventBuilder()
            .main("winner", points=20)
            .answer("alice", "winner", "Pogacar")
            .answer("bob", "winner", "Vingegaard")
            .answer("carol", "winner", "Pogacar")
            .solution("winner", "Pogacar")
        )
        first = builder.build().settle()
        event = builder.build().apply(first)
        assert_report(first, event).player("alice").points(10)

        corrected_event = builder.correct_solution("winner", "Vingegaard").build()
        second = corrected_event.apply(first).settle()

        assert_report(second, corrected_event).total_points(20)
        assert_report(second, corrected_event).player("bob").points(20).correct("winner")
        for name in ["alice", "carol"]:
            assert_report(second, corrected_event).player(name).points(0).incorrect("winner")


if __name__ == "__main__":
    unittest.main()
