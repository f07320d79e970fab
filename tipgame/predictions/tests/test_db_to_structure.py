"""
Tests for database to settlement_core structure transformations.
"""

from decimal import Decimal

from django.test import TestCase

from tipgame.predictions.db_to_structure import (
    answer_to_structure,
    list_item_to_structure,
    question_to_structure,
    roster_to_structure,
    solution_to_structure,
)
from tipgame.predictions.models import Answer, Solution, SquadMember
from tipgame.predictions.tests.testutils import (
    create_event,
    create_list_items,
    create_question,
    create_season,
    create_squad,
    create_user,
)
from tipgame.settlement_core.structure import ResultType


class DbToStructureTests(TestCase):
    def setUp(self):
        self.season = create_season()
        self.event = create_event(self.season)

    def test_question_to_structure(self):
        main = create_question(
            self.event, group_code=4, result_type=ResultType.DECIMAL, points=15,
            margin=3, step="0.05", decimals=2,
        )
        bonus = create_question(self.event, group_code=4, parent=main, points=5)

        structure = question_to_structure(main)
        self.assertEqual(structure.question_id, main.pk)
        self.assertEqual(structure.event_id, self.event.pk)
        self.assertEqual(structure.result_type, ResultType.DECIMAL)
        self.assertEqual(structure.points, 15.0)
        self.assertEqual(structure.step, Decimal("0.05"))
        self.assertTrue(structure.is_main)
        self.assertTrue(structure.has_margin)

        child = question_to_structure(bonus)
        self.assertEqual(child.parent_id, main.pk)
        self.assertFalse(child.is_main)
        self.assertFalse(child.has_margin)

    def test_list_item_answer_and_solution(self):
        question = create_question(self.event, result_type=ResultType.LIST_SELECTION)
        (item,) = create_list_items(question, "Pogacar")
        user = create_user("alice")
        answer = Answer.objects.create(
            question=question, user=user, result="Pogacar", label="Pogacar",
            list_item=item, gray=True,
        )
        solution = Solution.objects.create(question=question, result="Pogacar", list_item=item)

        self.assertEqual(list_item_to_structure(item).label, "Pogacar")
        structure = answer_to_structure(answer)
        self.assertEqual(structure.answer_id, answer.pk)
        self.assertEqual(structure.list_item_id, item.pk)
        self.assertTrue(structure.posted)
        self.assertTrue(structure.gray)
        self.assertEqual(solution_to_structure(solution).list_item_id, item.pk)

    def test_roster_to_structure(self):
        alice, bob, carol = (create_user(n) for n in ["alice", "bob", "carol"])
        create_squad(self.season, "Peloton", carol, captain=carol)
        create_squad(self.season, "Breakaway", bob, alice, captain=bob)

        squads = roster_to_structure(
            SquadMember.objects.filter(season=self.season).select_related("squad")
        )

        self.assertEqual([s.name for s in squads], ["Peloton", "Breakaway"])
        self.assertEqual(squads[1].size, 2)
        self.assertEqual([m.user_id for m in squads[1].members], [alice.pk, bob.pk])
        self.assertEqual(
            [m.is_captain for m in squads[1].members], [False, True]
        )
