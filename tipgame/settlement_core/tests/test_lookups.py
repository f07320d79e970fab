import unittest

from tipgame.settlement_core.errors import NotFoundError
from tipgame.settlement_core.lookups import LookupCache
from tipgame.settlement_core.structure import ListItem, Question, ResultType


class LookupCacheTests(unittest.TestCase):
    def setUp(self):
        self.loads = []
        self.questions = {
            1: Question(1, 1, 1, ResultType.EXACT_TEXT, points=20),
        }
        self.items = {
            5: ListItem(5, 1, "Belgium"),
        }
        self.cache = LookupCache(self.load_question, self.load_item)

    def load_question(self, question_id):
        self.loads.append(("question", question_id))
        return self.questions.get(question_id)

    def load_item(self, list_item_id):
        self.loads.append(("item", list_item_id))
        return self.items.get(list_item_id)

    def test_loads_once(self):
        self.cache.question(1)
        self.cache.question(1)
        self.assertEqual(self.cache.list_item_label(5), "Belgium")
        self.assertEqual(self.cache.list_item_label(5), "Belgium")
        self.assertEqual(self.loads, [("question", 1), ("item", 5)])
        self.assertEqual(len(self.cache), 2)

    def test_missing_ids_raise_and_are_not_cached(self):
        with self.assertRaises(NotFoundError):
            self.cache.question(2)
        self.questions[2] = Question(2, 1, 2, ResultType.TIME)
        self.assertEqual(self.cache.question(2).result_type, ResultType.TIME)

    def test_invalidation(self):
        self.cache.list_item_label(5)
        self.items[5] = ListItem(5, 1, "Belgie")
        self.assertEqual(self.cache.list_item_label(5), "Belgium")

        self.cache.invalidate_list_item(5)
        self.assertEqual(self.cache.list_item_label(5), "Belgie")

        self.cache.question(1)
        self.cache.invalidate_question()
        self.cache.question(1)
        self.assertEqual(self.loads.count(("question", 1)), 2)

    def test_clear(self):
        self.cache.question(1)
        self.cache.list_item(5)
        self.cache.clear()
        self.assertEqual(len(self.cache), 0)


if __name__ == "__main__":
    unittest.main()
