"""
Lookup cache for question metadata and list item labels.

Submissions resolve the same questions and list items over and over. The
cache is an explicit object owned by whoever serves submissions; it is
invalidated through ``invalidate_question`` / ``invalidate_list_item`` when
the underlying metadata changes.
"""

from typing import Callable, Dict, Optional

from tipgame.settlement_core.errors import NotFoundError
from tipgame.settlement_core.structure import ListItem, Question


class LookupCache:
    """Caches loaded questions and list items by id.

    Loaders return None for unknown ids; misses are not cached.
    """

    def __init__(
        self,
        question_loader: Callable[[int], Optional[Question]],
        list_item_loader: Callable[[int], Optional[ListItem]],
    ):
        self._load_question = question_loader
        self._load_list_item = list_item_loader
        self._questions: Dict[int, Question] = {}
        self._list_items: Dict[int, ListItem] = {}

    def question(self, question_id: int) -> Question:
        cached = self._questions.get(question_id)
        if cached is not None:
            return cached
        question = self._load_question(question_id)
        if question is None:
            raise NotFoundError(f"Question not found: {question_id}")
        self._questions[question_id] = question
        return question

    def list_item(self, list_item_id: int) -> ListItem:
        cached = self._list_items.get(list_item_id)
        if cached is not None:
            return cached
        item = self._load_list_item(list_item_id)
        if item is None:
            raise NotFoundError(f"List item not found: {list_item_id}")
        self._list_items[list_item_id] = item
        return item

    def list_item_label(self, list_item_id: int) -> str:
        return self.list_item(list_item_id).label

    def invalidate_question(self, question_id: Optional[int] = None) -> None:
        """Forget one question, or all of them when no id is given."""
        if question_id is None:
            self._questions.clear()
        else:
            self._questions.pop(question_id, None)

    def invalidate_list_item(self, list_item_id: Optional[int] = None) -> None:
        if list_item_id is None:
            self._list_items.clear()
        else:
            self._list_items.pop(list_item_id, None)

    def clear(self) -> None:
        self._questions.clear()
        self._list_items.clear()

    def __len__(self) -> int:
        return len(self._questions) + len(self._list_items)
