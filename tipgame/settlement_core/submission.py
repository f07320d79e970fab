"""
Turning one raw submission into the answer rows to store.

Non-margin questions produce a single posted row. Margin questions produce
the whole ladder: the center row is the posted one and keeps the user's
exact input as its label, every other rung gets a formatted label.
"""

from typing import List, Optional
from dataclasses import dataclass

from tipgame.settlement_core.codecs import ResultCodec
from tipgame.settlement_core.errors import InvalidInputError
from tipgame.settlement_core.structure import Question
from tipgame.settlement_core.variants import generate_variants


@dataclass(frozen=True)
class AnswerDraft:
    """An answer row that has not been stored yet."""

    question_id: int
    user_id: int
    result: str
    label: str
    posted: bool
    list_item_id: Optional[int] = None


def build_answer_rows(
    question: Question,
    user_id: int,
    raw_input,
    codec: ResultCodec,
    list_item_id: Optional[int] = None,
) -> List[AnswerDraft]:
    """Canonicalize ``raw_input`` and expand it into answer rows.

    Raises InvalidInputError before anything is built when the input does not
    parse under the question's codec.
    """
    if question.compares_list_items:
        selected = list_item_id if list_item_id is not None else raw_input
        result = codec.encode(selected)
        return [
            AnswerDraft(
                question_id=question.question_id,
                user_id=user_id,
                result=result,
                label=result,
                posted=True,
                list_item_id=int(selected),
            )
        ]

    if raw_input is None or not str(raw_input).strip():
        raise InvalidInputError("answer must not be empty")
    label = str(raw_input).strip()
    result = codec.encode(label)

    if not question.has_margin:
        return [
            AnswerDraft(
                question_id=question.question_id,
                user_id=user_id,
                result=result,
                label=label,
                posted=True,
            )
        ]

    if not codec.supports_margin:
        raise InvalidInputError("margin value must be numeric")

    variants = generate_variants(
        center=codec.to_number(result),
        step_count=question.margin,
        step_size=question.step,
        decimals=codec.ladder_decimals(question.step),
        allow_negative=codec.allows_negative,
    )
    rows = []
    for variant in variants:
        variant_result = codec.from_number(variant.value)
        rows.append(
            AnswerDraft(
                question_id=question.question_id,
                user_id=user_id,
                result=variant_result,
                label=label if variant.is_center else codec.decode(variant_result),
                posted=variant.is_center,
            )
        )
    return rows
