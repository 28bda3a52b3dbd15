import json
from typing import List

from pingtopass.core.errors import ValidationError
from pingtopass.models.question import Question


def parse_multi_select(selected_answer: str) -> List[str]:
    """
    Parse a multi-select answer, a JSON array of option ids such as '["a", "c"]'.

    Raises:
        ValidationError: the value is not a JSON array of strings
    """
    try:
        selected = json.loads(selected_answer)
    except json.JSONDecodeError:
        raise ValidationError("Multi-select answers must be a JSON array of option ids")
    if not isinstance(selected, list) or not all(isinstance(item, str) for item in selected):
        raise ValidationError("Multi-select answers must be a JSON array of option ids")
    return selected


def grade_answer(question: Question, selected_answer: str) -> bool:
    """Return whether ``selected_answer`` is correct for ``question``."""
    correct_ids = question.correct_answer_ids
    if question.type == "multi_select":
        selected = parse_multi_select(selected_answer)
        return len(selected) == len(set(selected)) and set(selected) == set(correct_ids)
    return selected_answer in correct_ids
