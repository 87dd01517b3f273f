"""
Batch Planner
Splits a large request into typed sub-batches
FILE: quizgen/services/batch_planner.py
"""
import math
import logging
from typing import List

from quizgen.models.generation import BatchSpec, QuestionType

logger = logging.getLogger(__name__)


MULTIPLE_CHOICE_SHARE = 0.5
FILL_BLANK_SHARE = 0.3


def plan_batches(total_count: int, difficulty: int = 1) -> List[BatchSpec]:
    """
    Build the batch plan for `total_count` questions
    
    Multiple-choice takes ceil(50%), fill-blank ceil(30%) and essay gets
    whatever is left. Only the remainder absorbs rounding, so the counts
    always sum to total_count. Tiers that would come out empty are omitted.
    
    Args:
        total_count: Total number of questions to plan for
        difficulty: Base difficulty; fill-blank and essay use one level higher
    
    Returns:
        Ordered list of BatchSpec (empty when total_count <= 0)
    
    Example:
        >>> [(b.type.value, b.count) for b in plan_batches(40)]
        [('multiple-choice', 20), ('fill-blank', 12), ('essay', 8)]
    """
    if total_count <= 0:
        return []
    
    multiple_choice = math.ceil(total_count * MULTIPLE_CHOICE_SHARE)
    # ceil can overshoot on tiny totals (2 -> 1 + 1 + 0); cap at what is left
    fill_blank = min(math.ceil(total_count * FILL_BLANK_SHARE), total_count - multiple_choice)
    essay = total_count - multiple_choice - fill_blank
    
    plan = [BatchSpec(type=QuestionType.MULTIPLE_CHOICE, count=multiple_choice, difficulty=difficulty)]
    
    if fill_blank > 0:
        plan.append(BatchSpec(type=QuestionType.FILL_BLANK, count=fill_blank, difficulty=difficulty + 1))
    
    if essay > 0:
        plan.append(BatchSpec(type=QuestionType.ESSAY, count=essay, difficulty=difficulty + 1))
    
    logger.debug(
        f"📦 Batch plan for {total_count}: "
        + ", ".join(f"{b.type.value}={b.count}" for b in plan)
    )
    
    return plan
