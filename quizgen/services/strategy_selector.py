"""
Strategy Selector
Maps a requested question count to the initial generation strategy
"""
from quizgen.models.generation import Strategy

# Small asks tolerate the short quick deadline; large asks are split into batches
QUICK_MAX_COUNT = 15
OPTIMIZED_MAX_COUNT = 30


def select_strategy(count: int) -> Strategy:
    """
    Pick the initial strategy for a request of `count` questions
    
    Total over all integers: zero and negative counts map to QUICK.
    
    Args:
        count: Requested number of questions
    
    Returns:
        QUICK for count <= 15, OPTIMIZED for 16-30, BATCH above 30
    """
    if count <= QUICK_MAX_COUNT:
        return Strategy.QUICK
    if count <= OPTIMIZED_MAX_COUNT:
        return Strategy.OPTIMIZED
    return Strategy.BATCH


def recommended_question_count(material_length: int) -> int:
    """Suggested question count for material of the given character length"""
    if material_length < 1000:
        return 15
    if material_length < 5000:
        return 25
    if material_length < 10000:
        return 35
    return 50
