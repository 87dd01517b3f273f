"""
Response Parser
Validates generation-service envelopes and normalizes question payloads
"""
import uuid
import logging
from typing import List, Dict, Any, Optional, Tuple

from pydantic import ValidationError

from quizgen.models.generation import (
    BatchDetail,
    BatchFailure,
    BatchSpec,
    BatchSummary,
    Question,
    QuestionType,
    Strategy,
)

logger = logging.getLogger(__name__)


class ResponseParseError(Exception):
    """Base exception for response parsing errors"""
    pass


class ServiceFailureError(ResponseParseError):
    """Raised when the service explicitly reports success: false"""
    pass


class InvalidPayloadError(ResponseParseError):
    """Raised when the envelope or question list is malformed"""
    pass


def _coerce_type(value: Any, has_options: bool) -> QuestionType:
    try:
        return QuestionType(value)
    except (TypeError, ValueError):
        return QuestionType.MULTIPLE_CHOICE if has_options else QuestionType.ESSAY


def _coerce_int(value: Any, default: int = 1) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _normalize_question(item: Dict[str, Any], strategy: Strategy) -> Optional[Question]:
    """
    Normalize one service question into a Question

    The service uses `question` for the prompt and may carry the answer in
    correctAnswer, answer or sampleAnswer depending on the question type.

    Returns:
        Question, or None when the item has no usable prompt text or a
        field fails validation
    """
    prompt = item.get("question") or item.get("text")
    if not isinstance(prompt, str) or not prompt.strip():
        return None

    raw_options = item.get("options") or []
    options = [str(opt) for opt in raw_options] if isinstance(raw_options, list) else []

    correct = item.get("correctAnswer")
    if correct is None:
        correct = item.get("answer")
    if correct is None:
        correct = item.get("sampleAnswer")
    if correct is not None and not isinstance(correct, (int, str)):
        correct = str(correct)

    try:
        return Question(
            id=str(item.get("id") or f"q_{uuid.uuid4().hex[:12]}"),
            type=_coerce_type(item.get("type"), bool(options)),
            prompt=prompt.strip(),
            options=options,
            correct_answer=correct,
            explanation=item.get("explanation"),
            difficulty=_coerce_int(item.get("difficulty")),
            concept=item.get("concept"),
            provenance=strategy,
        )
    except ValidationError as e:
        logger.debug(f"Dropping invalid question {item.get('id')}: {e}")
        return None


def _summary_from_service(
    raw: Dict[str, Any],
    questions: List[Question],
    batches: List[BatchSpec]
) -> BatchSummary:
    """Build a BatchSummary from the service's own summary block"""
    details = []
    for entry in raw.get("batchDetails") or []:
        if not isinstance(entry, dict):
            continue
        try:
            details.append(BatchDetail(type=QuestionType(entry.get("type")), count=int(entry.get("count") or 0)))
        except (ValueError, TypeError):
            continue

    # The service reports only a count of failures; name them from the plan
    remaining = [d.type for d in details]
    failures = []
    for index, batch in enumerate(batches):
        if batch.type in remaining:
            remaining.remove(batch.type)
        else:
            failures.append(BatchFailure(batch_index=index, type=batch.type))

    failed_count = _coerce_int(raw.get("failedBatches"), default=len(failures))

    return BatchSummary(
        total_questions=_coerce_int(raw.get("totalQuestions"), default=len(questions)),
        successful_batches=_coerce_int(raw.get("successfulBatches"), default=len(details)),
        failed_batches=failed_count,
        batch_details=details,
        failures=failures,
    )


def summarize_batches(questions: List[Question], batches: List[BatchSpec]) -> BatchSummary:
    """
    Derive a BatchSummary from the returned questions

    Used when the service omits its summary: a planned batch counts as
    failed when no question of its type came back.
    """
    counts: Dict[QuestionType, int] = {}
    for q in questions:
        counts[q.type] = counts.get(q.type, 0) + 1

    details = []
    failures = []
    for index, batch in enumerate(batches):
        returned = counts.get(batch.type, 0)
        if returned > 0:
            details.append(BatchDetail(type=batch.type, count=returned))
        else:
            failures.append(BatchFailure(batch_index=index, type=batch.type, error="no questions returned"))

    return BatchSummary(
        total_questions=len(questions),
        successful_batches=len(details),
        failed_batches=len(failures),
        batch_details=details,
        failures=failures,
    )


def parse_generation_response(
    envelope: Any,
    strategy: Strategy,
    batches: Optional[List[BatchSpec]] = None
) -> Tuple[List[Question], Optional[BatchSummary]]:
    """
    Parse and validate a generation-service response

    Args:
        envelope: Decoded JSON body {success, data?: {questions, metadata?, summary?}, message?}
        strategy: Strategy that produced the response (becomes question provenance)
        batches: Batch plan for BATCH responses, used to attribute failed sub-batches

    Returns:
        Tuple of (questions, batch_summary); summary is None for non-batch strategies

    Raises:
        ServiceFailureError: success flag is false
        InvalidPayloadError: data or data.questions missing or not a list
    """
    if not isinstance(envelope, dict):
        raise InvalidPayloadError(f"Expected a JSON object, got {type(envelope).__name__}")

    if not envelope.get("success"):
        raise ServiceFailureError(envelope.get("message") or "Service reported failure")

    data = envelope.get("data")
    if not isinstance(data, dict):
        raise InvalidPayloadError("Response has no data object")

    raw_questions = data.get("questions")
    if not isinstance(raw_questions, list):
        raise InvalidPayloadError("Response data has no questions list")

    questions: List[Question] = []
    skipped = 0
    for item in raw_questions:
        question = _normalize_question(item, strategy) if isinstance(item, dict) else None
        if question is None:
            skipped += 1
            continue
        questions.append(question)

    if skipped:
        logger.warning(f"⚠️ Skipped {skipped} malformed question(s) in {strategy.value} response")

    summary = None
    if strategy == Strategy.BATCH:
        plan = batches or []
        raw_summary = data.get("summary")
        if isinstance(raw_summary, dict):
            summary = _summary_from_service(raw_summary, questions, plan)
        else:
            summary = summarize_batches(questions, plan)

    logger.debug(f"Parsed {len(questions)} questions from {strategy.value} response")

    return questions, summary
