"""
Generation Orchestrator
Selects a strategy, dispatches it and walks the degradation ladder down to
local fallback questions
FILE: quizgen/services/orchestrator.py
"""
import logging
from time import perf_counter
from typing import Callable, List, Optional

from quizgen.models.generation import (
    AttemptOutcome,
    AttemptRecord,
    GenerationMetadata,
    GenerationRequest,
    GenerationResult,
    Question,
    Strategy,
    StrategyAttempt,
)
from quizgen.services.batch_planner import plan_batches
from quizgen.services.fallback_generator import FallbackTemplateGenerator
from quizgen.services.strategy_executor import StrategyExecutor
from quizgen.services.strategy_selector import QUICK_MAX_COUNT, select_strategy

logger = logging.getLogger(__name__)


ProgressCallback = Callable[[str], None]


# ==================== CUSTOM EXCEPTIONS ====================

class InvalidRequestError(Exception):
    """Raised when a request is rejected before any dispatch"""
    pass


# ==================== LADDER ====================

# Each failed rung steps down exactly once; FALLBACK is terminal
DEGRADATION_LADDER = {
    Strategy.BATCH: Strategy.OPTIMIZED,
    Strategy.OPTIMIZED: Strategy.QUICK,
    Strategy.QUICK: Strategy.FALLBACK,
}

STRATEGY_NAMES = {
    Strategy.QUICK: "快速生成",
    Strategy.OPTIMIZED: "优化生成",
    Strategy.BATCH: "批量生成",
    Strategy.FALLBACK: "备用题目",
}


def degrade_request(request: GenerationRequest, next_strategy: Strategy) -> GenerationRequest:
    """
    Derive the request for the next rung

    Stepping down to QUICK caps the count at 15; stepping down to OPTIMIZED
    keeps the full count and forces fast mode.
    """
    if next_strategy == Strategy.QUICK:
        return request.model_copy(update={"count": min(request.count, QUICK_MAX_COUNT)})
    if next_strategy == Strategy.OPTIMIZED:
        return request.model_copy(update={"fast_mode": True})
    return request


def phase_label(strategy: Strategy, count: int) -> str:
    if strategy == Strategy.QUICK:
        return "⚡ 超快速生成中..."
    if strategy == Strategy.OPTIMIZED:
        return "🚀 AI正在高速生成大量题目..."
    if strategy == Strategy.BATCH:
        return f"📦 AI正在批量生成{count}道题目..."
    return "🔄 正在生成备用题目..."


def degrade_label(attempt: StrategyAttempt, next_strategy: Strategy) -> str:
    target = STRATEGY_NAMES[next_strategy]
    if attempt.outcome == AttemptOutcome.TIMEOUT:
        return f"⏰ 生成超时，正在尝试{target}..."
    return f"❌ {STRATEGY_NAMES[attempt.strategy]}失败，正在尝试{target}..."


def completion_message(mode: Strategy, questions: List[Question], duration_ms: int, attempt: Optional[StrategyAttempt] = None) -> str:
    seconds = duration_ms / 1000
    if mode == Strategy.QUICK:
        return f"⚡ 超快速生成完成！{len(questions)}道题目，耗时{seconds:.1f}秒"
    if mode == Strategy.OPTIMIZED:
        return f"🎉 高速生成完成！共生成{len(questions)}道高质量题目，耗时{seconds:.1f}秒"
    if mode == Strategy.BATCH:
        summary = attempt.summary if attempt else None
        if summary:
            total = summary.successful_batches + summary.failed_batches
            return f"📦 批量生成完成！共{len(questions)}道题目，成功批次: {summary.successful_batches}/{total}"
        return f"📦 批量生成完成！共{len(questions)}道题目"
    return f"🔄 已生成{len(questions)}道备用题目"


# ==================== ORCHESTRATOR ====================

class GenerationOrchestrator:
    """
    Top-level generation policy

    generate() always returns a successful GenerationResult for a valid
    request: remote failures only lower the quality (metadata.mode), they
    never surface as exceptions. InvalidRequestError is the one hard failure.
    """

    def __init__(
        self,
        executor: StrategyExecutor,
        fallback: Optional[FallbackTemplateGenerator] = None,
        max_question_count: int = 50
    ):
        self.executor = executor
        self.fallback = fallback or FallbackTemplateGenerator()
        self.max_question_count = max_question_count

    def validate_request(self, request: GenerationRequest) -> GenerationRequest:
        """
        Reject unusable requests and clamp oversized counts

        Raises:
            InvalidRequestError: material id missing or count below 1
        """
        if not request.material_id or not request.material_id.strip():
            raise InvalidRequestError("material_id is required")

        if request.count < 1:
            raise InvalidRequestError(f"count must be at least 1, got {request.count}")

        if request.count > self.max_question_count:
            logger.warning(
                f"⚠️ Requested {request.count} questions, clamping to {self.max_question_count}"
            )
            return request.model_copy(update={"count": self.max_question_count})

        return request

    def _notify(self, on_progress: Optional[ProgressCallback], label: str) -> None:
        if on_progress is None:
            return
        try:
            on_progress(label)
        except Exception as e:
            logger.warning(f"⚠️ Progress callback failed: {e}")

    async def generate(
        self,
        request: GenerationRequest,
        strategy: Optional[Strategy] = None,
        on_progress: Optional[ProgressCallback] = None
    ) -> GenerationResult:
        """
        Generate questions for a request

        Args:
            request: The generation request
            strategy: Force a starting strategy instead of choosing by count
            on_progress: Optional callback receiving phase labels

        Returns:
            GenerationResult with success=True

        Raises:
            InvalidRequestError: If the request is rejected before dispatch
        """
        request = self.validate_request(request)
        started = perf_counter()

        current = strategy or select_strategy(request.count)
        first = current
        rung_request = request
        attempts: List[StrategyAttempt] = []

        logger.info(
            f"🎯 Generating {request.count} questions for material {request.material_id} "
            f"(strategy: {current.value}{', forced' if strategy else ''})"
        )

        while current != Strategy.FALLBACK:
            self._notify(on_progress, phase_label(current, rung_request.count))

            batches = None
            if current == Strategy.BATCH:
                batches = plan_batches(rung_request.count, rung_request.difficulty)

            attempt = await self.executor.execute(current, rung_request, batches)
            attempts.append(attempt)

            if attempt.succeeded:
                return self._build_result(
                    current, attempt.questions, first, request, attempts, started, attempt
                )

            next_strategy = DEGRADATION_LADDER[current]
            logger.warning(
                f"🔄 {current.value} {attempt.outcome.value} "
                f"({attempt.error or 'no questions'}), degrading to {next_strategy.value}"
            )
            self._notify(on_progress, degrade_label(attempt, next_strategy))

            rung_request = degrade_request(rung_request, next_strategy)
            current = next_strategy

        self._notify(on_progress, phase_label(Strategy.FALLBACK, rung_request.count))
        questions = self.fallback.generate(rung_request.count)

        return self._build_result(
            Strategy.FALLBACK, questions, first, request, attempts, started
        )

    def _build_result(
        self,
        mode: Strategy,
        questions: List[Question],
        first: Strategy,
        request: GenerationRequest,
        attempts: List[StrategyAttempt],
        started: float,
        final_attempt: Optional[StrategyAttempt] = None
    ) -> GenerationResult:
        duration_ms = int((perf_counter() - started) * 1000)

        metadata = GenerationMetadata(
            mode=mode,
            duration_ms=duration_ms,
            degraded=mode != first,
            requested_count=request.count,
            attempts=[
                AttemptRecord(
                    strategy=a.strategy,
                    outcome=a.outcome,
                    duration_ms=a.duration_ms,
                    question_count=len(a.questions),
                    error=a.error,
                )
                for a in attempts
            ],
            summary=final_attempt.summary if final_attempt else None,
        )

        logger.info(
            f"✅ Generation finished: {len(questions)} questions via {mode.value} "
            f"in {duration_ms}ms ({len(attempts)} remote attempt(s))"
        )

        return GenerationResult(
            success=True,
            questions=questions,
            metadata=metadata,
            message=completion_message(mode, questions, duration_ms, final_attempt),
        )
