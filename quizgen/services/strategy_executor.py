"""
Strategy Executor
Runs one deadline-bounded generation attempt and folds every failure into
an outcome-tagged StrategyAttempt
FILE: quizgen/services/strategy_executor.py
"""
import asyncio
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from quizgen.core.config import Settings
from quizgen.models.generation import (
    AttemptOutcome,
    BatchSpec,
    GenerationRequest,
    Strategy,
    StrategyAttempt,
)
from quizgen.services.generation_client import GenerationServiceClient, GenerationServiceError
from quizgen.utils.response_parser import parse_generation_response, ResponseParseError

logger = logging.getLogger(__name__)


DEFAULT_DEADLINES = {
    Strategy.QUICK: 15.0,
    Strategy.OPTIMIZED: 60.0,
    Strategy.BATCH: 90.0,
}


def deadlines_from_settings(settings: Settings) -> Dict[Strategy, float]:
    """Per-strategy deadlines in seconds"""
    return {
        Strategy.QUICK: settings.quick_timeout,
        Strategy.OPTIMIZED: settings.optimized_timeout,
        Strategy.BATCH: settings.batch_timeout,
    }


class StrategyExecutor:
    """
    Performs single remote attempts for QUICK, OPTIMIZED and BATCH.

    execute() never raises: timeouts, transport errors, service errors and
    malformed payloads all come back as a StrategyAttempt whose outcome is
    TIMEOUT or ERROR.
    """

    def __init__(
        self,
        client: GenerationServiceClient,
        deadlines: Optional[Dict[Strategy, float]] = None
    ):
        self.client = client
        self.deadlines = dict(DEFAULT_DEADLINES)
        if deadlines:
            self.deadlines.update(deadlines)

    def _attempt(
        self,
        strategy: Strategy,
        started_at: datetime,
        outcome: AttemptOutcome,
        error: Optional[str] = None,
        **fields
    ) -> StrategyAttempt:
        return StrategyAttempt(
            strategy=strategy,
            started_at=started_at,
            ended_at=datetime.now(timezone.utc),
            outcome=outcome,
            error=error,
            **fields
        )

    async def execute(
        self,
        strategy: Strategy,
        request: GenerationRequest,
        batches: Optional[List[BatchSpec]] = None
    ) -> StrategyAttempt:
        """
        Run one attempt bounded by the strategy's deadline

        When the deadline elapses the wait is cancelled and the attempt is
        recorded as TIMEOUT; whatever the service eventually sends back is
        discarded. Work already running server-side is not reclaimed.

        Args:
            strategy: QUICK, OPTIMIZED or BATCH
            request: Generation request for this rung
            batches: Batch plan, required for BATCH

        Returns:
            StrategyAttempt with outcome SUCCESS, TIMEOUT or ERROR
        """
        started_at = datetime.now(timezone.utc)
        deadline = self.deadlines.get(strategy)

        if deadline is None:
            return self._attempt(
                strategy, started_at, AttemptOutcome.ERROR,
                error=f"No remote deadline configured for {strategy.value}"
            )

        if strategy == Strategy.BATCH and not batches:
            return self._attempt(strategy, started_at, AttemptOutcome.ERROR, error="Empty batch plan")

        logger.info(
            f"🤖 {strategy.value} attempt: {request.count} questions "
            f"(deadline: {deadline:.0f}s)"
        )

        try:
            envelope = await asyncio.wait_for(
                self.client.request_generation(strategy, request, batches),
                timeout=deadline
            )
            questions, summary = parse_generation_response(envelope, strategy, batches)

        except asyncio.TimeoutError:
            logger.warning(f"⏰ {strategy.value} attempt timed out after {deadline:.0f}s")
            return self._attempt(
                strategy, started_at, AttemptOutcome.TIMEOUT,
                error=f"Deadline of {deadline:.0f}s elapsed"
            )

        except (GenerationServiceError, ResponseParseError) as e:
            logger.error(f"❌ {strategy.value} attempt failed: {e}")
            return self._attempt(strategy, started_at, AttemptOutcome.ERROR, error=str(e))

        except Exception as e:
            logger.exception(f"❌ Unexpected error during {strategy.value} attempt")
            return self._attempt(strategy, started_at, AttemptOutcome.ERROR, error=f"Unexpected error: {e}")

        attempt = self._attempt(
            strategy, started_at, AttemptOutcome.SUCCESS,
            questions=questions,
            summary=summary
        )

        if summary and summary.failed_batches:
            logger.warning(
                f"⚠️ Batch partially failed: {summary.successful_batches} ok, "
                f"{summary.failed_batches} failed"
            )

        logger.info(
            f"✅ {strategy.value} attempt returned {len(questions)} questions "
            f"in {attempt.duration_ms}ms"
        )

        return attempt
