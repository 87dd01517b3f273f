"""
Generation Service Client
HTTP client for the remote question-generation service
"""
import logging
from typing import Dict, Any, List, Optional

import httpx

from quizgen.models.generation import BatchSpec, GenerationRequest, Strategy

logger = logging.getLogger(__name__)


class GenerationServiceError(Exception):
    """Base exception for generation service errors"""
    pass


class ServiceNetworkError(GenerationServiceError):
    """Raised when the service cannot be reached"""
    pass


class ServiceResponseError(GenerationServiceError):
    """Raised when the service answers with an error status or unusable body"""
    pass


# Service endpoints (relative to base_url)
OPTIMIZED_PREFIX = "/api/quiz-optimized"
HEALTH_CHECK_PATH = "/api/quiz/health-check"

STRATEGY_PATHS = {
    Strategy.QUICK: f"{OPTIMIZED_PREFIX}/generate-quick",
    Strategy.OPTIMIZED: f"{OPTIMIZED_PREFIX}/generate-optimized",
    Strategy.BATCH: f"{OPTIMIZED_PREFIX}/generate-batch",
}


def build_payload(
    strategy: Strategy,
    request: GenerationRequest,
    batches: Optional[List[BatchSpec]] = None
) -> Dict[str, Any]:
    """
    Build the JSON body the service expects for a strategy

    Args:
        strategy: QUICK, OPTIMIZED or BATCH
        request: The (possibly degraded) generation request
        batches: Batch plan, required for BATCH

    Returns:
        Request body dictionary using the service's camelCase keys
    """
    if strategy == Strategy.BATCH:
        return {
            "batches": [
                {"type": b.type.value, "count": b.count, "difficulty": b.difficulty}
                for b in (batches or [])
            ]
        }

    if strategy == Strategy.QUICK:
        return {
            "count": request.count,
            "questionType": request.question_type.value,
            "difficulty": request.difficulty,
            "fastMode": request.fast_mode,
            "useCache": request.use_cache,
        }

    return {
        "questionType": request.question_type.value,
        "count": request.count,
        "difficulty": request.difficulty,
        "fastMode": request.fast_mode,
        "useCache": request.use_cache,
    }


class GenerationServiceClient:
    """
    Client for the remote generation service

    One shared httpx.AsyncClient; deadlines are enforced by the caller
    (StrategyExecutor), so generation calls carry no client-side timeout.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:3000",
        health_timeout: float = 5.0,
        admin_timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize the client

        Args:
            base_url: Base URL of the generation service
            health_timeout: Timeout for health probes in seconds
            admin_timeout: Timeout for cache admin calls in seconds
            transport: Optional custom transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.health_timeout = health_timeout
        self.admin_timeout = admin_timeout
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=None,
            transport=transport
        )
        logger.info(f"🔌 Generation client initialized: {self.base_url}")

    async def close(self):
        """Close HTTP client"""
        await self.client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        payload: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None
    ) -> Dict[str, Any]:
        """
        Send one request and decode the JSON envelope

        The service reports its own failures as {"success": false, "message": ...}
        with non-2xx codes (e.g. 408 on its internal timeout), so the message is
        pulled out of the body when there is one.

        Raises:
            ServiceNetworkError: Transport-level failure
            ServiceResponseError: Error status or non-JSON body
        """
        try:
            response = await self.client.request(method, path, json=payload, timeout=timeout)
        except httpx.RequestError as e:
            logger.error(f"❌ Generation service unreachable ({method} {path}): {e}")
            raise ServiceNetworkError(f"Request failed: {e}")

        try:
            data = response.json()
        except ValueError:
            data = None

        if response.is_error:
            message = data.get("message") if isinstance(data, dict) else None
            logger.error(f"❌ Generation service HTTP {response.status_code} on {path}")
            raise ServiceResponseError(
                f"HTTP {response.status_code}: {message or response.text[:200]}"
            )

        if not isinstance(data, dict):
            raise ServiceResponseError(f"Expected a JSON object from {path}")

        return data

    async def request_generation(
        self,
        strategy: Strategy,
        request: GenerationRequest,
        batches: Optional[List[BatchSpec]] = None
    ) -> Dict[str, Any]:
        """
        Dispatch one generation request

        Args:
            strategy: QUICK, OPTIMIZED or BATCH
            request: Generation request (material id and options)
            batches: Batch plan for BATCH

        Returns:
            Raw response envelope {success, data?, message?}
        """
        if strategy not in STRATEGY_PATHS:
            raise ValueError(f"Strategy {strategy.value} has no remote endpoint")

        path = f"{STRATEGY_PATHS[strategy]}/{request.material_id}"
        payload = build_payload(strategy, request, batches)

        logger.debug(f"📤 {strategy.value} dispatch: {path}")
        return await self._request("POST", path, payload)

    async def check_health(self) -> Dict[str, Any]:
        """Probe the service health-check endpoint"""
        return await self._request("GET", HEALTH_CHECK_PATH, timeout=self.health_timeout)

    async def clear_cache(self) -> Dict[str, Any]:
        """Ask the service to drop its question cache"""
        return await self._request(
            "POST", f"{OPTIMIZED_PREFIX}/cache/clear", timeout=self.admin_timeout
        )

    async def get_cache_stats(self) -> Dict[str, Any]:
        """Fetch the service's cache statistics"""
        return await self._request(
            "GET", f"{OPTIMIZED_PREFIX}/cache/stats", timeout=self.admin_timeout
        )
