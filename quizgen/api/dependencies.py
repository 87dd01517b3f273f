"""
Route dependencies
Resolve the instances built by the application lifespan
"""
from fastapi import Request

from quizgen.services.generation_client import GenerationServiceClient
from quizgen.services.health_monitor import HealthMonitor
from quizgen.services.orchestrator import GenerationOrchestrator


def get_orchestrator(request: Request) -> GenerationOrchestrator:
    return request.app.state.orchestrator


def get_health_monitor(request: Request) -> HealthMonitor:
    return request.app.state.health_monitor


def get_generation_client(request: Request) -> GenerationServiceClient:
    return request.app.state.generation_client
