"""
Quiz Generation Dispatcher - Main Application
FILE: quizgen/main.py
"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from typing import Optional
import logging
import time

import httpx

from quizgen.core.config import Settings, settings as default_settings
from quizgen.api.generation import router as generation_router
from quizgen.api.service import router as service_router
from quizgen.services.generation_client import GenerationServiceClient
from quizgen.services.health_monitor import HealthMonitor
from quizgen.services.orchestrator import GenerationOrchestrator
from quizgen.services.status_indicator import StatusIndicator
from quizgen.services.strategy_executor import StrategyExecutor, deadlines_from_settings

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> FastAPI:
    """
    Build the application and its collaborators
    
    The lifespan is the composition root: one client, executor, orchestrator,
    indicator and health monitor per app, stored on app.state.
    
    Args:
        settings: Settings to use (module settings by default)
        transport: Optional httpx transport for the generation client
    """
    settings = settings or default_settings
    
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup and shutdown events"""
        # Startup
        logger.info("🚀 Starting Quiz Generation Dispatcher...")
        
        client = GenerationServiceClient(
            base_url=settings.generation_service_url,
            health_timeout=settings.health_check_timeout,
            admin_timeout=settings.admin_timeout,
            transport=transport
        )
        executor = StrategyExecutor(client, deadlines_from_settings(settings))
        indicator = StatusIndicator()
        
        app.state.generation_client = client
        app.state.orchestrator = GenerationOrchestrator(
            executor,
            max_question_count=settings.max_question_count
        )
        app.state.status_indicator = indicator
        app.state.health_monitor = HealthMonitor(
            client,
            indicator,
            interval=settings.health_check_interval
        )
        
        if settings.health_monitor_enabled:
            app.state.health_monitor.start()
        
        logger.info(f"✓ Generation service: {settings.generation_service_url}")
        
        yield
        
        # Shutdown
        logger.info("🛑 Shutting down Quiz Generation Dispatcher...")
        
        try:
            await app.state.health_monitor.stop()
            await client.close()
            logger.info("✓ Cleanup complete")
        except Exception as e:
            logger.error(f"❌ Shutdown error: {e}")
    
    app = FastAPI(
        title="Quiz Generation Dispatcher",
        description="""
        Adaptive front for the AI question-generation service.
        
        ## Features
        - **Strategy selection**: quick / optimized / batch by question count
        - **Batch planning**: 50% multiple-choice, 30% fill-blank, remainder essay
        - **Degradation ladder**: cheaper strategies on timeout or failure, ending in local fallback questions
        - **Health monitoring**: periodic probe with an offline notice
        
        ## Endpoints
        - **Generate**: `/api/quiz/generate/{material_id}`
        - **Recommended count**: `/api/quiz/recommended-count`
        - **Service status**: `/api/service/status`, `/api/service/probe`
        - **Cache admin**: `/api/cache/clear`, `/api/cache/stats`
        - **Health**: `/health`
        """,
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc"
    )
    
    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    
    # Request timing middleware
    @app.middleware("http")
    async def add_process_time_header(request: Request, call_next):
        """Add processing time to response headers"""
        start_time = time.time()
        response = await call_next(request)
        process_time = (time.time() - start_time) * 1000  # Convert to ms
        response.headers["X-Process-Time-Ms"] = str(round(process_time, 2))
        return response
    
    # Request logging middleware
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log all incoming requests"""
        logger.info(f"📨 {request.method} {request.url.path}")
        response = await call_next(request)
        logger.info(
            f"📤 {request.method} {request.url.path} - "
            f"Status: {response.status_code}"
        )
        return response
    
    # ==================== INCLUDE ROUTERS ====================
    
    app.include_router(generation_router, prefix="/api")
    app.include_router(service_router, prefix="/api")
    
    # ==================== ROOT ENDPOINTS ====================
    
    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint with API information"""
        return {
            "message": "Quiz Generation Dispatcher",
            "version": "1.0.0",
            "status": "operational",
            "endpoints": {
                "docs": "/docs",
                "generate": "/api/quiz/generate/{material_id}",
                "recommended_count": "/api/quiz/recommended-count",
                "service_status": "/api/service/status",
                "cache_stats": "/api/cache/stats",
                "health": "/health"
            }
        }
    
    @app.get("/health", tags=["Health"])
    async def health_check(request: Request):
        """
        Liveness check
        
        Generation stays available when the remote service is down (fallback
        questions), so remote status is reported but never makes this fail.
        """
        status = request.app.state.health_monitor.status
        return {
            "status": "healthy",
            "timestamp": time.time(),
            "generation_service": {
                "available": status.available,
                "last_checked_at": status.last_checked_at.isoformat() if status.last_checked_at else None
            }
        }
    
    return app


app = create_app()


# ==================== RUN APPLICATION ====================

if __name__ == "__main__":
    import uvicorn
    
    uvicorn.run(
        "quizgen.main:app",
        host="0.0.0.0",
        port=8080,
        reload=True,
        log_level="info"
    )
