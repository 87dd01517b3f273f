"""
Service Status API Routes
Generation-service health and cache administration
"""
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from typing import Any, List, Optional
import logging

from quizgen.api.dependencies import get_generation_client, get_health_monitor
from quizgen.models.generation import HealthStatus
from quizgen.services.generation_client import GenerationServiceClient, GenerationServiceError
from quizgen.services.health_monitor import HealthMonitor
from quizgen.services.status_indicator import StatusNotice

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Service"])


class ServiceStatusResponse(BaseModel):
    status: HealthStatus
    notices: List[StatusNotice]
    monitoring: bool


class CacheResponse(BaseModel):
    success: bool
    message: Optional[str] = None
    data: Optional[Any] = None


# ==================== HEALTH ====================

@router.get("/service/status", response_model=ServiceStatusResponse, summary="Generation Service Status")
async def get_service_status(monitor: HealthMonitor = Depends(get_health_monitor)):
    """Last probe result and the notices currently shown"""
    return ServiceStatusResponse(
        status=monitor.status,
        notices=monitor.indicator.active(),
        monitoring=monitor.running
    )


@router.post("/service/probe", response_model=HealthStatus, summary="Probe Generation Service")
async def probe_service(monitor: HealthMonitor = Depends(get_health_monitor)):
    """Run one health probe immediately"""
    return await monitor.probe()


# ==================== CACHE ADMIN ====================

@router.post("/cache/clear", response_model=CacheResponse, summary="Clear Remote Cache")
async def clear_cache(client: GenerationServiceClient = Depends(get_generation_client)):
    """Ask the generation service to drop its question cache"""
    try:
        result = await client.clear_cache()
    except GenerationServiceError as e:
        logger.error(f"❌ 清理缓存失败: {e}")
        raise HTTPException(status_code=502, detail=f"清理缓存失败: {e}")
    
    if not result.get("success"):
        raise HTTPException(status_code=502, detail="清理缓存失败")
    
    logger.info("🧹 Remote cache cleared")
    return CacheResponse(success=True, message="🧹 缓存已清理")


@router.get("/cache/stats", response_model=CacheResponse, summary="Remote Cache Statistics")
async def get_cache_stats(client: GenerationServiceClient = Depends(get_generation_client)):
    """Cache statistics from the generation service; data is null when unavailable"""
    try:
        result = await client.get_cache_stats()
    except GenerationServiceError as e:
        logger.error(f"❌ 获取缓存统计失败: {e}")
        return CacheResponse(success=False, message=str(e))
    
    if not result.get("success"):
        return CacheResponse(success=False, message=result.get("message"))
    
    logger.debug(f"📊 Cache stats: {result.get('data')}")
    return CacheResponse(success=True, data=result.get("data"))
