"""
Quiz Generation API Routes
FastAPI endpoints for adaptive question generation
"""
from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from typing import List, Optional
import logging

from quizgen.api.dependencies import get_orchestrator
from quizgen.core.config import settings
from quizgen.models.generation import GenerationRequest, GenerationResult, QuestionType, Strategy
from quizgen.services.orchestrator import GenerationOrchestrator, InvalidRequestError
from quizgen.services.strategy_selector import recommended_question_count

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/quiz", tags=["Quiz"])


# ==================== REQUEST/RESPONSE MODELS ====================

class GenerateQuizRequest(BaseModel):
    """Request model for question generation"""
    question_type: QuestionType = Field(
        default=QuestionType.MIXED,
        description="multiple-choice, fill-blank, essay or mixed"
    )
    count: int = Field(
        default=settings.default_question_count,
        description=f"Number of questions (clamped to {settings.max_question_count})"
    )
    difficulty: int = Field(default=1, ge=1, le=5, description="Difficulty level")
    fast_mode: bool = Field(default=settings.default_fast_mode)
    use_cache: bool = Field(default=settings.default_use_cache)
    strategy: Optional[Strategy] = Field(
        default=None,
        description="Force a strategy (quick, optimized, batch, fallback); chosen by count when omitted"
    )
    
    class Config:
        json_schema_extra = {
            "example": {
                "question_type": "mixed",
                "count": 40,
                "difficulty": 1,
                "fast_mode": True,
                "use_cache": True
            }
        }


class GenerateQuizResponse(GenerationResult):
    """Generation result plus the progress phases emitted along the way"""
    phases: List[str] = Field(default_factory=list)


class RecommendedCountResponse(BaseModel):
    material_length: int
    recommended_count: int


# ==================== GENERATION ENDPOINTS ====================

@router.post(
    "/generate/{material_id}",
    response_model=GenerateQuizResponse,
    summary="Generate Questions",
    description="Generate questions for a material, degrading to cheaper strategies on failure"
)
async def generate_questions(
    material_id: str,
    payload: GenerateQuizRequest,
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator)
):
    """
    Generate questions for a material
    
    The strategy is picked from the requested count unless one is forced.
    Remote timeouts and failures are absorbed by the degradation ladder, so
    this endpoint only fails on an invalid request.
    
    Returns:
        Questions, metadata (mode, duration, degraded flag, attempts) and phases
    """
    phases: List[str] = []
    
    request = GenerationRequest(
        material_id=material_id,
        question_type=payload.question_type,
        count=payload.count,
        difficulty=payload.difficulty,
        fast_mode=payload.fast_mode,
        use_cache=payload.use_cache
    )
    
    try:
        result = await orchestrator.generate(
            request,
            strategy=payload.strategy,
            on_progress=phases.append
        )
    except InvalidRequestError as e:
        logger.warning(f"⚠️ Invalid generation request: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    
    return GenerateQuizResponse(**result.model_dump(), phases=phases)


@router.get(
    "/recommended-count",
    response_model=RecommendedCountResponse,
    summary="Recommended Question Count"
)
async def get_recommended_count(
    material_length: int = Query(..., ge=0, description="Material length in characters")
):
    """Suggest how many questions to ask for a material of this length"""
    return RecommendedCountResponse(
        material_length=material_length,
        recommended_count=recommended_question_count(material_length)
    )
