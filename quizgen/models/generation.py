"""
Generation Models
Pydantic models for generation requests, attempts and results
FILE: quizgen/models/generation.py
"""
from enum import Enum
from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, Field


class QuestionType(str, Enum):
    MULTIPLE_CHOICE = "multiple-choice"
    FILL_BLANK = "fill-blank"
    ESSAY = "essay"
    MIXED = "mixed"


class Strategy(str, Enum):
    QUICK = "quick"
    OPTIMIZED = "optimized"
    BATCH = "batch"
    FALLBACK = "fallback"


class AttemptOutcome(str, Enum):
    SUCCESS = "success"
    TIMEOUT = "timeout"
    ERROR = "error"


class GenerationRequest(BaseModel):
    """
    One user-initiated generation request.

    Frozen: lower ladder rungs work on copies made with model_copy().
    """
    material_id: str = Field(..., description="Identifier of the uploaded study material")
    question_type: QuestionType = Field(default=QuestionType.MIXED)
    count: int = Field(..., description="Number of questions requested")
    difficulty: int = Field(default=1, description="Difficulty level")
    fast_mode: bool = True
    use_cache: bool = True

    class Config:
        frozen = True


class BatchSpec(BaseModel):
    """One typed, sized slice of a batched request"""
    type: QuestionType
    count: int = Field(..., gt=0)
    difficulty: int = 1


class Question(BaseModel):
    id: str
    type: QuestionType = QuestionType.MULTIPLE_CHOICE
    prompt: str
    options: List[str] = Field(default_factory=list)
    correct_answer: Optional[Union[int, str]] = None
    explanation: Optional[str] = None
    difficulty: int = 1
    concept: Optional[str] = None
    provenance: Strategy


class BatchFailure(BaseModel):
    batch_index: int
    type: Optional[QuestionType] = None
    error: Optional[str] = None


class BatchDetail(BaseModel):
    type: QuestionType
    count: int


class BatchSummary(BaseModel):
    """Per-sub-batch outcome of one batch attempt"""
    total_questions: int = 0
    successful_batches: int = 0
    failed_batches: int = 0
    batch_details: List[BatchDetail] = Field(default_factory=list)
    failures: List[BatchFailure] = Field(default_factory=list)


class StrategyAttempt(BaseModel):
    """
    Result of one bounded remote attempt, tagged by outcome.

    questions is only populated when outcome is SUCCESS; error carries the
    captured message for TIMEOUT and ERROR.
    """
    strategy: Strategy
    started_at: datetime
    ended_at: datetime
    outcome: AttemptOutcome
    questions: List[Question] = Field(default_factory=list)
    error: Optional[str] = None
    summary: Optional[BatchSummary] = None

    @property
    def duration_ms(self) -> int:
        return int((self.ended_at - self.started_at).total_seconds() * 1000)

    @property
    def succeeded(self) -> bool:
        return self.outcome == AttemptOutcome.SUCCESS and len(self.questions) > 0


class AttemptRecord(BaseModel):
    strategy: Strategy
    outcome: AttemptOutcome
    duration_ms: int
    question_count: int = 0
    error: Optional[str] = None


class GenerationMetadata(BaseModel):
    mode: Strategy
    duration_ms: int
    degraded: bool = False
    requested_count: int
    attempts: List[AttemptRecord] = Field(default_factory=list)
    summary: Optional[BatchSummary] = None


class GenerationResult(BaseModel):
    success: bool = True
    questions: List[Question]
    metadata: GenerationMetadata
    message: str = ""

    class Config:
        json_schema_extra = {
            "example": {
                "success": True,
                "questions": [
                    {
                        "id": "q_1",
                        "type": "multiple-choice",
                        "prompt": "根据学习材料，以下哪个说法是正确的？",
                        "options": ["选项A", "选项B", "选项C", "选项D"],
                        "correct_answer": 0,
                        "explanation": "这是基于学习材料的基础理解题。",
                        "difficulty": 1,
                        "provenance": "quick"
                    }
                ],
                "metadata": {
                    "mode": "quick",
                    "duration_ms": 4210,
                    "degraded": False,
                    "requested_count": 1,
                    "attempts": [
                        {"strategy": "quick", "outcome": "success", "duration_ms": 4210, "question_count": 1}
                    ]
                },
                "message": "⚡ 超快速生成完成！1道题目，耗时4.2秒"
            }
        }


class HealthStatus(BaseModel):
    available: bool = True
    last_checked_at: Optional[datetime] = None
    message: Optional[str] = None
