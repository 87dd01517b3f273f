"""
Fallback Template Generator
Local placeholder questions, the last rung of the degradation ladder
"""
import uuid
import logging
from typing import List

from quizgen.models.generation import Question, QuestionType, Strategy

logger = logging.getLogger(__name__)


FALLBACK_TEMPLATES = [
    {
        "type": QuestionType.MULTIPLE_CHOICE,
        "prompt": "根据学习材料，以下哪个说法是正确的？",
        "options": ["选项A", "选项B", "选项C", "选项D"],
        "correct_answer": 0,
        "explanation": "这是基于学习材料的基础理解题。",
    },
    {
        "type": QuestionType.FILL_BLANK,
        "prompt": "学习材料中提到的重要概念是______。",
        "options": [],
        "correct_answer": "重要概念",
        "explanation": "这是对材料中关键概念的考查。",
    },
    {
        "type": QuestionType.ESSAY,
        "prompt": "请简述学习材料的主要内容。",
        "options": [],
        "correct_answer": "学习材料主要讨论了相关理论和实践应用。",
        "explanation": "这是对材料整体内容的综合理解题。",
    },
]


class FallbackTemplateGenerator:
    """Synchronous generator that cannot fail"""

    def __init__(self, templates=None):
        self.templates = templates or FALLBACK_TEMPLATES

    def generate(self, count: int) -> List[Question]:
        """
        Produce `count` questions cycling through the templates

        Every question gets a unique id and provenance FALLBACK.
        A count of zero or less yields an empty list.
        """
        batch_tag = uuid.uuid4().hex[:8]
        questions = []

        for i in range(max(count, 0)):
            template = self.templates[i % len(self.templates)]
            questions.append(
                Question(
                    id=f"fallback_{i}_{batch_tag}",
                    type=template["type"],
                    prompt=template["prompt"],
                    options=list(template["options"]),
                    correct_answer=template["correct_answer"],
                    explanation=template["explanation"],
                    difficulty=1,
                    provenance=Strategy.FALLBACK,
                )
            )

        logger.info(f"🔄 Generated {len(questions)} fallback questions")

        return questions
