# backend/pingtopass/services/question_generator.py
import json
import logging
import time
from typing import Any, Dict, List, Optional, Tuple

from openai import OpenAI, OpenAIError
from pydantic import ValidationError as SchemaValidationError
from sqlalchemy.orm import Session

from pingtopass.core.config import settings
from pingtopass.core.errors import NotFoundError, ServiceUnavailableError, ValidationError
from pingtopass.crud.crud_audit import AIGenerationLogCreate, ai_generation_log
from pingtopass.crud.crud_exam import exam as crud_exam, objective as crud_objective
from pingtopass.crud.crud_question import question as crud_question
from pingtopass.db.database import transaction
from pingtopass.schemas.generation import GeneratedQuestion, GenerateQuestionsRequest, GenerationResult
from pingtopass.schemas.question import QuestionCreate

logger = logging.getLogger(__name__)

GENERATION_PURPOSE = "question_generation"

SYSTEM_PROMPT = (
    "You write practice questions for IT certification exams. "
    "Questions must be technically accurate, unambiguous and match the exam objective. "
    "Reply with a single JSON object and nothing else."
)

USER_PROMPT_TEMPLATE = """Exam: {exam_code} - {exam_name}
Objective {objective_code}: {objective_name}
{objective_description}

Write {count} questions{difficulty_clause}.
Return JSON of the form:
{{"questions": [{{
  "text": "question text",
  "type": "multiple_choice" | "multi_select" | "true_false",
  "answers": [{{"id": "a", "text": "...", "is_correct": true, "explanation": "why"}}],
  "explanation": "overall explanation",
  "reference": "where to read more",
  "difficulty": 1-5,
  "tags": ["..."],
  "confidence": 0.0-1.0
}}]}}
multiple_choice and true_false questions have exactly one correct answer;
multi_select questions have two or more."""


class QuestionGenerator:
    """Question generator

    Asks an OpenAI-compatible chat model (OpenRouter by default) for exam
    questions and stores the valid ones as inactive, pending review.
    Every call, successful or not, is written to the AI generation log.
    """

    def __init__(self, client: Optional[OpenAI] = None):
        self.api_key = settings.OPENROUTER_API_KEY
        self.model = settings.OPENROUTER_MODEL
        self.max_tokens = settings.LLM_MAX_TOKENS
        self.temperature = settings.LLM_TEMPERATURE
        self.client = client
        if self.client is None and self.api_key:
            self.client = OpenAI(api_key=self.api_key, base_url=settings.OPENROUTER_API_BASE)

    @property
    def available(self) -> bool:
        return self.client is not None

    def build_messages(self, exam: Any, objective: Any, request: GenerateQuestionsRequest) -> List[Dict[str, str]]:
        difficulty_clause = f" at difficulty {request.difficulty} on a 1-5 scale" if request.difficulty else ""
        prompt = USER_PROMPT_TEMPLATE.format(
            exam_code=exam.code,
            exam_name=exam.name,
            objective_code=objective.code,
            objective_name=objective.name,
            objective_description=objective.description or "",
            count=request.count,
            difficulty_clause=difficulty_clause,
        )
        return [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ]

    @staticmethod
    def parse_completion(content: str) -> List[Dict[str, Any]]:
        """
        Extract the list of raw question dicts from the model output.

        Accepts a bare JSON list or an object with a ``questions`` list,
        optionally wrapped in a Markdown code fence.
        """
        text = (content or "").strip()
        if text.startswith("```"):
            text = text.strip("`")
            if text.startswith("json"):
                text = text[4:]
        data = json.loads(text)
        if isinstance(data, dict):
            data = data.get("questions", [])
        if not isinstance(data, list):
            raise ValueError("expected a list of questions")
        return [item for item in data if isinstance(item, dict)]

    def validate_items(
        self, items: List[Dict[str, Any]], request: GenerateQuestionsRequest
    ) -> Tuple[List[QuestionCreate], int]:
        """Turn raw items into question rows, returning them with the number rejected."""
        accepted: List[QuestionCreate] = []
        rejected = 0
        for item in items:
            try:
                generated = GeneratedQuestion.model_validate(item)
                accepted.append(QuestionCreate(
                    exam_id=request.exam_id,
                    objective_id=request.objective_id,
                    text=generated.text,
                    type=generated.type,
                    answers=generated.answers,
                    explanation=generated.explanation,
                    reference=generated.reference,
                    difficulty=request.difficulty or generated.difficulty,
                    tags=generated.tags,
                    ai_generated=True,
                    ai_model=self.model,
                    ai_prompt_version=settings.AI_PROMPT_VERSION,
                    ai_confidence_score=generated.confidence,
                    review_status="pending",
                    is_active=False,
                ))
            except SchemaValidationError as e:
                rejected += 1
                logger.warning("Rejected generated question: %s", e.errors()[0].get("msg", str(e)))
        return accepted, rejected

    def _log_failure(self, db: Session, request: GenerateQuestionsRequest, user_id: Optional[int],
                     request_id: Optional[str], started: float, error: str) -> None:
        ai_generation_log.create(db, obj_in=AIGenerationLogCreate(
            purpose=GENERATION_PURPOSE,
            model=self.model,
            exam_id=request.exam_id,
            objective_id=request.objective_id,
            success=False,
            error_message=error[:500],
            generation_time_ms=int((time.perf_counter() - started) * 1000),
            request_id=request_id,
            user_id=user_id,
        ))

    def generate(
        self,
        db: Session,
        *,
        request: GenerateQuestionsRequest,
        user_id: Optional[int] = None,
        request_id: Optional[str] = None
    ) -> GenerationResult:
        """
        Generate and store questions for one exam objective.

        Blocking: database and model calls run in the caller's thread, so
        routes call it from a plain ``def`` endpoint.

        Raises:
            ServiceUnavailableError: no API key is configured, the model call
                failed or its output could not be parsed
            NotFoundError: unknown exam or objective
            ValidationError: the objective belongs to another exam
        """
        if not self.available:
            raise ServiceUnavailableError("AI question generation is not configured")

        db_exam = crud_exam.get(db, request.exam_id)
        if db_exam is None:
            raise NotFoundError("Exam not found")
        db_objective = crud_objective.get(db, request.objective_id)
        if db_objective is None:
            raise NotFoundError("Objective not found")
        if db_objective.exam_id != db_exam.id:
            raise ValidationError("Objective does not belong to this exam")

        started = time.perf_counter()
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=self.build_messages(db_exam, db_objective, request),
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                response_format={"type": "json_object"},
            )
            content = response.choices[0].message.content if response.choices else ""
            items = self.parse_completion(content)
        except (OpenAIError, ValueError) as e:
            logger.error("Question generation failed for exam %s: %s", request.exam_id, e)
            self._log_failure(db, request, user_id, request_id, started, str(e))
            raise ServiceUnavailableError("Question generation failed. Please try again later.")

        elapsed_ms = int((time.perf_counter() - started) * 1000)
        accepted, rejected = self.validate_items(items, request)
        usage = getattr(response, "usage", None)
        total_tokens = getattr(usage, "total_tokens", None)
        cost = total_tokens / 1000 * settings.LLM_COST_CENTS_PER_1K_TOKENS if total_tokens else None

        with transaction(db):
            created = [crud_question.create(db, obj_in=q, commit=False) for q in accepted]
            log = ai_generation_log.create(db, obj_in=AIGenerationLogCreate(
                purpose=GENERATION_PURPOSE,
                model=self.model,
                prompt_tokens=getattr(usage, "prompt_tokens", None),
                completion_tokens=getattr(usage, "completion_tokens", None),
                total_tokens=total_tokens,
                cost_cents=cost,
                exam_id=request.exam_id,
                objective_id=request.objective_id,
                question_ids=[q.id for q in created],
                success=True,
                generation_time_ms=elapsed_ms,
                request_id=request_id,
                user_id=user_id,
            ), commit=False)

        logger.info(
            "Generated %d questions (%d rejected) for exam %s objective %s in %dms",
            len(created), rejected, request.exam_id, request.objective_id, elapsed_ms,
        )
        return GenerationResult(
            requested=request.count,
            generated=len(created),
            rejected=rejected,
            question_ids=[q.id for q in created],
            model=self.model,
            generation_time_ms=elapsed_ms,
            log_id=log.id,
        )
