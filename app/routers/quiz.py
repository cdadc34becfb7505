import logging
from typing import Any

from fastapi import APIRouter, Depends
from starlette.status import HTTP_500_INTERNAL_SERVER_ERROR

from app.core.deps import get_llm_gateway
from app.core.errors import ApiError
from app.models.quiz import (
    EssayEvaluation, EssayList, MixedList, MultipleChoiceList, QuestionType,
    EvaluateAnswerRequest, GenerateQuizRequest, GenerateQuizResponse,
)
from app.services.llm_gateway import LlmError, LlmGateway
from app.services.normalizer import (
    ARRAY_PATTERN, OBJECT_PATTERN, UNPARSEABLE,
    Fallback, normalize, shape,
)
from app.utils.prompts import essay_evaluation_prompt, quiz_prompt

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/quiz", tags=["quiz"])

_QUESTION_SHAPES = {
    QuestionType.test: shape(MultipleChoiceList),
    QuestionType.essay: shape(EssayList),
    QuestionType.mixed: shape(MixedList),
}

_EVALUATION_SHAPE = shape(EssayEvaluation)


def _questions_validator(question_type: QuestionType):
    validate = _QUESTION_SHAPES[question_type]

    def _validate(value: Any):
        # certains modèles enveloppent le tableau : {"questions": [...]}
        if isinstance(value, dict) and "questions" in value:
            value = value["questions"]
        return validate(value)

    return _validate


@router.post("/generate", response_model=GenerateQuizResponse, summary="Génère un quiz.")
def generate_quiz(body: GenerateQuizRequest, llm: LlmGateway = Depends(get_llm_gateway)):
    logger.info(
        "Generating %d %s quiz questions with difficulty: %s",
        body.numQuestions, body.questionType.value, body.difficulty.value,
    )
    prompt = quiz_prompt(body.material, body.numQuestions, body.difficulty, body.questionType)

    try:
        raw = llm.complete(prompt)
    except LlmError:
        logger.exception("Quiz generation error")
        raise ApiError(HTTP_500_INTERNAL_SERVER_ERROR, "Failed to generate quiz")

    result = normalize(raw, pattern=ARRAY_PATTERN, validate=_questions_validator(body.questionType))
    if isinstance(result, Fallback):
        if result.reason == UNPARSEABLE:
            raise ApiError(HTTP_500_INTERNAL_SERVER_ERROR, "Failed to generate valid quiz questions", raw=raw)
        # une seule question invalide fait échouer tout le quiz
        raise ApiError(HTTP_500_INTERNAL_SERVER_ERROR, "Invalid question format", detail=result.detail, raw=raw)

    questions = result.value
    if len(questions) != body.numQuestions:
        logger.warning("Asked for %d questions, model returned %d", body.numQuestions, len(questions))

    return GenerateQuizResponse(questions=questions)


@router.post("/evaluate", response_model=EssayEvaluation, response_model_exclude_none=True,
             summary="Évalue une réponse rédigée.")
def evaluate_answer(body: EvaluateAnswerRequest, llm: LlmGateway = Depends(get_llm_gateway)):
    logger.info("Evaluating essay answer for question: %.50s...", body.question)
    prompt = essay_evaluation_prompt(body.question, body.expectedAnswer, body.userAnswer)

    try:
        raw = llm.complete(prompt)
    except LlmError:
        logger.exception("Evaluation error")
        raise ApiError(HTTP_500_INTERNAL_SERVER_ERROR, "Failed to evaluate answer")

    result = normalize(raw, pattern=OBJECT_PATTERN, validate=_EVALUATION_SHAPE)
    if isinstance(result, Fallback):
        if result.reason == UNPARSEABLE:
            raise ApiError(HTTP_500_INTERNAL_SERVER_ERROR, "Failed to evaluate answer", raw=raw)
        raise ApiError(HTTP_500_INTERNAL_SERVER_ERROR, "Invalid evaluation format", detail=result.detail, raw=raw)

    return result.value
