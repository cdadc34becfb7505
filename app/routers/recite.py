import base64
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from starlette.status import HTTP_400_BAD_REQUEST, HTTP_500_INTERNAL_SERVER_ERROR

from app.core.deps import get_llm_gateway, get_settings_dep
from app.core.errors import ApiError
from app.models.recite import BodyLanguageAnalysis, RecitationEvaluation, ReciteRequest
from app.services.llm_gateway import LlmError, LlmGateway
from app.services.normalizer import OBJECT_PATTERN, Fallback, normalize, shape
from app.utils.prompts import BODY_LANGUAGE_PROMPT, recitation_prompt

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/recite", tags=["recite"])

# "impossible de noter" reste une réponse servie (200), pas une erreur
RECITATION_FALLBACK = {
    "accuracy": 50,
    "missingParts": ["The response could not be analysed correctly"],
    "incorrectParts": [],
    "summary": "There was an error processing the AI model response. Please try again.",
}

_RECITATION_SHAPE = shape(RecitationEvaluation)
_BODY_LANGUAGE_SHAPE = shape(BodyLanguageAnalysis)


def evaluate_recitation(llm: LlmGateway, recited_text: str, expected_text: str) -> RecitationEvaluation:
    """
    Évaluation principale. Lève LlmError si Ollama est injoignable ;
    une réponse illisible donne le repli (accuracy 50 + marqueur d'erreur).
    """
    raw = llm.complete(recitation_prompt(recited_text, expected_text))

    result = normalize(raw, pattern=OBJECT_PATTERN, validate=_RECITATION_SHAPE, fallback=RECITATION_FALLBACK)
    if isinstance(result, Fallback):
        logger.warning("Serving recitation fallback (%s)", result.reason)
        return RecitationEvaluation(**result.value)
    return result.value


def _required_text(name: str, value: str) -> str:
    # même règle que les corps JSON : un champ blanc compte comme vide
    value = value.strip()
    if not value:
        raise ApiError(HTTP_400_BAD_REQUEST, f"Missing required field: {name} (empty)")
    return value


def analyse_body_language(llm: LlmGateway, media: UploadFile) -> Optional[BodyLanguageAnalysis]:
    """
    Analyse secondaire best effort : toute erreur est loguée puis ignorée.
    """
    try:
        data = media.file.read()
        if not data:
            return None
        media_b64 = base64.b64encode(data).decode("ascii")
        raw = llm.complete_with_media(BODY_LANGUAGE_PROMPT, media_b64, media.content_type or "video/webm")
        result = normalize(raw, pattern=OBJECT_PATTERN, validate=_BODY_LANGUAGE_SHAPE)
        if isinstance(result, Fallback):
            logger.warning("Body language analysis unusable (%s): %s", result.reason, result.detail)
            return None
        return result.value
    except Exception as e:
        logger.warning("Body language analysis failed, skipping: %s", e)
        return None


@router.post("/evaluate", response_model=RecitationEvaluation, response_model_exclude_none=True,
             summary="Évalue une récitation.")
def evaluate(body: ReciteRequest, llm: LlmGateway = Depends(get_llm_gateway)):
    try:
        return evaluate_recitation(llm, body.recitedText, body.expectedText)
    except LlmError:
        logger.exception("LLM Error")
        raise ApiError(HTTP_500_INTERNAL_SERVER_ERROR, "AI analysis failed")


@router.post("/evaluate-media", response_model=RecitationEvaluation, response_model_exclude_none=True,
             summary="Évalue une récitation, avec vidéo/audio optionnel.")
def evaluate_with_media(
    recitedText: str = Form(..., min_length=1),
    expectedText: str = Form(..., min_length=1),
    media: Optional[UploadFile] = File(default=None),
    llm: LlmGateway = Depends(get_llm_gateway),
    settings=Depends(get_settings_dep),
):
    recitedText = _required_text("recitedText", recitedText)
    expectedText = _required_text("expectedText", expectedText)

    try:
        evaluation = evaluate_recitation(llm, recitedText, expectedText)
    except LlmError:
        logger.exception("LLM Error")
        raise ApiError(HTTP_500_INTERNAL_SERVER_ERROR, "AI analysis failed")

    if media is not None and settings.ENABLE_VIDEO_ANALYSIS:
        evaluation.bodyLanguage = analyse_body_language(llm, media)
    elif media is not None:
        logger.info("Media received but video analysis is disabled")

    return evaluation
