"""
Normalisation des réponses LLM censées contenir un JSON.

Trois paliers, dans l'ordre :
  1. json.loads du texte complet ;
  2. json.loads de la première portion [...] ou {...} (regex gourmande) ;
  3. repli : valeur fixe annotée d'un marqueur d'erreur.

Le résultat est étiqueté (Parsed / Fallback) : l'appelant choisit lui-même
s'il sert le repli (récitation) ou s'il échoue en 500 (quiz, rédaction).
"""
import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

from pydantic import TypeAdapter

logger = logging.getLogger(__name__)

ARRAY_PATTERN = re.compile(r"\[[\s\S]*\]")
OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")
ANY_PATTERN = re.compile(r"\[[\s\S]*\]|\{[\s\S]*\}")

FALLBACK_ERROR = "LLM did not return valid JSON"

UNPARSEABLE = "unparseable"
INVALID_SHAPE = "invalid_shape"

Validator = Callable[[Any], Any]


@dataclass(frozen=True)
class Parsed:
    value: Any


@dataclass(frozen=True)
class Fallback:
    value: Any
    raw: str
    reason: str  # UNPARSEABLE | INVALID_SHAPE
    detail: Optional[str] = None


NormalizedResult = Union[Parsed, Fallback]


def shape(type_: Any) -> Validator:
    """
    Validateur construit sur un TypeAdapter pydantic (modèle, list[...], union...).
    Lève pydantic.ValidationError (sous-classe de ValueError) si la forme diverge.
    """
    adapter = TypeAdapter(type_)
    return adapter.validate_python


def extract_json(raw: str, pattern: "re.Pattern[str]" = ANY_PATTERN) -> Any:
    """
    Paliers 1 et 2. Lève ValueError si aucun JSON n'est récupérable.
    """
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        pass

    match = pattern.search(raw or "")
    if not match:
        raise ValueError("No JSON found in response")
    return json.loads(match.group(0))


def build_fallback(fallback: Any, raw: str) -> Any:
    if fallback is None:
        return None
    return {**fallback, "raw": raw, "error": FALLBACK_ERROR}


def normalize(
    raw: str,
    *,
    pattern: "re.Pattern[str]" = ANY_PATTERN,
    validate: Optional[Validator] = None,
    fallback: Optional[dict] = None,
) -> NormalizedResult:
    """
    Essaie d'obtenir une valeur JSON valide depuis `raw`.
    - Parsed(value)  : JSON récupéré (et validé si `validate` est fourni)
    - Fallback(...)  : `fallback` annoté de raw/error, avec la raison
    """
    try:
        value = extract_json(raw, pattern)
    except ValueError as e:
        logger.warning("Failed to parse LLM response (%s): %.200r", e, raw)
        return Fallback(value=build_fallback(fallback, raw), raw=raw, reason=UNPARSEABLE, detail=str(e))

    if validate is not None:
        try:
            value = validate(value)
        except ValueError as e:
            logger.warning("LLM response has an invalid shape: %s", e)
            return Fallback(value=build_fallback(fallback, raw), raw=raw, reason=INVALID_SHAPE, detail=str(e))

    return Parsed(value=value)
