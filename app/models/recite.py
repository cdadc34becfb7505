from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ReciteRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    recitedText: str = Field(..., min_length=1, description="Explication / récitation de l'étudiant")
    expectedText: str = Field(..., min_length=1, description="Matériel d'étude original")


class BodyLanguageAnalysis(BaseModel):
    confidence: int = Field(..., ge=1, le=10)
    nervousness: int = Field(..., ge=1, le=10)
    posture: str = ""
    eyeContact: str = ""
    facialExpression: str = ""
    suggestions: List[str] = Field(default_factory=list)


class RecitationEvaluation(BaseModel):
    accuracy: float = Field(..., ge=0, le=100)
    missingParts: List[str] = Field(default_factory=list)
    incorrectParts: List[str] = Field(default_factory=list)
    summary: str = ""

    # présents uniquement quand la réponse est un repli
    raw: Optional[str] = None
    error: Optional[str] = None

    bodyLanguage: Optional[BodyLanguageAnalysis] = None
