from enum import Enum
from typing import Annotated, List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, field_validator


class Difficulty(str, Enum):
    easy = "easy"
    medium = "medium"
    hard = "hard"


class QuestionType(str, Enum):
    test = "test"      # QCM 4 choix
    essay = "essay"    # réponse rédigée
    mixed = "mixed"    # alternance des deux


# -------------------
# Questions (sortie LLM, non persistées)
# -------------------
class MultipleChoiceQuestion(BaseModel):
    type: Literal["test"] = "test"
    question: str = Field(..., min_length=1)
    options: List[str] = Field(..., min_length=4, max_length=4)
    correctAnswer: StrictInt = Field(..., ge=0, le=3)
    explanation: str = ""

    @field_validator("type", mode="before")
    @classmethod
    def _any_tag(cls, v):
        # en mode "test" seul le contenu compte ; en mode "mixed" le discriminant a déjà choisi
        return "test"


class EssayQuestion(BaseModel):
    type: Literal["essay"] = "essay"
    question: str = Field(..., min_length=1)
    expectedAnswer: str = Field(..., min_length=1)
    explanation: str = ""


MixedQuestion = Annotated[Union[MultipleChoiceQuestion, EssayQuestion], Field(discriminator="type")]

# au moins une question, jamais d'acceptation partielle
MultipleChoiceList = Annotated[List[MultipleChoiceQuestion], Field(min_length=1)]
EssayList = Annotated[List[EssayQuestion], Field(min_length=1)]
MixedList = Annotated[List[MixedQuestion], Field(min_length=1)]


class GenerateQuizRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    material: str = Field(..., min_length=1, description="Texte source du quiz")
    numQuestions: int = Field(default=10, ge=1, le=50, description="Nombre de questions")
    difficulty: Difficulty = Field(default=Difficulty.medium)
    questionType: QuestionType = Field(default=QuestionType.test)


class GenerateQuizResponse(BaseModel):
    questions: List[MixedQuestion]


# -------------------
# Évaluation d'une réponse rédigée
# -------------------
class EvaluateAnswerRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    question: str = Field(..., min_length=1)
    expectedAnswer: str = Field(..., min_length=1)
    userAnswer: str = Field(..., min_length=1)


class EssayEvaluation(BaseModel):
    # StrictBool : la chaîne "true" est refusée, pas convertie
    isCorrect: StrictBool
    feedback: str = Field(..., min_length=1)
