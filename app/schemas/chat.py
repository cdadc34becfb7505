from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SessionType(str, Enum):
    study = "study"
    practice = "practice"


class MaterialType(str, Enum):
    pdf = "pdf"
    text = "text"


# -------------------
# Chats
# -------------------
class ChatCreateIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = Field(default=None, max_length=255)
    type: SessionType = Field(default=SessionType.study)


class ChatUpdateIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=255)


class MaterialOut(BaseModel):
    id: str
    sessionId: str
    name: str
    type: MaterialType
    filePath: str
    content: str = ""
    size: Optional[int] = None
    createdAt: datetime
    updatedAt: datetime


class ChatOut(BaseModel):
    id: str
    title: str
    type: SessionType
    createdAt: datetime
    updatedAt: datetime
    materials: List[MaterialOut] = Field(default_factory=list)


# -------------------
# Materials
# -------------------
class MaterialCreateIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1)
    type: MaterialType = Field(default=MaterialType.text)


class MaterialContentOut(BaseModel):
    content: str


class MessageOut(BaseModel):
    message: str
