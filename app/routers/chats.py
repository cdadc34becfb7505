from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload
from starlette.status import HTTP_404_NOT_FOUND, HTTP_500_INTERNAL_SERVER_ERROR

from app.core.deps import get_storage_service
from app.core.errors import ApiError
from app.db.database import get_db
from app.db.models import ChatMaterial, ChatSession, utcnow
from app.schemas.chat import (
    ChatCreateIn, ChatUpdateIn, ChatOut,
    MaterialCreateIn, MaterialOut, MessageOut,
)
from app.services.storage import StorageService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/chats", tags=["chats"])


# =========================================================
# Helpers
# =========================================================
def material_out(m: ChatMaterial) -> MaterialOut:
    return MaterialOut(
        id=m.id,
        sessionId=m.session_id,
        name=m.name,
        type=m.type,
        filePath=m.file_path,
        content=m.content,
        size=m.size_bytes,
        createdAt=m.created_at,
        updatedAt=m.updated_at,
    )


def chat_out(c: ChatSession) -> ChatOut:
    return ChatOut(
        id=c.id,
        title=c.title,
        type=c.type,
        createdAt=c.created_at,
        updatedAt=c.updated_at,
        materials=[material_out(m) for m in c.materials],
    )


def chat_or_404(db: Session, chat_id: str) -> ChatSession:
    c = db.execute(
        select(ChatSession).options(selectinload(ChatSession.materials)).where(ChatSession.id == chat_id)
    ).scalar_one_or_none()
    if not c:
        raise ApiError(HTTP_404_NOT_FOUND, "Chat not found")
    return c


def _storage_failure(db: Session, message: str) -> ApiError:
    db.rollback()
    logger.exception(message)
    return ApiError(HTTP_500_INTERNAL_SERVER_ERROR, message)


# =========================================================
# Chats
# =========================================================
@router.get("", response_model=list[ChatOut])
def list_chats(db: Session = Depends(get_db)):
    try:
        chats = db.execute(
            select(ChatSession)
            .options(selectinload(ChatSession.materials))
            .order_by(ChatSession.updated_at.desc())
        ).scalars().all()
        return [chat_out(c) for c in chats]
    except SQLAlchemyError:
        raise _storage_failure(db, "Error fetching chats")


@router.post("", response_model=ChatOut)
def create_chat(payload: Optional[ChatCreateIn] = None, db: Session = Depends(get_db)):
    payload = payload or ChatCreateIn()
    title = payload.title or f"Chat {date.today().isoformat()}"
    try:
        c = ChatSession(title=title, type=payload.type.value)
        db.add(c)
        db.commit()
        db.refresh(c)
        return chat_out(c)
    except SQLAlchemyError:
        raise _storage_failure(db, "Error creating chat")


@router.get("/{chat_id}", response_model=ChatOut)
def get_chat(chat_id: str, db: Session = Depends(get_db)):
    try:
        return chat_out(chat_or_404(db, chat_id))
    except SQLAlchemyError:
        raise _storage_failure(db, "Error fetching chat")


@router.put("/{chat_id}", response_model=ChatOut)
def update_chat(chat_id: str, payload: ChatUpdateIn, db: Session = Depends(get_db)):
    try:
        c = chat_or_404(db, chat_id)
        c.title = payload.title
        c.touch()
        db.commit()
        db.refresh(c)
        return chat_out(c)
    except SQLAlchemyError:
        raise _storage_failure(db, "Error updating chat")


@router.delete("/{chat_id}", response_model=MessageOut)
def delete_chat(
    chat_id: str,
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage_service),
):
    try:
        c = chat_or_404(db, chat_id)

        # fichiers d'abord (best effort), puis le dossier, puis la ligne
        for m in c.materials:
            storage.delete_file(m.file_path)
        storage.remove_session_dir(c.id)

        # les matériaux suivent en cascade
        db.delete(c)
        db.commit()
    except SQLAlchemyError:
        raise _storage_failure(db, "Error deleting chat")

    return MessageOut(message="Chat deleted successfully")


# =========================================================
# Materials
# =========================================================
@router.post("/{chat_id}/upload", response_model=MaterialOut)
def upload_material(
    chat_id: str,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage_service),
):
    material_id = str(uuid.uuid4())
    try:
        c = chat_or_404(db, chat_id)
        stored = storage.save_upload(c.id, material_id, file)

        now = utcnow()
        m = ChatMaterial(
            id=material_id,
            session_id=c.id,
            name=file.filename or stored.path.name,
            type=stored.kind,
            file_path=str(stored.path),
            content=stored.preview,
            size_bytes=stored.size,
            created_at=now,
            updated_at=now,
        )
        db.add(m)
        c.updated_at = now
        db.commit()
        db.refresh(m)
        return material_out(m)
    except (SQLAlchemyError, OSError):
        raise _storage_failure(db, "Error uploading file")


@router.post("/{chat_id}/materials", response_model=MaterialOut)
def add_text_material(
    chat_id: str,
    payload: MaterialCreateIn,
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage_service),
):
    material_id = str(uuid.uuid4())
    try:
        c = chat_or_404(db, chat_id)
        stored = storage.save_text(c.id, material_id, payload.name, payload.content)

        now = utcnow()
        m = ChatMaterial(
            id=material_id,
            session_id=c.id,
            name=payload.name,
            type=payload.type.value,
            file_path=str(stored.path),
            content=stored.preview,
            size_bytes=stored.size,
            created_at=now,
            updated_at=now,
        )
        db.add(m)
        c.updated_at = now
        db.commit()
        db.refresh(m)
        return material_out(m)
    except (SQLAlchemyError, OSError):
        raise _storage_failure(db, "Error adding material")
