from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    String,
    DateTime,
    Integer,
    ForeignKey,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================
# SESSIONS DE CHAT
# ============================================================

class ChatSession(Base):
    __tablename__ = "chat_sessions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    # study | practice
    type: Mapped[str] = mapped_column(String(16), default="study", nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    # ============================================================
    # Relations
    # ============================================================
    materials: Mapped[list["ChatMaterial"]] = relationship(
        "ChatMaterial",
        back_populates="session",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ChatMaterial.created_at",
    )

    def touch(self) -> None:
        self.updated_at = utcnow()


class ChatMaterial(Base):
    __tablename__ = "chat_materials"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    session_id: Mapped[str] = mapped_column(
        ForeignKey("chat_sessions.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # pdf | text
    type: Mapped[str] = mapped_column(String(16), nullable=False)

    # chemin absolu, ex: /srv/data/materials/<session_id>/<material_id>-cours.pdf
    file_path: Mapped[str] = mapped_column(String(1000), nullable=False)

    # aperçu tronqué (PREVIEW_MAX_CHARS), le contenu complet reste sur disque
    content: Mapped[str] = mapped_column(Text, default="", nullable=False)

    size_bytes: Mapped[int | None] = mapped_column(Integer, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    session: Mapped["ChatSession"] = relationship("ChatSession", back_populates="materials")
