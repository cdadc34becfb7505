import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.status import HTTP_404_NOT_FOUND, HTTP_500_INTERNAL_SERVER_ERROR

from app.core.deps import get_storage_service
from app.core.errors import ApiError
from app.db.database import get_db
from app.db.models import ChatMaterial
from app.routers.chats import material_out
from app.schemas.chat import MaterialContentOut, MaterialOut, MessageOut
from app.services.storage import StorageService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/materials", tags=["materials"])


def material_or_404(db: Session, material_id: str) -> ChatMaterial:
    try:
        m = db.execute(select(ChatMaterial).where(ChatMaterial.id == material_id)).scalar_one_or_none()
    except SQLAlchemyError:
        logger.exception("Error fetching material %s", material_id)
        raise ApiError(HTTP_500_INTERNAL_SERVER_ERROR, "Error fetching material")
    if not m:
        raise ApiError(HTTP_404_NOT_FOUND, "Material not found")
    return m


@router.get("/{material_id}", response_model=MaterialOut)
def get_material(material_id: str, db: Session = Depends(get_db)):
    return material_out(material_or_404(db, material_id))


@router.get("/{material_id}/content", response_model=MaterialContentOut)
def get_material_content(
    material_id: str,
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage_service),
):
    m = material_or_404(db, material_id)
    try:
        content = storage.read_text(m.file_path)
    except Exception:
        # OSError, mais aussi les erreurs pypdf / python-docx sur fichier abîmé
        logger.exception("Error reading material %s (%s)", m.id, m.file_path)
        raise ApiError(HTTP_500_INTERNAL_SERVER_ERROR, "Error reading material")
    return MaterialContentOut(content=content)


@router.delete("/{material_id}", response_model=MessageOut)
def delete_material(
    material_id: str,
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage_service),
):
    m = material_or_404(db, material_id)

    storage.delete_file(m.file_path)

    try:
        db.delete(m)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error deleting material %s", material_id)
        raise ApiError(HTTP_500_INTERNAL_SERVER_ERROR, "Error deleting material")

    return MessageOut(message="Material deleted successfully")
