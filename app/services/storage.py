import logging
import shutil
from dataclasses import dataclass
from pathlib import Path

from fastapi import UploadFile
from starlette.status import HTTP_400_BAD_REQUEST, HTTP_413_REQUEST_ENTITY_TOO_LARGE

from app.core.errors import ApiError
from app.utils.doc_extract import extract_text
from app.utils.text_utils import safe_filename, truncate

logger = logging.getLogger(__name__)

# MIME accepté -> extension imposée sur disque (sert à choisir l'extracteur)
ALLOWED_MIME_TYPES = {
    "application/pdf": ".pdf",
    "text/plain": ".txt",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": ".docx",
    "application/msword": ".doc",
}

INVALID_TYPE_MESSAGE = "Invalid file type. Only PDF, TXT, DOC and DOCX files are allowed."


@dataclass
class StoredFile:
    path: Path
    size: int
    kind: str  # pdf | text
    preview: str


class StorageService:
    """
    Stockage local des matériaux, un dossier par session :
    <base_path>/<session_id>/<material_id>-<nom>.<ext>
    """

    def __init__(self, base_path: str = "./data/materials", max_upload_mb: int = 50, preview_max_chars: int = 5000):
        self.base_path = Path(base_path).resolve()
        self.max_upload_bytes = max_upload_mb * 1024 * 1024
        self.preview_max_chars = preview_max_chars
        self.base_path.mkdir(parents=True, exist_ok=True)

    def session_dir(self, session_id: str) -> Path:
        return self.base_path / safe_filename(session_id, default="session")

    def preview(self, text: str) -> str:
        return truncate(text, self.preview_max_chars)

    def check_upload(self, file: UploadFile) -> str:
        """
        Valide le type MIME et retourne l'extension associée.
        """
        mime = (file.content_type or "").split(";")[0].strip().lower()
        if mime not in ALLOWED_MIME_TYPES:
            raise ApiError(HTTP_400_BAD_REQUEST, INVALID_TYPE_MESSAGE, mimeType=mime or None)
        return ALLOWED_MIME_TYPES[mime]

    def save_upload(self, session_id: str, material_id: str, file: UploadFile) -> StoredFile:
        """
        Sauvegarde un document uploadé et calcule son aperçu texte.
        """
        ext = self.check_upload(file)

        contents = file.file.read()
        if len(contents) > self.max_upload_bytes:
            raise ApiError(
                HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                f"File too large (max {self.max_upload_bytes // (1024 * 1024)} MB)",
            )

        name = safe_filename(file.filename or "upload")
        if not name.endswith(ext):
            name += ext

        folder = self.session_dir(session_id)
        folder.mkdir(parents=True, exist_ok=True)
        dest_path = folder / f"{material_id}-{name}"
        dest_path.write_bytes(contents)

        kind = "pdf" if ext == ".pdf" else "text"
        return StoredFile(
            path=dest_path,
            size=len(contents),
            kind=kind,
            preview=self._extract_preview(dest_path, file.filename or name),
        )

    def save_text(self, session_id: str, material_id: str, name: str, content: str) -> StoredFile:
        folder = self.session_dir(session_id)
        folder.mkdir(parents=True, exist_ok=True)
        dest_path = folder / f"{material_id}-{safe_filename(name, default='material')}.txt"
        dest_path.write_text(content, encoding="utf-8")
        return StoredFile(
            path=dest_path,
            size=dest_path.stat().st_size,
            kind="text",
            preview=self.preview(content),
        )

    def read_text(self, path: str) -> str:
        """
        Contenu complet d'un matériau (PDF/DOCX extraits, texte brut sinon).
        """
        return extract_text(Path(path))

    def delete_file(self, path: str) -> bool:
        """
        Supprime un fichier ; les erreurs sont loguées, jamais propagées.
        """
        try:
            Path(path).unlink()
            return True
        except FileNotFoundError:
            logger.warning("Material file already gone: %s", path)
        except OSError as e:
            logger.warning("Error deleting file %s: %s", path, e)
        return False

    def remove_session_dir(self, session_id: str) -> bool:
        folder = self.session_dir(session_id)
        if not folder.exists():
            return True
        try:
            shutil.rmtree(folder)
            return True
        except OSError as e:
            logger.warning("Error removing session directory %s: %s", folder, e)
            return False

    def _extract_preview(self, path: Path, display_name: str) -> str:
        try:
            text = extract_text(path)
        except Exception as e:
            # pypdf / python-docx lèvent des erreurs variées sur les fichiers abîmés
            logger.warning("Text extraction failed for %s: %s", path.name, e)
            text = ""
        if not text.strip():
            return f"[File: {display_name}]"
        return self.preview(text)
