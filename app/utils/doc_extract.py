import logging
from pathlib import Path

from docx import Document
from pypdf import PdfReader

logger = logging.getLogger(__name__)


def extract_pdf_text(path: Path) -> str:
    """
    Extrait le texte de toutes les pages d'un PDF (pages vides ignorées).
    """
    reader = PdfReader(str(path))
    chunks = []
    for page in reader.pages:
        txt = page.extract_text() or ""
        if txt.strip():
            chunks.append(txt)
    return "\n".join(chunks)


def extract_docx_text(path: Path) -> str:
    """
    Paragraphes puis tableaux (cellules séparées par " | ").
    """
    doc = Document(str(path))
    lines = [p.text for p in doc.paragraphs if p.text.strip()]
    for table in doc.tables:
        for row in table.rows:
            lines.append(" | ".join(cell.text.strip() for cell in row.cells))
    return "\n".join(lines)


def extract_text(path: Path) -> str:
    """
    Texte lisible d'un document stocké, selon son extension.
    .doc (binaire Word 97) n'est pas décodable : on retourne "".
    """
    suffix = path.suffix.lower()
    if suffix == ".pdf":
        return extract_pdf_text(path)
    if suffix == ".docx":
        return extract_docx_text(path)
    if suffix == ".doc":
        logger.info("No text extraction for legacy Word file %s", path.name)
        return ""
    return path.read_text(encoding="utf-8", errors="replace")
