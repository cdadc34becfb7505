import re
import unicodedata


def safe_filename(name: str, default: str = "upload") -> str:
    """
    Nom de fichier sûr pour le disque : ASCII, minuscules, [a-z0-9._- ] seulement.
    """
    if not name:
        return default
    name = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode("ascii")
    # pas de chemin : on ne garde que le dernier segment
    name = re.split(r"[\\/]", name)[-1]
    name = re.sub(r"[^a-zA-Z0-9._\- ]", "_", name).strip(" .").lower()
    return name or default


def truncate(text: str, limit: int) -> str:
    if not text:
        return ""
    return text[:limit]
