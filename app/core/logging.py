import logging

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """
    Configure le logger racine (une seule fois, au create_app).
    """
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT, force=True)

    # uvicorn garde ses propres handlers, on aligne seulement le niveau
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).setLevel(level.upper())
