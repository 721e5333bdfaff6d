"""
Logging del servidor y del CLI.

Los loggers propios cuelgan de `voicenotes.*`; los de clientes HTTP/DB quedan en WARNING
para que el audio base64 y los pings de Mongo no inunden la salida.
"""
import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
NOISY_LOGGERS = ("httpx", "httpcore", "openai", "pymongo", "urllib3")


def _level(name: str) -> int:
    return getattr(logging, (name or "").upper(), logging.INFO)


def setup_logging(level: str = "INFO") -> None:
    lvl = _level(level)
    logging.basicConfig(level=lvl, format=LOG_FORMAT)
    logging.getLogger("voicenotes").setLevel(lvl)
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).setLevel(lvl)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(lvl, logging.WARNING))
