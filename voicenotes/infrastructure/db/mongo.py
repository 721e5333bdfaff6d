# voicenotes/infrastructure/db/mongo.py
import logging

import certifi
from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError, ServerSelectionTimeoutError

from voicenotes.core.config import settings

_log = logging.getLogger("voicenotes.mongo")

_client: MongoClient | None = None
_db: Database | None = None


def init_mongo() -> None:
    """
    Inicializa el cliente y valida conexión (ping).
    Llamar una sola vez en el startup de FastAPI.
    """
    global _client, _db
    uri = settings.mongo_uri
    try:
        kwargs = dict(serverSelectionTimeoutMS=15000)
        if uri.startswith("mongodb+srv://") or settings.mongo_tls:
            # SRV ya implica TLS; proveemos CA bundle para robustez
            kwargs["tlsCAFile"] = certifi.where()
            if settings.mongo_tls:
                kwargs["tls"] = True
                kwargs["tlsAllowInvalidCertificates"] = bool(settings.mongo_tls_insecure)

        _client = MongoClient(uri, **kwargs)
        _client.admin.command("ping")
        _db = _client[settings.mongo_db]
        _log.info("Mongo conectado (db=%s)", settings.mongo_db)
    except ServerSelectionTimeoutError as e:
        # No tumbar la app: deja _db en None y loggea
        _log.warning("Mongo no accesible (timeout): %s", e)
        _client = None
        _db = None
    except PyMongoError as e:
        _log.warning("Error de conexión a Mongo: %s", e)
        _client = None
        _db = None


def set_db(db: Database | None) -> None:
    """Inyecta una base ya construida (tests, scripts)."""
    global _db
    _db = db


def get_db() -> Database:
    """
    Devuelve la referencia a la base de datos.
    Úsalo en repositorios/servicios, no en routers.
    """
    if _db is None:
        raise RuntimeError("Mongo no inicializado. Intenta más tarde.")
    return _db


def db_ready() -> bool:
    return _db is not None
