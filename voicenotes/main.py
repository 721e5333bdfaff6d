"""Entrada principal de la app FastAPI (configura middlewares, excepciones y routers).

La raíz solo monta dos sub-apps, cada una con su propio CORS:
- `settings.api_prefix`: API de notas/auth (orígenes configurados).
- `settings.functions_prefix`: función transcribe-and-format (cualquier origen, POST/OPTIONS).
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from pymongo.errors import PyMongoError

from voicenotes.api.router import api_router, functions_router
from voicenotes.core.config import settings
from voicenotes.core.exceptions import register_exception_handlers, register_function_exception_handlers
from voicenotes.core.logging import setup_logging
from voicenotes.core.middleware import add_function_middlewares, add_middlewares
from voicenotes.infrastructure.db.bootstrap import ensure_collections
from voicenotes.infrastructure.db.mongo import db_ready, init_mongo

_log = logging.getLogger("voicenotes.startup")


@asynccontextmanager
async def lifespan(_app: FastAPI):
    if not db_ready():
        init_mongo()
    # Garantiza colecciones/índices/validadores mínimos si hay conexión
    try:
        if db_ready():
            ensure_collections()
        else:
            _log.warning("Mongo no listo; omitiendo ensure_collections()")
    except PyMongoError as e:
        # No impedir el arranque si fallan validadores/índices
        _log.warning("ensure_collections() falló: %s", e)
    yield


def create_api_app() -> FastAPI:
    api = FastAPI(title=settings.app_name)
    add_middlewares(api)
    register_exception_handlers(api)
    api.include_router(api_router)
    return api


def create_functions_app() -> FastAPI:
    functions = FastAPI(title=f"{settings.app_name} functions")
    add_function_middlewares(functions)
    register_function_exception_handlers(functions)
    functions.include_router(functions_router)
    return functions


def create_app() -> FastAPI:
    setup_logging(settings.log_level)
    application = FastAPI(title=settings.app_name, lifespan=lifespan)
    application.mount(settings.functions_prefix, create_functions_app())
    application.mount(settings.api_prefix_normalized or "/api", create_api_app())
    return application


app = create_app()
