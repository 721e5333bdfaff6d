"""Agregador de routers de la API."""
from fastapi import APIRouter
from voicenotes.api.routers import auth, health, note, transcribe

api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(auth.router)
api_router.include_router(note.router)

# Sub-app de funciones (montada aparte por su CORS abierto)
functions_router = APIRouter()
functions_router.include_router(transcribe.router)
