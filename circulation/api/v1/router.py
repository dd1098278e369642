"""
Router principal da API v1.

Inclui todos os routers de endpoints.
"""

from fastapi import APIRouter

from circulation.api.v1.books import router as books_router
from circulation.api.v1.loans import router as loans_router
from circulation.api.v1.reservations import router as reservations_router
from circulation.api.v1.system import router as system_router

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(books_router)
api_router.include_router(loans_router)
api_router.include_router(reservations_router)
api_router.include_router(system_router)
