"""
Endpoints de Catálogo que afetam a circulação.

Contratos:
    - POST /books/{id}/retire: Retira o título do acervo (cascata explícita)

Status codes:
    - 200: Sucesso
    - 404: Livro não encontrado
    - 409: Livro já retirado ou com empréstimos em aberto
"""

from uuid import UUID

from fastapi import APIRouter

from circulation.core.deps import DbSession
from circulation.schemas.book import RetireResult
from circulation.services.catalog import CatalogService

router = APIRouter(prefix="/books", tags=["Books"])


@router.post(
    "/{book_id}/retire",
    response_model=RetireResult,
    summary="Retirar título do acervo",
    description="Cancela reservas ativas e tira todas as cópias de circulação. Nada é apagado.",
)
async def retire_book(book_id: UUID, db: DbSession) -> RetireResult:
    service = CatalogService(db)
    return await service.retire_book(book_id)
