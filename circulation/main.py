"""
Ponto de entrada da aplicação FastAPI.

Este módulo configura a aplicação FastAPI, inclui rotas, traduz os
erros de circulação para respostas HTTP e define os handlers de ciclo
de vida (startup/shutdown).
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from circulation.api.v1.router import api_router
from circulation.core.config import get_settings
from circulation.core.exceptions import CirculationError
from circulation.core.logging import get_logger, setup_logging
from circulation.db.session import check_database_connection, engine
from circulation.schemas.base import ErrorResponse
from circulation.schemas.health import HealthResponse

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Gerencia o ciclo de vida da aplicação.

    Startup:
        - Configura logging
        - Verifica conexão com o banco

    Shutdown:
        - Fecha pool de conexões do banco
    """
    setup_logging()
    logger.info(f"Iniciando {settings.APP_NAME} em ambiente {settings.ENVIRONMENT}")

    success, error = await check_database_connection()
    if success:
        logger.info("Conexão com o banco estabelecida")
    else:
        logger.warning(f"Banco não disponível: {error}")

    yield

    logger.info(f"Encerrando {settings.APP_NAME}")
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    description="API REST do motor de circulação: empréstimos, multas, reservas e pagamentos",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Inclui rotas da API v1
app.include_router(api_router)


@app.exception_handler(CirculationError)
async def circulation_error_handler(request: Request, exc: CirculationError) -> JSONResponse:
    """Traduz erros de regra de negócio para o corpo ErrorResponse."""
    logger.info(f"{request.method} {request.url.path} -> {exc.status_code} {exc.error}")
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=exc.error, message=exc.message).model_dump(),
    )


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="Verifica status da aplicação",
    description="Retorna o status da aplicação, o ambiente e a conectividade com o banco.",
)
async def health_check() -> HealthResponse:
    """
    Endpoint de healthcheck para monitoramento.

    O status é "degraded" quando o banco não responde; a aplicação
    continua de pé para que o orquestrador possa decidir.
    """
    success, error = await check_database_connection()
    return HealthResponse(
        status="healthy" if success else "degraded",
        app_name=settings.APP_NAME,
        version=app.version,
        environment=settings.ENVIRONMENT,
        database="ok" if success else (error or "unavailable"),
    )
