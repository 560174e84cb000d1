"""
Aplicação FastAPI do motor de circulação.

Monta as rotas ``/api/v1`` e o ``/health``. O ciclo de vida cuida do
logging, do cliente Redis (opcional) e do pool do banco; no startup também
avisa quando o relógio simulado ficou ativo de uma execução anterior.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from circulation.api.v1.router import api_router
from circulation.core.config import get_settings
from circulation.core.logging import setup_logging, get_logger
from circulation.db.redis import check_redis_connection, close_redis, init_redis
from circulation.db.session import async_session_factory, check_database_connection, engine
from circulation.schemas.health import HealthResponse
from circulation.services.clock import SettingsClock

settings = get_settings()
logger = get_logger(__name__)


async def log_clock_state() -> None:
    """Registra se a aplicação sobe com data simulada."""
    async with async_session_factory() as session:
        simulated = await SettingsClock(session, use_cache=False).get_simulated()

    if simulated is not None:
        logger.warning(f"Relógio simulado ativo: {simulated.isoformat()}")
    else:
        logger.info("Relógio real em uso")


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info(f"Iniciando {settings.APP_NAME} ({settings.ENVIRONMENT})")

    # Sem Redis o relógio é lido sempre do banco
    try:
        await init_redis()
    except Exception as e:
        logger.warning(f"Falha ao criar cliente Redis: {e}")
    if await check_redis_connection():
        logger.info("Cache do relógio ativo (Redis)")
    else:
        logger.warning("Redis indisponível; cache do relógio desativado")

    database_ok, error = await check_database_connection()
    if database_ok:
        try:
            await log_clock_state()
        except Exception as e:
            logger.warning(f"Não foi possível ler o relógio: {e}")
    else:
        logger.error(f"Banco de dados indisponível no startup: {error}")

    yield

    logger.info(f"Encerrando {settings.APP_NAME}")
    await close_redis()
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    description=(
        "Motor de circulação de livros: empréstimos, holds em duas fases, "
        "lista de espera, notificações e relógio simulado."
    ),
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(api_router)


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="Status da aplicação",
)
async def health_check() -> HealthResponse:
    """
    Healthcheck para monitoramento.

    Só o banco define o status; o cache é opcional.
    """
    database_ok, _ = await check_database_connection()
    cache_ok = await check_redis_connection()

    return HealthResponse(
        status="healthy" if database_ok else "degraded",
        app_name=settings.APP_NAME,
        environment=settings.ENVIRONMENT,
        database="up" if database_ok else "down",
        cache="up" if cache_ok else "down",
    )
