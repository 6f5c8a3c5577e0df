import logging
import sys
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

# Cargar variables de entorno primero
from dotenv import load_dotenv
load_dotenv()

from database import Database, DatabaseError
from responses import APIError, api_error_handler, validation_error_handler
from routers import complejo_router, event_router, health_router
from security import TokenService
from settings import Settings

logger = logging.getLogger(__name__)

COMPLEJO_COLLECTION = "complejo"
EVENT_COLLECTION = "event"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )


def bind_database(app: FastAPI, database: Database) -> None:
    """Guarda la conexión y las colecciones en el estado de la aplicación."""
    settings: Settings = app.state.settings
    app.state.database = database
    app.state.complejo_collection = database.collection(settings.mongo_db_name, COMPLEJO_COLLECTION)
    app.state.event_collection = database.collection(settings.mongo_db_name, EVENT_COLLECTION)


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    """Construye la aplicación.

    Args:
        settings: Configuración; si no se indica se lee del entorno / .env
        database: Conexión ya creada (tests). Si es None se conecta al arrancar
            y se cierra al parar.
    """
    settings = settings or Settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version
    )
    app.state.settings = settings
    app.state.token_service = TokenService(settings.jwt_secret, settings.jwt_algorithm)
    app.state.database = None

    if database is not None:
        bind_database(app, database)

    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    # Incluir routers
    app.include_router(health_router.router)
    app.include_router(complejo_router.router)
    app.include_router(event_router.router)

    @app.on_event("startup")
    async def startup_event():
        logger.info(f"🚀 {settings.app_title} v{settings.app_version} iniciando...")
        if app.state.database is not None:
            return
        try:
            bind_database(app, Database.connect(settings.mongo_uri, settings.mongo_timeout_seconds))
        except DatabaseError as e:
            logger.critical(f"❌ No se pudo conectar a MongoDB en {settings.mongo_uri}: {e}")
            raise

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("🛑 Deteniendo servicio de complejos...")
        # Solo se cierra la conexión que abrió la propia aplicación
        if database is None and app.state.database is not None:
            app.state.database.close()

    return app


# Ejecutar la aplicación con uvicorn cuando se ejecute este archivo directamente
if __name__ == "__main__":
    import uvicorn

    settings = Settings()
    uvicorn.run("main:create_app", factory=True, host=settings.host, port=settings.port)
