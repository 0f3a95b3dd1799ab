import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from reactpy.backend.fastapi import Options, configure
from starlette.staticfiles import StaticFiles

from bitacora.common.database import DatabaseConnector

from .backend.api import router as graphql_router
from .backend.dependencies import db_formularios_provider, db_referencias_provider
from .frontend.api.api_client import get_api_client
from .frontend.app import App, head

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Iniciando aplicación y recursos...")
    for provider in (db_formularios_provider, db_referencias_provider):
        if not provider.has_db_connector():
            logger.warning(f"El conector '{provider.nombre}' no fue inyectado; /graphql responderá 503.")

    yield

    logger.info("Iniciando cierre ordenado de recursos...")
    await get_api_client().close()
    for provider in (db_formularios_provider, db_referencias_provider):
        if not provider.has_db_connector():
            continue
        try:
            provider.get_db_connector().cerrar_conexiones_pool()
        except Exception as e:
            logger.error(f"Error al cerrar el pool '{provider.nombre}': {e}", exc_info=True)


def create_app(db_formularios: Optional[DatabaseConnector], db_referencias: Optional[DatabaseConnector]) -> FastAPI:
    """Crea la aplicación: /graphql, /static y la grilla ReactPy en el resto de rutas."""
    app = FastAPI(title="Bitácora Formulario2", lifespan=lifespan)

    db_formularios_provider.set_db_connector(db_formularios)
    db_referencias_provider.set_db_connector(db_referencias)

    app.include_router(graphql_router, prefix="/graphql")

    static_files_path = Path(__file__).parent / "static"
    if static_files_path.exists():
        app.mount("/static", StaticFiles(directory=static_files_path), name="static")

    configure(app, App, options=Options(head=head))

    return app
