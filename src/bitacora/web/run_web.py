"""
Punto de entrada del servicio web de la bitácora (servidor Uvicorn).
"""

from __future__ import annotations

import logging
import signal
import sys
from typing import Any, Dict, Optional

import uvicorn

from bitacora.common.config_loader import ConfigLoader
from bitacora.common.config_manager import ConfigManager
from bitacora.common.database import DatabaseConnector
from bitacora.common.logging_setup import setup_logging
from bitacora.web.main import create_app

PREFIJO_FORMULARIOS = "PG_FORMULARIOS"
PREFIJO_REFERENCIAS = "PG_REFERENCIAS"

_service_name = "web"
_shutdown_initiated = False
_server_instance: Optional[uvicorn.Server] = None
_conectores: Dict[str, DatabaseConnector] = {}


# ---------- Cierre ordenado ----------


def _graceful_shutdown(signum: int, frame: Any) -> None:
    global _shutdown_initiated
    if _shutdown_initiated:
        logging.warning("Señal de cierre duplicada recibida. Ya se está deteniendo.")
        return
    _shutdown_initiated = True
    logging.info(f"Señal de parada recibida (Señal: {signum}). Iniciando cierre ordenado...")

    if _server_instance:
        _server_instance.should_exit = True
    else:
        sys.exit(0)


def _setup_signals() -> None:
    signal.signal(signal.SIGINT, _graceful_shutdown)
    if sys.platform == "win32":
        signal.signal(signal.SIGBREAK, _graceful_shutdown)
    else:
        signal.signal(signal.SIGTERM, _graceful_shutdown)


# ---------- Lógica del servicio ----------


def _setup_dependencies() -> Dict[str, DatabaseConnector]:
    """Crea los conectores de ambas bases y los verifica con `SELECT 1`."""
    for clave, prefijo in (("db_formularios", PREFIJO_FORMULARIOS), ("db_referencias", PREFIJO_REFERENCIAS)):
        conector = DatabaseConnector.desde_config(prefijo)
        logging.info(f"Conector creado: {conector.descripcion()}")
        if conector.verificar_conexion():
            logging.info(f"Conexión verificada: {conector.descripcion()}")
        else:
            # El servicio arranca igual; las consultas fallarán con DB_UNAVAILABLE hasta que la base responda
            logging.error(f"No se pudo verificar la conexión: {conector.descripcion()}")
        _conectores[clave] = conector
    return dict(_conectores)


def _run_service(deps: Dict[str, DatabaseConnector]) -> None:
    global _server_instance

    app = create_app(db_formularios=deps["db_formularios"], db_referencias=deps["db_referencias"])

    web_config = ConfigManager.get_interfaz_web_config()
    host = web_config["host"]
    port = web_config["port"]
    reload = web_config["debug"]

    logging.info(f"Configuración del servidor: http://{host}:{port} (Reload: {reload})")

    config = uvicorn.Config(
        app,
        host=host,
        port=port,
        reload=reload,
        workers=1,  # ReactPy mantiene el estado de las vistas en memoria
        loop="asyncio",
    )
    _server_instance = uvicorn.Server(config)
    _server_instance.run()


def _cleanup_resources() -> None:
    logging.info("Iniciando limpieza de recursos...")
    for clave, conector in _conectores.items():
        try:
            conector.cerrar_conexiones_pool()
        except Exception as e:
            logging.error(f"Error cerrando {clave}: {e}")
    _conectores.clear()
    logging.info(f"Servicio {_service_name.upper()} ha concluido y liberado recursos.")


# ---------- Punto de entrada ----------


def main(service_name: str) -> None:
    """Punto de entrada síncrono llamado por __main__.py."""
    global _service_name
    _service_name = service_name

    setup_logging(service_name=service_name)
    logging.info(f"Iniciando el servicio: {_service_name.capitalize()}...")

    _setup_signals()

    try:
        deps = _setup_dependencies()
        _run_service(deps)
    except (KeyboardInterrupt, SystemExit):
        logging.info("Servicio detenido por el usuario o el sistema.")
    except Exception as e:
        logging.critical(f"Error crítico no controlado en main: {e}", exc_info=True)
        sys.exit(1)
    finally:
        _cleanup_resources()


if __name__ == "__main__":
    ConfigLoader.initialize_service(_service_name)
    main(_service_name)
