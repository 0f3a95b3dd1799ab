import logging
import logging.handlers
import os
from pathlib import Path

from .config_loader import ConfigLoader
from .config_manager import ConfigManager

# Loggers de terceros y el nivel mínimo que se deja pasar
NIVELES_TERCEROS = {
    # Cada POST de la grilla a /graphql
    "httpx": logging.WARNING,
    # _manejar_error ya registra cada error de resolver junto con su código
    "strawberry.execution": logging.CRITICAL,
}


class RelativePathFormatter(logging.Formatter):
    """Muestra las rutas de los registros relativas a la raíz del proyecto."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.project_root = str(ConfigLoader.get_project_root())

    def format(self, record):
        if record.pathname.startswith(self.project_root):
            record.pathname = os.path.relpath(record.pathname, self.project_root)
        return super().format(record)


def setup_logging(service_name: str):
    """Logger raíz del servicio: archivo con rotación diaria y consola, con el mismo formato."""
    log_config = ConfigManager.get_log_config()
    log_directory = Path(log_config["directory"])
    log_directory.mkdir(parents=True, exist_ok=True)
    log_file_path = log_directory / log_config.get(f"app_log_filename_{service_name}", f"bitacora_{service_name}.log")

    formatter = RelativePathFormatter(log_config["format"], datefmt=log_config["datefmt"])
    handlers = [
        logging.handlers.TimedRotatingFileHandler(
            log_file_path,
            when=log_config["when"],
            interval=log_config["interval"],
            backupCount=log_config["backupCount"],
            encoding=log_config["encoding"],
        ),
        logging.StreamHandler(),
    ]
    for handler in handlers:
        handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, str(log_config["level_str"]).upper(), logging.INFO))
    root_logger.handlers = handlers

    for nombre, nivel in NIVELES_TERCEROS.items():
        logging.getLogger(nombre).setLevel(nivel)

    logging.info(f"Logging del servicio '{service_name}' en {log_file_path}")
