import logging
import os
from typing import Any, Dict

logger = logging.getLogger(__name__)


class ConfigManager:
    """
    Gestor de configuración centralizado de la bitácora.

    Todos los accesos a variables de entorno pasan por aquí. Los métodos son
    @classmethod para poder parchearlos en los tests sin instanciar nada.
    """

    @classmethod
    def _get_env_with_warning(cls, key: str, default: Any = None, warning_msg: str = None) -> Any:
        """
        Lee una variable de entorno. Si no existe o está vacía devuelve el
        valor por defecto y, si se indicó, registra una advertencia.
        """
        value = os.getenv(key, default)
        if value is None or (isinstance(value, str) and not value.strip()):
            if warning_msg:
                logger.warning(f"ADVERTENCIA ConfigManager: {warning_msg}")
            return default
        return value

    @classmethod
    def _get_bool(cls, key: str, default: str = "False") -> bool:
        return str(cls._get_env_with_warning(key, default)).strip().lower() in ("true", "1", "yes", "si")

    # --- CONFIGURACIONES GENERALES ---

    @classmethod
    def get_log_config(cls) -> Dict[str, Any]:
        return {
            "directory": cls._get_env_with_warning("LOG_DIRECTORY", "logs"),
            "level_str": cls._get_env_with_warning("LOG_LEVEL", "INFO"),
            "format": cls._get_env_with_warning(
                "LOG_FORMAT", "%(asctime)s - PID:%(process)d - %(name)s - %(levelname)s - %(funcName)s - %(message)s"
            ),
            "datefmt": cls._get_env_with_warning("LOG_DATEFMT", "%Y-%m-%d %H:%M:%S"),
            "backupCount": int(cls._get_env_with_warning("LOG_BACKUP_COUNT", 7)),
            "app_log_filename_web": cls._get_env_with_warning("APP_LOG_FILENAME_WEB", "bitacora_web.log"),
            "when": "midnight",
            "interval": 1,
            "encoding": "utf-8",
        }

    @classmethod
    def get_postgres_config(cls, prefix: str) -> Dict[str, Any]:
        """
        Configuración de una base Postgres a partir de un prefijo
        (ej: 'PG_FORMULARIOS' para la base principal, 'PG_REFERENCIAS' para la de referencias).
        """
        return {
            "host": cls._get_env_with_warning(f"{prefix}_HOST", "localhost", f"{prefix}_HOST no definido."),
            "port": int(cls._get_env_with_warning(f"{prefix}_PORT", 5432)),
            "usuario": cls._get_env_with_warning(f"{prefix}_USER", None, f"{prefix}_USER no definido."),
            "contrasena": cls._get_env_with_warning(f"{prefix}_PASSWORD"),
            "base_datos": cls._get_env_with_warning(f"{prefix}_DB_NAME", None, f"{prefix}_DB_NAME no definido."),
            "pool_min": int(cls._get_env_with_warning(f"{prefix}_POOL_MIN", 1)),
            "pool_max": int(cls._get_env_with_warning(f"{prefix}_POOL_MAX", 10)),
            "timeout": int(cls._get_env_with_warning(f"{prefix}_TIMEOUT_CONEXION", 10)),
        }

    # --- CONFIGURACIONES ESPECÍFICAS POR SERVICIO ---

    @classmethod
    def get_interfaz_web_config(cls) -> Dict[str, Any]:
        """Host/puerto del servicio web y URL con la que la grilla llega a /graphql."""
        port = int(cls._get_env_with_warning("WEB_PORT", cls._get_env_with_warning("PORT", 3000)))
        return {
            "host": cls._get_env_with_warning("WEB_HOST", "0.0.0.0"),
            "port": port,
            "debug": cls._get_bool("WEB_DEBUG"),
            "api_base_url": cls._get_env_with_warning("WEB_API_BASE_URL", f"http://127.0.0.1:{port}"),
            "api_timeout_seg": float(cls._get_env_with_warning("WEB_API_TIMEOUT_SEG", 30)),
        }
