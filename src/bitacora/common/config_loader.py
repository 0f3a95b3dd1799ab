import os
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


class ConfigLoader:
    """
    Carga la configuración de un servicio de la bitácora.
    Precedencia: variables del sistema > .env del servicio > .env general.
    """

    _initialized = False
    _project_root: Optional[Path] = None
    _service_name: Optional[str] = None

    @classmethod
    def initialize_service(cls, service_name: str) -> None:
        if cls._initialized:
            return

        cls._project_root = cls._buscar_raiz_proyecto()
        cls._service_name = service_name
        cls._cargar_archivos_env(service_name)
        cls._initialized = True
        os.environ["BITACORA_CONFIG_INITIALIZED"] = "True"

        print(f"CONFIG_LOADER: Servicio '{service_name}' inicializado (raíz: {cls._project_root})", file=sys.stderr)

    @staticmethod
    def _buscar_raiz_proyecto() -> Path:
        """Sube desde este archivo hasta encontrar 'pyproject.toml'."""
        actual = Path(__file__).resolve()
        for candidato in actual.parents:
            if (candidato / "pyproject.toml").exists():
                return candidato
        print(
            f"ADVERTENCIA CONFIG_LOADER: No se encontró 'pyproject.toml'. Se usa el directorio actual: {Path.cwd()}",
            file=sys.stderr,
        )
        return Path.cwd()

    @classmethod
    def _cargar_archivos_env(cls, service_name: str) -> None:
        # override=False: el .env general nunca pisa variables ya definidas
        env_general = cls._project_root / ".env"
        if env_general.exists():
            print(f"CONFIG_LOADER: Cargando .env general desde {env_general}", file=sys.stderr)
            load_dotenv(dotenv_path=env_general, override=False)

        env_servicio = cls._project_root / "src" / "bitacora" / service_name / ".env"
        if env_servicio.exists():
            print(f"CONFIG_LOADER: Cargando .env del servicio desde {env_servicio}", file=sys.stderr)
            load_dotenv(dotenv_path=env_servicio, override=True)

    @classmethod
    def get_project_root(cls) -> Path:
        if not cls._initialized:
            raise RuntimeError("ConfigLoader no ha sido inicializado. Llama a initialize_service() primero.")
        return cls._project_root

    @classmethod
    def is_initialized(cls) -> bool:
        return cls._initialized
