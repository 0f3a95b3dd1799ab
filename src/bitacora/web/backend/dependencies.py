from typing import Optional

from fastapi import HTTPException

from bitacora.common.database import DatabaseConnector


class DBDependencyProvider:
    """
    Contenedor de un conector de base de datos. run_web.py lo carga una vez al
    arrancar y el router GraphQL lo obtiene a través de FastAPI `Depends`.
    """

    def __init__(self, nombre: str):
        self.nombre = nombre
        self._db_connector: Optional[DatabaseConnector] = None

    def set_db_connector(self, db_connector: Optional[DatabaseConnector]):
        self._db_connector = db_connector

    def get_db_connector(self) -> DatabaseConnector:
        if self._db_connector is None:
            raise HTTPException(status_code=503, detail=f"Conexión BD {self.nombre} no disponible.")
        return self._db_connector

    def has_db_connector(self) -> bool:
        return self._db_connector is not None


# Base principal (formularios) y base secundaria (OPs/SCI y máquinas)
db_formularios_provider = DBDependencyProvider("formularios")
db_referencias_provider = DBDependencyProvider("referencias")

get_db_formularios = db_formularios_provider.get_db_connector
get_db_referencias = db_referencias_provider.get_db_connector
