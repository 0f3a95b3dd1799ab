import logging
import threading
from contextlib import contextmanager
from typing import Any, Optional

import psycopg2
from psycopg2 import pool
from psycopg2.extras import RealDictCursor

from .config_manager import ConfigManager

logger = logging.getLogger(__name__)


class DatabaseConnector:
    """
    Conector a una base Postgres con un pool de conexiones thread-safe.

    Cada `obtener_cursor()` toma una conexión del pool, confirma al salir sin
    errores y hace rollback ante cualquier excepción antes de re-lanzarla.
    """

    def __init__(
        self,
        host: str,
        base_datos: str,
        usuario: str,
        contrasena: str,
        puerto: int = 5432,
        db_config_prefix: str = "PG_FORMULARIOS",
    ):
        self.db_config_prefix = db_config_prefix
        pg_config = ConfigManager.get_postgres_config(db_config_prefix)
        self.pool_min = pg_config["pool_min"]
        self.pool_max = pg_config["pool_max"]

        self._conn_kwargs = {
            "host": host,
            "port": puerto,
            "dbname": base_datos,
            "user": usuario,
            "password": contrasena,
            "connect_timeout": pg_config["timeout"],
        }
        self._pool: Optional[pool.ThreadedConnectionPool] = None
        self._pool_lock = threading.Lock()

    @classmethod
    def desde_config(cls, db_config_prefix: str) -> "DatabaseConnector":
        cfg = ConfigManager.get_postgres_config(db_config_prefix)
        return cls(
            host=cfg["host"],
            base_datos=cfg["base_datos"],
            usuario=cfg["usuario"],
            contrasena=cfg["contrasena"],
            puerto=cfg["port"],
            db_config_prefix=db_config_prefix,
        )

    def descripcion(self) -> str:
        """Parámetros de conexión sin la contraseña, para los logs."""
        k = self._conn_kwargs
        return f"{self.db_config_prefix} ({k['user']}@{k['host']}:{k['port']}/{k['dbname']})"

    def _get_pool(self) -> pool.ThreadedConnectionPool:
        with self._pool_lock:
            if self._pool is None:
                logger.info(f"Creando pool de conexiones para {self.descripcion()} (max={self.pool_max})")
                try:
                    self._pool = pool.ThreadedConnectionPool(self.pool_min, self.pool_max, **self._conn_kwargs)
                except psycopg2.Error as ex:
                    logger.critical(f"No se pudo conectar a la base de datos {self.db_config_prefix}. Error: {ex}")
                    raise
            return self._pool

    def _obtener_conexion_del_pool(self):
        pool_con = self._get_pool()
        conn = pool_con.getconn()
        try:
            with conn.cursor() as cursor:
                cursor.execute("SELECT 1")
            return conn
        except psycopg2.Error as e:
            logger.warning(
                f"Se detectó una conexión obsoleta a la BD ({self.db_config_prefix}). Se descarta y se crea una nueva. Error: {e}"
            )
            pool_con.putconn(conn, close=True)
            return pool_con.getconn()

    def _devolver_conexion_al_pool(self, conn, descartar: bool = False):
        if self._pool is None:
            return
        try:
            self._pool.putconn(conn, close=descartar or bool(conn.closed))
        except pool.PoolError as e:
            logger.error(f"No se pudo devolver la conexión al pool {self.db_config_prefix}: {e}")

    @contextmanager
    def obtener_cursor(self):
        conn = self._obtener_conexion_del_pool()
        cursor = None
        descartar = False
        try:
            cursor = conn.cursor(cursor_factory=RealDictCursor)
            yield cursor
            conn.commit()
        except Exception as ex:
            if isinstance(ex, psycopg2.Error):
                logger.error(f"Error de base de datos (SQLSTATE: {ex.pgcode}): {ex}")
                descartar = isinstance(ex, (psycopg2.OperationalError, psycopg2.InterfaceError))
            try:
                conn.rollback()
            except psycopg2.Error as rb_ex:
                logger.error(f"Error durante el rollback: {rb_ex}")
                descartar = True
            raise
        finally:
            if cursor is not None:
                cursor.close()
            self._devolver_conexion_al_pool(conn, descartar=descartar)

    def ejecutar_consulta(self, query: str, params: tuple = None, es_select: bool = True) -> Any:
        """
        Ejecuta una sentencia una sola vez, en su propia transacción.

        Con `es_select=True` devuelve una lista de dicts (también para UPDATE ... RETURNING).
        Con `es_select=False` devuelve el rowcount.
        Los errores se registran y se re-lanzan sin reintentar.
        """
        try:
            with self.obtener_cursor() as cursor:
                cursor.execute(query, params or ())
                if es_select:
                    return [dict(row) for row in cursor.fetchall()]
                return cursor.rowcount
        except psycopg2.Error as e:
            logger.error(f"Falló la consulta en {self.db_config_prefix} (SQLSTATE: {e.pgcode}): {e}")
            raise

    def verificar_conexion(self) -> bool:
        """Sonda `SELECT 1` usada al arrancar el servicio."""
        try:
            filas = self.ejecutar_consulta("SELECT 1 AS ok")
            return bool(filas) and filas[0].get("ok") == 1
        except psycopg2.Error as e:
            logger.error(f"La sonda de conexión a {self.descripcion()} falló: {e}")
            return False

    def cerrar_conexiones_pool(self):
        with self._pool_lock:
            if self._pool is not None and not self._pool.closed:
                self._pool.closeall()
            self._pool = None
        logger.info(f"Todas las conexiones en el pool para {self.db_config_prefix} han sido cerradas.")
