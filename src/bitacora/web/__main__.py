"""
Punto de entrada para `python -m bitacora.web`
"""

from bitacora.common.config_loader import ConfigLoader

from .run_web import main  # noqa: I001

SERVICE_NAME = "web"
ConfigLoader.initialize_service(SERVICE_NAME)
main(SERVICE_NAME)
