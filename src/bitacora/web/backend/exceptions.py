class ValidacionError(ValueError):
    """Cambio rechazado por una regla de negocio (par OP/SCI, área/máquina, intervalo, categoría, cantidad)."""


class FormularioNoEncontradoError(LookupError):
    """Se intentó modificar un formulario cuyo id/cc no existe."""

    def __init__(self, clave: str):
        self.clave = clave
        super().__init__(f"Formulario {clave} no encontrado.")
