import asyncio

from reactpy import use_effect, use_state


def use_debounced_value(value, delay: int):
    """Devuelve `value` recién cuando dejó de cambiar durante `delay` milisegundos."""
    debounced_value, set_debounced_value = use_state(value)

    @use_effect(dependencies=[value])
    def debounce():
        async def do_debounce():
            await asyncio.sleep(delay / 1000)
            set_debounced_value(value)

        task = asyncio.create_task(do_debounce())
        return lambda: task.cancel()

    return debounced_value
