import re
from collections.abc import Iterable
from typing import Any, Optional

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_int(value: Any) -> Optional[int]:
    """
    Convierte un valor numérico "de configuración" a int sin lanzar errores.

    Acepta ints, floats (se truncan) y strings que empiezan con un entero
    ("21", " 7 días"). Cualquier otra cosa devuelve None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return None
        return int(value)
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        return int(match.group(1)) if match else None
    return None


def normalize_survey_ids(candidates: Any) -> list[str]:
    """
    Normaliza la lista de candidatos a ids string, sin vacíos y en orden:

        "1, 2,3"   -> ["1", "2", "3"]
        [1, "2"]   -> ["1", "2"]
        27152      -> ["27152"]
        None / ""  -> []
    """
    if not candidates:
        return []

    if isinstance(candidates, str):
        items: Iterable[Any] = candidates.split(",")
    elif isinstance(candidates, Iterable) and not isinstance(candidates, (bytes, dict)):
        items = candidates
    else:
        items = [candidates]

    return [sid for sid in (str(item).strip() for item in items) if sid]
