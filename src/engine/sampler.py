from __future__ import annotations

import random
from typing import Callable


def _uniform_draw() -> int:
    return random.randrange(100)


class SamplingPolicy:
    """Decide si una encuesta entra al pool de selección según su porcentaje.

    Un único sorteo uniforme en [0, 99] por evaluación. La comparación es
    inclusiva: percentage=100 siempre entra y percentage=0 solo entra si
    el sorteo da exactamente 0.
    """

    def __init__(self, draw: Callable[[], int] = _uniform_draw):
        self._draw = draw

    def draw(self) -> int:
        return self._draw()

    def is_sampled_in(self, percentage: int) -> bool:
        return self.draw() <= percentage
