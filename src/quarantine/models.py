from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

MS_PER_DAY = 24 * 60 * 60 * 1000


class QuarantineRecord(BaseModel):
    """Registro persistido en `<prefix><survey_id>`.

    Sin `expiry` es una cuarentena de sesión; con `expiry` (epoch ms) es durable.
    """

    value: str = "true"
    expiry: Optional[int] = None

    @classmethod
    def for_days(cls, days: int, now_ms: int) -> QuarantineRecord:
        if days > 0:
            return cls(expiry=now_ms + days * MS_PER_DAY)
        return cls()

    @property
    def is_durable(self) -> bool:
        return self.expiry is not None

    def is_expired(self, now_ms: int) -> bool:
        return self.expiry is not None and now_ms > self.expiry

    def to_json(self) -> str:
        return self.model_dump_json(exclude_none=True)
