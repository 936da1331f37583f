from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

_logger = logging.getLogger("survey.observer.jsonfile")


class JsonFileObserver:
    """Escribe eventos como JSONL con rotación diaria."""

    def __init__(self, log_dir: str = "logs"):
        self._log_dir = Path(log_dir)

    def _get_filepath(self) -> Path:
        date_str = datetime.now(timezone.utc).strftime("%Y-%m-%d")
        return self._log_dir / f"survey-events-{date_str}.jsonl"

    def __call__(self, event_type: str, payload: dict) -> None:
        try:
            self._log_dir.mkdir(parents=True, exist_ok=True)
            line = json.dumps(
                {
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                    "event_type": event_type,
                    "payload": payload,
                },
                ensure_ascii=False,
                default=str,
            )
            with open(self._get_filepath(), "a", encoding="utf-8") as f:
                f.write(line + "\n")
        except Exception as e:
            _logger.warning("Failed to write survey event: %s", e)
