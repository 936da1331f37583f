"""
Main - Punto de entrada de línea de comandos del motor de encuestas.

Hace de "controller externo" para corridas manuales:

    python -m src.main choose "2467,27152"
    python -m src.main choose 2467 --registry ruta/registry.yaml --user-sampling
    python -m src.main quarantine 2467 --days 21
"""

import argparse
import json
import logging
import sys

from .engine import SurveyRegistry, create_engine
from .observers import build_observer


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Motor de selección de encuestas (sampling + cuarentena + prioridad)"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    choose = subparsers.add_parser("choose", help="Elegir una encuesta entre candidatos")
    choose.add_argument("candidates", type=str, help='Ids separados por coma, ej: "2467,27152"')
    choose.add_argument("--registry", type=str, default=None)
    choose.add_argument("--user-sampling", action="store_true")

    quarantine = subparsers.add_parser("quarantine", help="Poner una encuesta en cuarentena")
    quarantine.add_argument("survey_id", type=str)
    quarantine.add_argument("--days", type=int, default=0)

    return parser.parse_args(argv)


def run_choose(args) -> int:
    overrides = {"on_event": build_observer()}
    if args.user_sampling:
        overrides["user_sampling"] = True

    engine = create_engine(**overrides)
    registry = SurveyRegistry(args.registry)
    engine.set_survey_configurations(registry.as_configurations())

    chosen = engine.choose_survey(args.candidates)
    if chosen is None:
        print("Ninguna encuesta elegida.")
        return 0

    print(json.dumps(chosen.model_dump(), ensure_ascii=False, indent=2))
    return 0


def run_quarantine(args) -> int:
    from .config import QUARANTINE_BACKEND

    engine = create_engine(on_event=build_observer())
    engine.quarantine_survey(args.survey_id, args.days)
    storage = "durable" if args.days > 0 else "session"

    # Ni la sesión ni el backend en memoria sobreviven a este proceso
    if storage == "session" or QUARANTINE_BACKEND.lower().strip() == "memory":
        logging.getLogger("survey.cli").warning(
            "La cuarentena de %s no persiste: termina junto con este proceso "
            "(usar --days > 0 y QUARANTINE_BACKEND=sqlite o redis)",
            args.survey_id,
        )
    print(f"Encuesta {args.survey_id} en cuarentena ({storage}).")
    return 0


def main(argv=None) -> int:
    from .config import LOG_LEVEL

    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    args = parse_args(argv)

    try:
        if args.command == "choose":
            return run_choose(args)
        return run_quarantine(args)
    except (FileNotFoundError, ValueError) as exc:
        print(f"\n❌ Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
