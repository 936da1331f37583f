import os

from dotenv import load_dotenv

load_dotenv()

# Motor de selección
SURVEY_USER_SAMPLING = os.getenv("SURVEY_USER_SAMPLING", "false").lower() == "true"
QUARANTINE_KEY_PREFIX = os.getenv("QUARANTINE_KEY_PREFIX", "neb_")

# Backend de cuarentena durable ("sqlite", "redis" o "memory")
QUARANTINE_BACKEND = os.getenv("QUARANTINE_BACKEND", "sqlite")
QUARANTINE_DB_PATH = os.getenv("QUARANTINE_DB_PATH", "data/quarantine.db")

# Redis Configuration
REDIS_HOST = os.getenv("REDIS_HOST", "localhost")
REDIS_PORT = int(os.getenv("REDIS_PORT", "6379"))
REDIS_PASSWORD = os.getenv("REDIS_PASSWORD") or None
REDIS_DB = int(os.getenv("REDIS_DB", "0"))

# Registry de encuestas (YAML)
SURVEY_REGISTRY_PATH = os.getenv(
    "SURVEY_REGISTRY_PATH",
    os.path.join(os.path.dirname(__file__), "surveys", "registry.yaml"),
)

# Eventos ("logging", "jsonfile", "both" o "none")
SURVEY_EVENT_EXPORTER = os.getenv("SURVEY_EVENT_EXPORTER", "logging")
SURVEY_EVENT_LOG_DIR = os.getenv("SURVEY_EVENT_LOG_DIR", "logs")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Validaciones
if QUARANTINE_BACKEND.lower().strip() not in ("memory", "sqlite", "redis"):
    raise ValueError(
        f"QUARANTINE_BACKEND='{QUARANTINE_BACKEND}' no soportado. "
        "Valores válidos: memory, sqlite, redis"
    )
