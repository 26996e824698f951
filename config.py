import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./invoicing.db")
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    API_RELOAD = bool(data.get("API_RELOAD", False))
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")

    # Document numbering
    INVOICE_NUMBER_PREFIX = data.get("INVOICE_NUMBER_PREFIX", "INV-")
    CREDIT_NOTE_NUMBER_PREFIX = data.get("CREDIT_NOTE_NUMBER_PREFIX", "CN-")
    DOCUMENT_NUMBER_PADDING = data.get("DOCUMENT_NUMBER_PADDING", 6)
    NUMBER_COLLISION_MAX_RETRIES = data.get("NUMBER_COLLISION_MAX_RETRIES", 2)

    # Malta standard VAT rate, in percent
    DEFAULT_VAT_RATE = data.get("DEFAULT_VAT_RATE", 18)

    # Integrity audit
    INTEGRITY_ALERT_WEBHOOK = data.get("INTEGRITY_ALERT_WEBHOOK", None)
    INTEGRITY_AUDIT_ENABLED = bool(data.get("INTEGRITY_AUDIT_ENABLED", True))
    INTEGRITY_AUDIT_INTERVAL_SECONDS = data.get("INTEGRITY_AUDIT_INTERVAL_SECONDS", 86400)  # Daily
