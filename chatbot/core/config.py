# centralized configuration loader
# runs load_dotenv() to read .env
# decouples code from environment so we can swap model/store/limits without code change

import os
from dotenv import load_dotenv

load_dotenv()


def _bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes", "y"}


# Provider
PROVIDER = os.getenv("PROVIDER", "gemini")
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash-lite")
GEMINI_API_BASE = os.getenv("GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta")
AI_TIMEOUT_SECONDS = float(os.getenv("AI_TIMEOUT_SECONDS", "30"))

# Generation caps
TEMPERATURE = float(os.getenv("TEMPERATURE", "0.7"))
MAX_OUTPUT_TOKENS = int(os.getenv("MAX_OUTPUT_TOKENS", "1024"))
FALLBACK_REPLY = os.getenv("FALLBACK_REPLY", "No reply.")
IMAGE_ONLY_PROMPT = os.getenv("IMAGE_ONLY_PROMPT", "Describe this image.")

# Firebase (Firestore records + Cloud Storage images)
STORE_BACKEND = os.getenv("STORE_BACKEND", "firestore").lower()  # firestore | memory
FIREBASE_PROJECT_ID = os.getenv("FIREBASE_PROJECT_ID", "")
FIREBASE_CLIENT_EMAIL = os.getenv("FIREBASE_CLIENT_EMAIL", "")
# keys pasted into .env / dashboards keep literal "\n"
FIREBASE_PRIVATE_KEY = os.getenv("FIREBASE_PRIVATE_KEY", "").replace("\\n", "\n")
FIREBASE_STORAGE_BUCKET = os.getenv("FIREBASE_STORAGE_BUCKET", "")
FIRESTORE_COLLECTION = os.getenv("FIRESTORE_COLLECTION", "messages")
UPLOAD_PREFIX = os.getenv("UPLOAD_PREFIX", "chat-images")
STORE_TIMEOUT_SECONDS = float(os.getenv("STORE_TIMEOUT_SECONDS", "15"))
STORAGE_TIMEOUT_SECONDS = float(os.getenv("STORAGE_TIMEOUT_SECONDS", "30"))

# Validation
MESSAGE_POLICY = os.getenv("MESSAGE_POLICY", "message_or_image").lower()  # message_or_image | message_required
MAX_MESSAGE_LENGTH = int(os.getenv("MAX_MESSAGE_LENGTH", "500"))  # 0 = unlimited
MAX_IMAGE_BYTES = int(os.getenv("MAX_IMAGE_BYTES", str(20 * 1024 * 1024)))  # 0 = unlimited

# Rate limiting (in-process, per client address)
RATE_LIMIT_ENABLED = _bool("RATE_LIMIT_ENABLED", "true")
RATE_LIMIT_MAX_REQUESTS = int(os.getenv("RATE_LIMIT_MAX_REQUESTS", "10"))
RATE_LIMIT_WINDOW_SECONDS = float(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60"))
TRUST_PROXY_HEADERS = _bool("TRUST_PROXY_HEADERS", "false")

# Error monitoring; needs both the toggle and a DSN
ERROR_MONITORING_ENABLED = _bool("ERROR_MONITORING_ENABLED", "false")
SENTRY_DSN = os.getenv("SENTRY_DSN", "")

# Local listener
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
