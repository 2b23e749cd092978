import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parents[1]

# Storage mode: local / gcp / azure
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "local")

LOCAL_BLOB_DIR = Path(os.getenv("LOCAL_BLOB_DIR", str(BASE_DIR / "data" / "blobs")))
# Prefix for URLs of locally stored blobs; empty means site-relative (/blobs/...)
PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "").rstrip("/")

GCS_BUCKET = os.getenv("GCS_BUCKET")
GCS_PREDEFINED_ACL = os.getenv("GCS_PREDEFINED_ACL")  # e.g. "publicRead"

AZURE_CONN_STR = os.getenv("AZURE_STORAGE_CONNECTION_STRING")
AZURE_CONTAINER = os.getenv("AZURE_CONTAINER")

# AI gateway (OpenAI-compatible chat completions)
AI_GATEWAY_URL = os.getenv("AI_GATEWAY_URL", "https://ai-gateway.vercel.sh/v1/chat/completions")
IMAGE_MODEL = os.getenv("IMAGE_MODEL", "google/gemini-2.5-flash-image-preview")
GATEWAY_TIMEOUT = float(os.getenv("GATEWAY_TIMEOUT", "60"))
GENERATION_TEMPERATURE = 0.7

MAX_UPLOAD_BYTES = 30 * 1024 * 1024
ALLOWED_CONTENT_TYPES = ("image/jpeg", "image/png")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Ensure dirs exist (for local mode)
LOCAL_BLOB_DIR.mkdir(parents=True, exist_ok=True)


def gateway_api_key() -> str | None:
    """Read the gateway key at call time so a missing key is reported per request."""
    return os.getenv("AI_GATEWAY_API_KEY") or None
