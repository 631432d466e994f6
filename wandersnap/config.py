import os

from dotenv import load_dotenv

load_dotenv()

API_PREFIX = "/api/v1"

GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY", "").strip()
PROJECT_ID = os.getenv("GCP_PROJECT_ID")
GCP_LOCATION = os.getenv("GCP_GLOBAL_LOCATION") or os.getenv("GCP_LOCATION") or "global"

MODEL_NAME = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
IMAGE_MODEL = os.getenv("IMAGE_MODEL", "gemini-2.0-flash-exp")
GENAI_TIMEOUT = float(os.getenv("GENAI_TIMEOUT_SECONDS", "60"))

OLLAMA_URL = os.getenv("OLLAMA_URL", "http://localhost:11434").rstrip("/")
OLLAMA_MODEL = os.getenv("OLLAMA_MODEL", "mistral")
OLLAMA_TIMEOUT = float(os.getenv("OLLAMA_TIMEOUT_SECONDS", "60"))

HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT_SECONDS", "10"))

SESSION_TIMEOUT_MINUTES = int(os.getenv("SESSION_TIMEOUT_MINUTES", "20"))

CORS_ALLOW_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ALLOW_ORIGINS", "http://localhost:9002").split(",")
    if origin.strip()
]
