from dotenv import load_dotenv
import os
import json
from functools import lru_cache
from openai import AsyncOpenAI
import firebase_admin
from firebase_admin import credentials, firestore

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# LLM
LLM_PROVIDER = os.getenv("LLM_PROVIDER", "openai").lower()  # openai | anthropic
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
OPENAI_ANALYSIS_MODEL = os.getenv("OPENAI_ANALYSIS_MODEL", OPENAI_MODEL)
ANTHROPIC_MODEL = os.getenv("ANTHROPIC_MODEL", "claude-sonnet-4-20250514")
ANTHROPIC_FAST_MODEL = os.getenv("ANTHROPIC_FAST_MODEL", "claude-3-5-haiku-20241022")
LLM_TIMEOUT_SECONDS = float(os.getenv("LLM_TIMEOUT_SECONDS", "60"))

async_client = AsyncOpenAI(timeout=LLM_TIMEOUT_SECONDS)

# Cache
CACHE_ENABLED = os.getenv("CACHE_ENABLED", "true").lower() in ("1", "true", "yes")
CACHE_TTL_MINUTES = int(os.getenv("CACHE_TTL_MINUTES", "30"))

# Trend search
FIRECRAWL_API_KEY = os.getenv("FIRECRAWL_API_KEY", "")


@lru_cache(maxsize=1)
def get_anthropic_client():
    import anthropic
    return anthropic.AsyncAnthropic(timeout=LLM_TIMEOUT_SECONDS)


@lru_cache(maxsize=1)
def get_db():
    # Firebase - supports both file path (local) and JSON string (production)
    firebase_config = os.getenv("FIREBASE_API", "firebase.json")

    if firebase_config.startswith("{"):
        fireCred = credentials.Certificate(json.loads(firebase_config))
    else:
        fireCred = credentials.Certificate(firebase_config)

    if not firebase_admin._apps:
        firebase_admin.initialize_app(fireCred)
    return firestore.client()
