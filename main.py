import sys
import os

# Ensure the project root is on sys.path so the route packages can import
# top-level modules (config, store, models, etc.)
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

import config
from cache import clear_all_cache
from contentDiscovery.routes import router as discovery_router
from contentStudio.helper import api_error, api_response
from contentStudio.routes import router as studio_router
from personaHub.routes import router as persona_router

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="ContentTwin API")

origins = [
    "http://localhost:3000",
    "http://localhost:3001",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:3001",
    "http://127.0.0.1:8000",
    "http://localhost:8000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount routers
app.include_router(studio_router)
app.include_router(discovery_router)
app.include_router(persona_router)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.warning("[%s] Invalid request body: %s", request.url.path, exc.errors())
    return api_error("Invalid request body", 400)


@app.get("/")
async def welcome():
    return {"message": "Welcome to the ContentTwin API!"}


@app.delete("/clear-cache")
async def clear_cache():
    try:
        deleted = clear_all_cache()
    except Exception:
        logger.exception("[clear-cache] Failed")
        return api_error("Failed to clear cache", 500)
    return api_response({"deleted": deleted, "message": f"Cleared {deleted} cached entries"})


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.environ.get("PORT", 8000)))
