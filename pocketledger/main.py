from fastapi import FastAPI
# config loads .env on import, before setup_logging reads LOG_*
from .config import settings  # noqa: F401
from .logging import setup_logging
from .api.routes import router as api_router

setup_logging()
app = FastAPI(title="pocketledger")
app.include_router(api_router)
