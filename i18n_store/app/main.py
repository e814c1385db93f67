import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from i18n_store.app.api.v1.api import api_router
from i18n_store.app.core.config import settings

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="i18n store")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT"],
    allow_headers=["Content-Type", "Accept", "Accept-Language"],
)

app.include_router(api_router)
