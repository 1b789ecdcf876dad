from typing import Sequence

import certifi
from beanie import Document, init_beanie
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from docpage.core.config import get_settings


def _use_tls(uri: str) -> bool:
    """True if URI uses TLS (Atlas or explicit tls=true). Avoids TLS for plain mongodb:// in CI."""
    return "mongodb+srv://" in uri or "tls=true" in uri.lower()


def get_client(**overrides) -> AsyncIOMotorClient:
    settings = get_settings()
    # Atlas in Docker: tlsCAFile + tlsDisableOCSPEndpointCheck avoid TLSV1_ALERT_INTERNAL_ERROR
    kwargs = {}
    if _use_tls(settings.mongodb_uri):
        kwargs["tlsCAFile"] = certifi.where()
        kwargs["tlsDisableOCSPEndpointCheck"] = True
    kwargs.update(overrides)
    return AsyncIOMotorClient(settings.mongodb_uri, **kwargs)


async def init_db(document_models: Sequence[type[Document]], client: AsyncIOMotorClient | None = None) -> AsyncIOMotorDatabase:
    settings = get_settings()
    client = client or get_client()
    database = client[settings.mongodb_db_name]
    await init_beanie(database=database, document_models=list(document_models))
    return database
