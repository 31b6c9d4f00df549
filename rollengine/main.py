import asyncio
import random
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from sqlmodel.ext.asyncio.session import AsyncSession

from rollengine.core.config import settings
from rollengine.core.db import create_tables, engine
from rollengine.engine.roll_engine import RollEngine
from rollengine.engine.selector import CatalogExhaustedError
from rollengine.services.catalog import InMemoryCardCatalog, load_catalog_file
from rollengine.services.persistence import ProfileRepository, ProfileWriter
from rollengine.services.profile_store import InMemoryProfileStore
from rollengine.utils.exception_handlers import (
    catalog_exhausted_handler,
    general_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from rollengine.utils.router_discovery import register_routers


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None]:
    await create_tables()

    async with AsyncSession(engine, expire_on_commit=False) as session:
        repository = ProfileRepository(session)
        cards = await repository.load_catalog()
        if not cards and settings.catalog_path:
            await repository.seed_catalog(load_catalog_file(settings.catalog_path))
            cards = await repository.load_catalog()
        profiles = await repository.load_profiles()

    writer = ProfileWriter(engine, asyncio.get_running_loop())
    store = InMemoryProfileStore(profiles, sink=writer)
    catalog = InMemoryCardCatalog(cards, random.Random(settings.rng_seed))

    app.state.profile_store = store
    app.state.profile_writer = writer
    app.state.roll_engine = RollEngine.from_config(settings, store, catalog)
    logger.info(f"Loaded {len(store)} player profiles and {len(catalog)} cards")

    yield

    await writer.drain()
    await engine.dispose()


app = FastAPI(title="Roll Engine API", lifespan=app_lifespan)


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


register_routers(app)

app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(CatalogExhaustedError, catalog_exhausted_handler)
app.add_exception_handler(Exception, general_exception_handler)


@app.get("/")
async def healthz() -> str:
    return "OK"
