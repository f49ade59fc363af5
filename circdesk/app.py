#!/usr/bin/env python3

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from circdesk.routes import api
from circdesk.configs import OPTIONS, DB_URI, SWEEP_ON_STARTUP
from circdesk.core.api import CirculationAPI
from circdesk.core.db import Store
from circdesk.core.seed import seed_defaults
from circdesk import __version__ as VERSION

logger = logging.getLogger(__name__)


def create_app(store=None, circulation=None, sweep_on_startup=SWEEP_ON_STARTUP):
    """Builds the HTTP app around one Store. Tables and default policy
    rows are created at startup, followed by both sweeps."""
    store = store or (circulation.store if circulation else Store.from_uri(DB_URI))
    circulation = circulation or CirculationAPI(store)

    @asynccontextmanager
    async def lifespan(app):
        store.init_db()
        seed_defaults(store)
        if sweep_on_startup:
            for result in (circulation.sweep_overdue(), circulation.sweep_expired_reservations()):
                logger.info(f"Startup sweep: {result.message}")
        yield

    app = FastAPI(
        title="circdesk API",
        description="circdesk: lending, reservations and fines for a physical library",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.store = store
    app.state.circulation = circulation
    app.include_router(api.router, prefix="/v1/api")
    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("circdesk.app:app", **OPTIONS)
