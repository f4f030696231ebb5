#!/usr/bin/env python3

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from folio.routes import api, users
from folio.routes.handlers import register_handlers
from folio.configs import OPTIONS, LOG_LEVEL, CORS_ORIGINS
from folio.core import db
from folio import __version__ as VERSION

logging.basicConfig(
    level=LOG_LEVEL.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    db.init()
    yield


app = FastAPI(
    title="Folio API",
    description="Folio: authors, books, users and loans for a lending library",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_handlers(app)

app.include_router(users.router, prefix="/api")
app.include_router(api.router, prefix="/api")

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("folio.app:app", **OPTIONS)
