# app/main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.core.db import Database, init_db, close_db
from app.core.errors import register_exception_handlers

from app.api.routers import auth, todos, health

logger = logging.getLogger("uvicorn.error")
logger.setLevel(settings.log_level.upper())

app = FastAPI(title=settings.APP_NAME)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

@app.on_event("startup")
async def on_startup():
    await init_db(generate_schemas=settings.db_generate_schemas)
    # Storage handle shared by all requests; routes get it via Depends(get_db)
    app.state.db = Database.from_settings()
    logger.info("[startup] %s (env=%s) pool max=%d", settings.APP_NAME, settings.env, settings.db_pool_max)

@app.on_event("shutdown")
async def on_shutdown():
    await close_db()

# REST
app.include_router(auth.router, prefix="/api")
app.include_router(todos.router, prefix="/api")
app.include_router(health.router)
