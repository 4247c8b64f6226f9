from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ai_agent.config import settings
from ai_agent.logging_config import setup_logging
from ai_agent.routers import generate

setup_logging()

app = FastAPI(title="AI Agent", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(generate.router)


@app.get("/health")
async def health():
    return {"status": "ok", "env": settings.app_env}
