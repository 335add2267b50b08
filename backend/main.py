from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from export_urls.api import admin, auth
from export_urls.core.config import settings
from export_urls.core.logging import setup_logging, CorrelationIdMiddleware


setup_logging()

app = FastAPI(
    title="Export All URLs",
    description="Export des pages, articles, types personnalisés et médias au format CSV",
    version="1.3.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(CorrelationIdMiddleware)

# Include routers
app.include_router(auth.router, prefix="/auth", tags=["auth"])
app.include_router(admin.router, prefix="/admin", tags=["admin"])


@app.get("/health")
def health():
    return {"status": "ok"}
