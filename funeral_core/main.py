import logging
from urllib.parse import urlparse

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from funeral_core.api.exception_handlers import register_exception_handlers
from funeral_core.api.v1.router import api_router
from funeral_core.core.config import settings

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="funeral-core")

if settings.frontend_url:
    parsed = urlparse(settings.frontend_url)
    origin = f"{parsed.scheme}://{parsed.netloc}"
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[origin],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

register_exception_handlers(app)
app.include_router(api_router, prefix="/api/v1")


@app.get("/health")
def health():
    return {"status": "ok"}
