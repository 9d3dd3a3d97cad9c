import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import doctors_router, unbilled_router
from config import settings
from schemas import HealthResponse

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger("unbilled-panel")

app = FastAPI(title="Unbilled Panel API")

if settings.allowed_origins == ["*"]:
    allow_origins = ["*"]
else:
    allow_origins = settings.allowed_origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(doctors_router)
app.include_router(unbilled_router)


@app.on_event("startup")
async def _on_startup() -> None:
    if allow_origins == ["*"]:
        logger.warning(
            "CORS is set to allow all origins with credentials; set ALLOWED_ORIGINS to explicit values for local dev."
        )
    if not settings.audit_enabled:
        logger.info("Audit log disabled; set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY to enable it.")


@app.middleware("http")
async def log_preflight(request, call_next):
    if request.method == "OPTIONS":
        origin = request.headers.get("origin", "")
        logger.info("CORS preflight %s %s origin=%s", request.method, request.url.path, origin)
    response = await call_next(request)
    return response


@app.get("/api/diag/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(
        status="ok",
        billing_api_url=settings.billing_api_url,
        audit_enabled=settings.audit_enabled,
    )
