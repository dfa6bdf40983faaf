from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import Response

from contract_events.core.config import settings
from contract_events.routers import contract_events, event_status_config

OPENAPI_TAGS = [
    {
        "name": "Contract Events",
        "description": "Generate, query, reschedule and progress contract events.",
    },
    {
        "name": "Event Status Config",
        "description": "Per-event-type status vocabularies and transition edges.",
    },
]

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.version,
    description=(
        "Schedules the service visits, spare-part deliveries and billing "
        "milestones of a service contract and tracks each one through its "
        "status lifecycle."
    ),
    openapi_tags=OPENAPI_TAGS,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Total-Count"],
)


@app.middleware("http")
async def options_handler(request: Request, call_next):  # type: ignore[no-untyped-def]
    if request.method == "OPTIONS":
        origin = request.headers.get("origin", "*")
        return Response(
            status_code=200,
            headers={
                "Access-Control-Allow-Origin": origin,
                "Access-Control-Allow-Methods": "*",
                "Access-Control-Allow-Headers": "*",
                "Access-Control-Allow-Credentials": "true",
                "Access-Control-Max-Age": "86400",
            },
        )
    return await call_next(request)


app.include_router(
    contract_events.router,
    prefix="/v1/contract_events",
    tags=["Contract Events"],
)
app.include_router(
    event_status_config.router,
    prefix="/v1/event_status_config",
    tags=["Event Status Config"],
)


@app.get("/")
async def root() -> dict[str, str]:
    return {
        "app": settings.APP_NAME,
        "version": settings.version,
        "domain": settings.APP_DOMAIN,
        "status": "running",
    }
