"""Order Settlement FastAPI application.

Web server that turns order status changes into carrier packages and wallet
settlements, processing commands synchronously via HTTP.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from settlement.domain import settlement
from settlement.utils.logging import clear_context, configure_logging

# ---------------------------------------------------------------------------
# Logging and domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
configure_logging()
settlement.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Order Settlement API",
    description="Package dispatch to shipping companies and profit settlement into wallets",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the settlement domain context for each request."""
    clear_context()
    with settlement.domain_context():
        response = await call_next(request)
    return response


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from settlement.api import order_router, package_router, settlement_router, wallet_router  # noqa: E402

app.include_router(order_router)
app.include_router(settlement_router)
app.include_router(package_router)
app.include_router(wallet_router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domains": {
                "settlement": {"name": settlement.name},
            },
        }
    )
