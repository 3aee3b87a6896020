"""Settlement domain API package."""

from settlement.api.routes import order_router, package_router, settlement_router, wallet_router

__all__ = ["order_router", "package_router", "settlement_router", "wallet_router"]
