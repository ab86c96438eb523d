"""API v1 router composition."""

from fastapi import APIRouter

from bistro.api.v1.endpoints import orders, reservations

api_router: APIRouter = APIRouter()
api_router.include_router(orders.router, prefix="/orders", tags=["orders"])
api_router.include_router(reservations.router, prefix="/reservations", tags=["reservations"])
