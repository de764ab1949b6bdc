from fastapi import APIRouter
from order_api.api.routes import menu, orders

api_router = APIRouter()
api_router.include_router(menu.router, tags=["menu"])
api_router.include_router(orders.router, tags=["order"])
