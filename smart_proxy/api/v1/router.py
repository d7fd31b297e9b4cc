from fastapi import APIRouter

from smart_proxy.api.v1.chat import router as chat_router
from smart_proxy.api.v1.models import describe
from smart_proxy.api.v1.models import router as models_router

api_v1_router = APIRouter(prefix="/v1")
api_v1_router.include_router(chat_router)
api_v1_router.include_router(models_router)
api_v1_router.add_api_route("", describe, methods=["GET"], tags=["models"], operation_id="describeProxy")
