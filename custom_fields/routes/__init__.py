"""
API Versioning

All custom field routers are mounted under a single versioned prefix.
"""

from fastapi import APIRouter

from custom_fields.routes import schemas, values

# API Version prefix
API_V1_PREFIX = "/api/v1"

api_v1_router = APIRouter(prefix=API_V1_PREFIX)
api_v1_router.include_router(schemas.router)
api_v1_router.include_router(values.router)
