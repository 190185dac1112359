from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from dropship.health.service import health_info, health_supabase_info
from dropship.utils.rate_limit import rate_limit_health_info

router = APIRouter(tags=["Health"])

@router.get("/api/health")
def health_root():
    return health_info()

@router.get("/health/supabase")
def health_supabase():
    return JSONResponse(health_supabase_info())

@router.get("/health/rate-limit")
def health_rate_limit(request: Request):
    return rate_limit_health_info(request)
