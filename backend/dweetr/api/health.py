# dweetr/api/health.py

from fastapi import APIRouter, Depends

from dweetr.api.dweets import get_service
from dweetr.services.dweet_service import DweetService

router = APIRouter()


@router.get("/health")
def health_check(service: DweetService = Depends(get_service)):
    return {"status": "ok", "total_dweets": service.count_all()}
