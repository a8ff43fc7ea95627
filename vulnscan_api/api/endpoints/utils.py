# vulnscan_api/api/endpoints/utils.py
from fastapi import APIRouter

router = APIRouter()


@router.get("/health", summary="Health check", tags=["Health Check"])
def health_check():
    """Check that the API is up."""
    return {"status": "ok"}
