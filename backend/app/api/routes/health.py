"""Health check routes"""

from fastapi import APIRouter

from config import config

router = APIRouter()


@router.get("/health")
async def health_check():
    """Health check endpoint for monitoring"""
    return {
        "status": "healthy",
        "service": "KB eHoldings facade",
        "version": "1.0.0",
        "environment": config.ENVIRONMENT,
    }
