"""Health check endpoint."""

from fastapi import APIRouter

from calepin import __version__

router = APIRouter(prefix="/api/v1", tags=["health"])


@router.get("/health")
async def health() -> dict:
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": __version__,
    }
