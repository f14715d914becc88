"""API endpoints package for the analysis gateway."""

from resumegate.app.api.analysis import router as analysis_router

__all__ = [
    "analysis_router",
]
