"""API routers."""
from alumni_tracer.routers import health, surveys

__all__ = [
    "health",
    "surveys",
]
