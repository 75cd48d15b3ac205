"""
API endpoints package.

Contains FastAPI routers for all service endpoints:
- /api/health - Database health check
- /api/logs - Log message insertion
"""
from .health import router as health_router
from .logs import router as logs_router

__all__ = ["health_router", "logs_router"]
