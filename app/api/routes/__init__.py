from __future__ import annotations

from app.api.routes.greeting import router as greeting_router
from app.api.routes.greeting_v2 import router as greeting_v2_router
from app.api.routes.health import router as health_router

__all__ = ["greeting_router", "greeting_v2_router", "health_router"]
