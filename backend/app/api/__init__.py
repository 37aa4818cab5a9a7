from app.api.routes import router, ws_router

__all__ = ["router", "ws_router"]
