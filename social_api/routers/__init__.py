"""
FastAPI routers grouped by resource (users, posts).

Each module exposes an APIRouter included by social_api.app.create_app; the
storage client is read from app.state through routers.deps.
"""
