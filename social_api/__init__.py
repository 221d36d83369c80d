"""Entry points for the social backend FastAPI app."""
from social_api.app import create_app

__all__ = ["create_app"]
