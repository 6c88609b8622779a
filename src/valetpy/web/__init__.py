"""Serving harness: ASGI application and front-controller executor."""

from valetpy.web.app import create_app

__all__ = ["create_app"]
