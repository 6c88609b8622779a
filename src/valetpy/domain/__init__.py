"""Domain layer — request values, hostname parsing, site lookup.

This layer depends only on stdlib, pydantic and the config models.
It must never import from services, drivers, web, or commands.
"""
