"""Service layer — the per-request dispatch pipeline and the result contract.

Services may import from domain, config and drivers.
They must never import from commands, output, or web.
"""
