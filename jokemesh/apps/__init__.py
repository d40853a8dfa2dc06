"""FastAPI application factories, one per service.

Each module exposes ``create_app(settings=None, *, telemetry=None, ...)``.
Apps are built on demand rather than at import time so importing a service
never opens exporter connections.
"""

from jokemesh.apps import analytics, gateway, jokes, user

__all__ = ["analytics", "gateway", "jokes", "user"]
