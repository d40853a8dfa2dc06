"""API route handlers for the joke-mesh services.

Routes:
- health: /healthz (every service)
- gateway: /api/v1/joke, /api/v1/favorite, /api/v1/stats (proxied)
- jokes: /api/v1/joke
- analytics: /internal/track, /api/v1/stats
- user: /api/v1/favorite, /api/v1/favorites
"""

__all__: list[str] = []
