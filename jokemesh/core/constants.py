"""Service names, routes and defaults shared across the mesh.

Defaults mirror the in-cluster deployment: peers are addressed by their
Kubernetes service DNS name and telemetry goes to the SigNoz collector.
Every value can be overridden through the environment (see core.config).
"""

# =============================================================================
# Service Names
# =============================================================================

GATEWAY_SERVICE = "api-gateway"
JOKES_SERVICE = "jokes-service"
ANALYTICS_SERVICE = "analytics-service"
USER_SERVICE = "user-service"

SERVICE_VERSION = "1.0.0"
DEFAULT_ENVIRONMENT = "production"


# =============================================================================
# Network Defaults
# =============================================================================

DEFAULT_HOST = "0.0.0.0"
DEFAULT_GATEWAY_PORT = 8080
DEFAULT_JOKES_PORT = 8081
DEFAULT_ANALYTICS_PORT = 8082
DEFAULT_USER_PORT = 8083

DEFAULT_OTLP_ENDPOINT = "signoz-otel-collector.platform.svc.cluster.local:4317"
DEFAULT_JOKES_ADDRESS = "jokes-service.default.svc.cluster.local"
DEFAULT_USER_ADDRESS = "user-service.default.svc.cluster.local"
DEFAULT_ANALYTICS_ADDRESS = "analytics-service.default.svc.cluster.local"


# =============================================================================
# Routes
# =============================================================================

HEALTH_PATH = "/healthz"
JOKE_PATH = "/api/v1/joke"
FAVORITE_PATH = "/api/v1/favorite"
FAVORITES_PATH = "/api/v1/favorites"
STATS_PATH = "/api/v1/stats"
TRACK_PATH = "/internal/track"


# =============================================================================
# Timeouts (seconds)
# =============================================================================

PROXY_TIMEOUT_SECONDS = 10.0
NOTIFY_TIMEOUT_SECONDS = 2.0

# Upper bound (exclusive) of the simulated joke lookup delay, in milliseconds
MAX_SIMULATED_LATENCY_MS = 50

JOKE_LENGTH_HEADER = "X-Joke-Length"
