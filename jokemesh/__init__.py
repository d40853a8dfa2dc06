"""joke-mesh: four small HTTP services wired together with OpenTelemetry.

The gateway proxies to the jokes, user and analytics services; the jokes
service notifies analytics of every joke it serves. Every hop carries W3C
trace context so the whole request shows up as one trace.
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
