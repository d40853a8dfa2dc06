"""Gateway proxy: forwards a request to a backend and relays its answer.

For each call the proxy:

1. opens a ``proxy_to_<path>`` CLIENT span under the inbound request span,
2. builds ``<base address><path>`` with the inbound method and body,
3. injects the trace context into the outbound headers,
4. sends it once (no retries) under a 10 second deadline that also covers
   reading the response body,
5. records the call latency labelled by service and backend status, and
6. hands back the backend status code and raw body.

Failures map to the error taxonomy: a request that cannot be built is a
ProxyRequestError (500), an unreachable or slow backend an
UpstreamUnavailableError (502), an unreadable body a ResponseReadError (500).
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass

import httpx
from opentelemetry.trace import SpanKind, Tracer

from jokemesh.core.constants import PROXY_TIMEOUT_SECONDS
from jokemesh.core.exceptions import (
    ProxyRequestError,
    ResponseReadError,
    UpstreamUnavailableError,
)
from jokemesh.core.logging import get_logger
from jokemesh.observability.metrics import GatewayInstruments, elapsed_ms
from jokemesh.observability.tracing import inject_trace_context, mark_span_failed


logger = get_logger(__name__)


def build_service_url(address: str, path: str) -> str:
    """Join a peer base address and a fixed path.

    Addresses are usually bare ``host[:port]`` (``http://`` is assumed); a
    full URL with scheme is used as given.
    """
    base = address if "://" in address else f"http://{address}"
    return f"{base.rstrip('/')}{path}"


@dataclass(frozen=True)
class ProxiedResponse:
    """Backend answer, relayed verbatim."""

    status_code: int
    body: bytes


class ServiceProxy:
    """At-most-once HTTP forwarding with trace propagation."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        tracer: Tracer,
        instruments: GatewayInstruments,
        timeout: float = PROXY_TIMEOUT_SECONDS,
    ) -> None:
        self._client = client
        self._tracer = tracer
        self._instruments = instruments
        self._timeout = timeout

    async def forward(
        self,
        method: str,
        service_address: str,
        path: str,
        body: bytes = b"",
    ) -> ProxiedResponse:
        """Forward one request to ``service_address`` + ``path``.

        Raises:
            ProxyRequestError: The outbound request could not be built.
            UpstreamUnavailableError: Network error or timeout.
            ResponseReadError: The backend body could not be read.
        """
        with self._tracer.start_as_current_span(
            f"proxy_to_{path}",
            kind=SpanKind.CLIENT,
            record_exception=False,
            set_status_on_exception=False,
        ) as span:
            start = time.perf_counter()
            target_url = build_service_url(service_address, path)

            span.set_attribute("http.method", method)
            span.set_attribute("http.url", target_url)
            span.set_attribute("peer.service", service_address)

            logger.info("Proxying request", target=target_url, method=method)

            try:
                headers = inject_trace_context({"Content-Type": "application/json"})
                request = self._client.build_request(
                    method, target_url, content=body, headers=headers
                )
            except (httpx.InvalidURL, ValueError, TypeError) as e:
                mark_span_failed(span, e)
                logger.error("Failed to create proxy request", target=target_url, error=str(e))
                raise ProxyRequestError() from e

            try:
                response = await asyncio.wait_for(
                    self._client.send(request, stream=True),
                    timeout=self._timeout,
                )
            except (httpx.RequestError, asyncio.TimeoutError) as e:
                mark_span_failed(span, e)
                logger.error(
                    "Failed to proxy request",
                    target=target_url,
                    error=str(e) or type(e).__name__,
                )
                raise UpstreamUnavailableError(service=service_address) from e

            duration_ms = elapsed_ms(start)
            self._instruments.request_latency.record(
                duration_ms,
                {"service": service_address, "status_code": response.status_code},
            )
            span.set_attribute("http.status_code", response.status_code)

            remaining = self._timeout - (time.perf_counter() - start)
            try:
                content = await asyncio.wait_for(response.aread(), timeout=remaining)
            except (httpx.HTTPError, httpx.StreamError, asyncio.TimeoutError) as e:
                mark_span_failed(span, e)
                logger.error(
                    "Failed to read response",
                    target=target_url,
                    error=str(e) or type(e).__name__,
                )
                raise ResponseReadError() from e
            finally:
                await response.aclose()

            logger.info(
                "Proxy request completed",
                status_code=response.status_code,
                duration_ms=round(duration_ms, 3),
            )
            return ProxiedResponse(status_code=response.status_code, body=content)
