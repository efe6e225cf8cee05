"""
HTTP prober for the monitored endpoint, built on httpx.

A probe never raises for ordinary network trouble: timeouts, DNS and
connection failures and unexpected status codes all come back as a
``ProbeOutcome`` with ``up=False``.
"""
import logging
import time
from dataclasses import dataclass
from typing import Any, Protocol

import anyio
import httpx

from uptime.config import MonitorConfig

logger = logging.getLogger(__name__)


@dataclass
class ProbeOutcome:
    """Result of a single probe, before it is persisted."""

    up: bool
    response_time_ms: int
    error_message: str | None
    status_code: int | None

    @property
    def status(self) -> str:
        """Returns "up" or "down"."""
        return "up" if self.up else "down"


class Prober(Protocol):
    def check(self) -> ProbeOutcome: ...


def _elapsed_ms(start_time: float) -> int:
    return int((time.monotonic() - start_time) * 1000)


class HttpProber:
    """
    Performs one HTTP request per check against ``config.target_url``.

    The whole request (connect, headers and body) runs under a single
    deadline of ``config.ping_timeout_ms``. httpx's own timeouts apply per
    read, so a server trickling bytes would otherwise never time out.
    """

    def __init__(
        self,
        config: MonitorConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config
        self.transport = transport

    def _request_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "headers": self.config.headers or None,
            "timeout": httpx.Timeout(self.config.ping_timeout_seconds),
        }
        if self.config.body is not None and self.config.http_method == "POST":
            kwargs["content"] = self.config.body
        return kwargs

    async def _fetch(self) -> httpx.Response:
        config = self.config
        with anyio.fail_after(config.ping_timeout_seconds):
            async with httpx.AsyncClient(transport=self.transport) as client:
                return await client.request(
                    config.http_method, config.target_url, **self._request_kwargs()
                )

    def check(self) -> ProbeOutcome:
        config = self.config
        start_time = time.monotonic()

        try:
            response = anyio.run(self._fetch)
        except (httpx.TimeoutException, TimeoutError) as e:
            logger.warning(
                f"Probe timeout for {config.service_name} after {config.ping_timeout_ms}ms: {e!r}"
            )
            return ProbeOutcome(
                up=False,
                response_time_ms=config.ping_timeout_ms,
                error_message=f"Timeout after {config.ping_timeout_ms}ms",
                status_code=None,
            )
        except httpx.HTTPError as e:
            # DNS failures, refused connections, protocol errors
            logger.warning(f"Probe failed for {config.service_name}: {e}")
            return ProbeOutcome(
                up=False,
                response_time_ms=_elapsed_ms(start_time),
                error_message=str(e) or "Fetch failed",
                status_code=None,
            )

        response_time_ms = _elapsed_ms(start_time)

        if response.status_code in config.expected_codes:
            logger.info(
                f"Probe passed for {config.service_name}: "
                f"{response.status_code} in {response_time_ms}ms"
            )
            return ProbeOutcome(
                up=True,
                response_time_ms=response_time_ms,
                error_message=None,
                status_code=response.status_code,
            )

        error = f"Unexpected status code: {response.status_code}"
        logger.warning(f"Probe failed for {config.service_name}: {error}")
        return ProbeOutcome(
            up=False,
            response_time_ms=response_time_ms,
            error_message=error,
            status_code=response.status_code,
        )
