# =======================================================================================
# access_request/services/gateway_client.py - Access Gateway HTTP Client
# =======================================================================================
import time
import uuid
from typing import Callable, Dict, Optional, Tuple
from urllib.parse import urlsplit, urlunsplit

import httpx
import structlog

from ..models.enums import GATEWAY_SUCCESS_STATUS, TRANSPORT_FAILURE_STATUS, MAX_REASON_LENGTH
from ..models.schemas import GatewayHealthResponse, GatewayRequest, GatewayResult
from ..utils.exceptions import GatewayTransportError

logger = structlog.get_logger(__name__)

DRY_RUN_BODY = "Dry run: Card accepted"
HEALTH_PATH = "/health"


class HttpxSender:
    """
    Thin HTTP transport over httpx.

    Returns (status, body) for any response the server sends, whatever the
    status code. Anything that prevents a response from being read is raised
    as GatewayTransportError.
    """

    def __init__(self, client: Optional[httpx.Client] = None):
        self.http_client = client or httpx.Client()

    def close(self) -> None:
        """Close the HTTP client connection pool."""
        self.http_client.close()

    def post(self, url: str, headers: Dict[str, str], body: bytes, timeout: float) -> Tuple[int, str]:
        try:
            response = self.http_client.post(url, headers=headers, content=body, timeout=timeout)
            return response.status_code, response.text
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise GatewayTransportError(str(e) or e.__class__.__name__) from e

    def get(self, url: str, timeout: float) -> Tuple[int, str]:
        try:
            response = self.http_client.get(url, timeout=timeout)
            return response.status_code, response.text
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise GatewayTransportError(str(e) or e.__class__.__name__) from e


def derive_health_url(gateway_url: str, request_suffix: str = "/toolauth/req") -> str:
    """
    Health endpoint for a gateway URL.

    The request path suffix is swapped for /health; URLs with any other path
    use /health at the server root.
    """
    parts = urlsplit(gateway_url.strip())
    path = parts.path.rstrip("/")
    if request_suffix and path.endswith(request_suffix):
        path = path[: -len(request_suffix)] + HEALTH_PATH
    else:
        path = HEALTH_PATH
    return urlunsplit((parts.scheme, parts.netloc, path, "", ""))


class GatewayClient:
    """Sends one signed access request to the gateway and classifies the answer."""

    def __init__(
        self,
        sender: HttpxSender,
        clock: Callable[[], float] = time.perf_counter,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
        log=None,
    ):
        self.sender = sender
        self.clock = clock
        self.id_factory = id_factory
        self.logger = log or logger

    def send(
        self,
        url: str,
        request: GatewayRequest,
        timeout_seconds: float,
        dry_run: bool = False,
    ) -> GatewayResult:
        """
        Make a single attempt; retries are up to the caller.

        A dry run never touches the network and reports a synthetic 201.
        Transport failures come back as http_status 0 with the error text as
        the body.
        """
        request_id = self.id_factory()

        if dry_run:
            self.logger.info(
                "access_request_dry_run",
                request_id=request_id,
                url=url,
                payload=request.log_payload,
            )
            return GatewayResult(
                http_status=GATEWAY_SUCCESS_STATUS, body=DRY_RUN_BODY, latency=0.0, request_id=request_id
            )

        start = self.clock()
        try:
            http_status, body = self.sender.post(url, request.headers, request.body, timeout_seconds)
        except GatewayTransportError as e:
            http_status, body = TRANSPORT_FAILURE_STATUS, str(e)
        latency = self.clock() - start

        result = GatewayResult(http_status=http_status, body=body, latency=latency, request_id=request_id)
        self._log_call(request, result)
        return result

    def _log_call(self, request: GatewayRequest, result: GatewayResult) -> None:
        context = request.log_payload
        level = {"allowed": "info", "denied": "warning", "error": "error"}[result.outcome]
        getattr(self.logger, level)(
            "access_request_gateway_call",
            request_id=result.request_id,
            uid=context.get("uid"),
            email=context.get("email"),
            card_id=context.get("card_id"),
            asset_id=context.get("asset_id"),
            permission_id=context.get("permission_id"),
            reader_name=context.get("reader_name"),
            http_status=result.http_status,
            latency=round(result.latency, 4),
            result=result.outcome,
            reason=result.body[:MAX_REASON_LENGTH],
        )

    def check_health(self, gateway_url: str, timeout_seconds: float, request_suffix: str) -> GatewayHealthResponse:
        """Probe the gateway's /health endpoint. A 404 means the endpoint is optional and absent."""
        if not gateway_url or not gateway_url.strip():
            return GatewayHealthResponse(
                status="not_configured",
                message="The access gateway URL is not configured.",
            )

        url = derive_health_url(gateway_url, request_suffix)
        start = self.clock()
        try:
            http_status, body = self.sender.get(url, timeout_seconds)
        except GatewayTransportError as e:
            latency_ms = round((self.clock() - start) * 1000)
            self.logger.warning("gateway_health_check_error", url=url, error=str(e), latency_ms=latency_ms)
            return GatewayHealthResponse(
                status="error",
                message="Health check failed: the gateway could not be reached.",
                url=url,
                latency_ms=latency_ms,
            )

        latency_ms = round((self.clock() - start) * 1000)
        if http_status == 200:
            status, message = "ok", "Health check successful."
        elif http_status == 404:
            status = "not_implemented"
            message = (
                "The gateway does not implement the optional /health endpoint. "
                "It should answer GET with 200 and a small JSON body such as {\"status\": \"ok\"}."
            )
        else:
            status, message = "failed", "Health check failed."

        self.logger.info("gateway_health_check", url=url, http_status=http_status, status=status, latency_ms=latency_ms)
        return GatewayHealthResponse(
            status=status,
            message=message,
            url=url,
            http_status=http_status,
            latency_ms=latency_ms,
            body=body[:MAX_REASON_LENGTH],
        )
