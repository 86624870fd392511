# =======================================================================================
# access_request/services/payload_builder.py - Gateway Payload and Signature
# =======================================================================================
import hashlib
import hmac
import json
from typing import Optional

from ..models.schemas import Actor, GatewayRequest, ResolvedAsset

SIGNATURE_HEADER = "X-Signature"
SIGNATURE_PREFIX = "sha256="


def canonical_body(reader_name: str, card_id: Optional[str]) -> bytes:
    """Encode the only fields the gateway reads. These exact bytes are signed and sent."""
    payload = {"reader_name": reader_name, "card_id": card_id or ""}
    return json.dumps(payload, separators=(",", ":")).encode("utf-8")


def sign_body(secret: str, body: bytes) -> str:
    """HMAC-SHA256 of the body, formatted for the X-Signature header."""
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return SIGNATURE_PREFIX + digest


class PayloadBuilder:
    """Builds the signed gateway request for one access attempt."""

    def __init__(self, hmac_secret: str = ""):
        self.hmac_secret = hmac_secret

    def build(
        self,
        resolved: ResolvedAsset,
        credential: Optional[str],
        actor: Actor,
        method: str = "website",
        source: Optional[str] = None,
    ) -> GatewayRequest:
        body = canonical_body(resolved.reader_name, credential)

        headers = {"Content-Type": "application/json"}
        if self.hmac_secret:
            headers[SIGNATURE_HEADER] = sign_body(self.hmac_secret, body)

        # Context for the logs only; never sent to the gateway
        log_payload = {
            "reader_name": resolved.reader_name,
            "card_id": credential or "",
            "uid": actor.user_id,
            "email": actor.email,
            "asset_id": resolved.asset_id,
            "permission_id": resolved.permission_id,
            "method": method,
            "source": source or method,
        }
        return GatewayRequest(body=body, headers=headers, log_payload=log_payload)
