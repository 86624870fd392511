# =======================================================================================
# access_request/services/denial_policy.py - Denial Message Selection
# =======================================================================================
import html
from typing import Callable, List, Optional, Tuple

from ..models.enums import DenialReason, MAX_REASON_LENGTH, TRANSPORT_FAILURE_STATUS
from ..models.schemas import AccessRequestSettings, ActorAttributes

PAYMENT_LINK_TOKEN = "{payment_link}"
PAYMENT_LINK_TEXT = "Update your payment details"
TRANSPORT_ERROR_MESSAGE = (
    "A temporary error occurred while contacting the access system. Please try again."
)

# (reason, predicate, settings field holding the message template), highest priority first
DENIAL_RULES: List[Tuple[DenialReason, Callable[[ActorAttributes], bool], str]] = [
    (DenialReason.OVERRIDE, lambda a: a.override == "deny", "override_message"),
    (DenialReason.MANUAL_PAUSE, lambda a: a.manual_pause, "manual_pause_message"),
    (DenialReason.UNPAID, lambda a: a.payment_failed, "unpaid_message"),
    (DenialReason.PAYMENT_PAUSE, lambda a: a.payment_pause, "payment_pause_message"),
    (DenialReason.NO_MEMBER_ROLE, lambda a: not a.has_member_role, "no_member_role_message"),
]


def render_message(template: str, payment_portal_url: str = "") -> str:
    """Fill the payment link slot, or drop it when no portal is configured."""
    if PAYMENT_LINK_TOKEN not in template:
        return template
    if payment_portal_url:
        link = f'<a href="{html.escape(payment_portal_url, quote=True)}">{PAYMENT_LINK_TEXT}</a>'
    else:
        link = ""
    return template.replace(PAYMENT_LINK_TOKEN, link).strip()


def response_excerpt(body: Optional[str]) -> str:
    """At most MAX_REASON_LENGTH characters of a gateway response body."""
    return (body or "").strip()[:MAX_REASON_LENGTH]


def fallback_message(http_status: int, body: Optional[str]) -> str:
    excerpt = response_excerpt(body)
    message = f"Access was denied by the access system (status {http_status})."
    if excerpt:
        message += f" Response: {excerpt}"
    return message


class DenialPolicy:
    """Picks the user-facing message for a request the gateway did not accept."""

    def match(self, attributes: ActorAttributes) -> Optional[DenialReason]:
        """First matching denial reason in priority order, or None."""
        for reason, predicate, _ in DENIAL_RULES:
            if predicate(attributes):
                return reason
        return None

    def evaluate(
        self,
        attributes: ActorAttributes,
        settings: AccessRequestSettings,
        http_status: int,
        body: Optional[str] = None,
    ) -> str:
        # A transport failure is not a policy decision
        if http_status == TRANSPORT_FAILURE_STATUS:
            return TRANSPORT_ERROR_MESSAGE

        reason = self.match(attributes)
        if reason is not None:
            template = getattr(settings, self._template_field(reason))
            message = render_message(template, settings.payment_portal_url)
            if message.strip():
                return message

        message = render_message(settings.default_denial_message, settings.payment_portal_url)
        if message.strip():
            return message

        return fallback_message(http_status, body)

    @staticmethod
    def _template_field(reason: DenialReason) -> str:
        return next(field for rule_reason, _, field in DENIAL_RULES if rule_reason is reason)
