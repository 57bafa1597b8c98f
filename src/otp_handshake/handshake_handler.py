"""
Handshake handler
Sends handshake requests to counterparty applications and checks their presence
"""

import logging
from typing import Iterable, List, Optional

from .enums import CounterpartyIdentity
from .exceptions import InvalidArgumentError, PackageNotFoundError
from .messages import OTP_REQUESTED_ACTION, HandshakeRequest
from .platform import PlatformContext
from .request_builder import HandshakeRequestBuilder

logger = logging.getLogger(__name__)


class HandshakeHandler:
    """Handles requests sent to counterparty applications"""

    def __init__(
        self,
        send_sdk_version: bool = True,
        request_builder: Optional[HandshakeRequestBuilder] = None
    ):
        """
        Initialize handler

        Args:
            send_sdk_version: Whether built requests report the SDK version
            request_builder: Custom builder; send_sdk_version is ignored when given
        """
        self.request_builder = request_builder or HandshakeRequestBuilder(send_sdk_version)

    def send_handshake(self, context: PlatformContext) -> List[HandshakeRequest]:
        """
        Send the handshake to both consumer and business applications

        After receiving the handshake a counterparty enables autofill for
        the requester according to its message template configuration.
        Requests are sent whether or not the counterparty is installed.

        Returns:
            The broadcast requests, consumer first
        """
        if context is None:
            raise InvalidArgumentError("Context cannot be None.")

        return [
            self.send_handshake_to(context, identity)
            for identity in CounterpartyIdentity.known()
        ]

    def send_handshake_to(self, context: PlatformContext, identity: CounterpartyIdentity) -> HandshakeRequest:
        """Build and broadcast a handshake for one counterparty"""
        request = self.request_builder.build(context, identity)
        context.send_broadcast(request)
        logger.info(f"Sent handshake to {identity.package_name}")
        return request

    def is_handshake_supported(
        self,
        context: PlatformContext,
        identities: Optional[Iterable[CounterpartyIdentity]] = None
    ) -> bool:
        """
        Check whether any selected counterparty registers a handshake receiver

        Args:
            context: Requester's platform context
            identities: Counterparties to check (defaults to all known)

        Returns:
            True if a receiver for the handshake action exists, False otherwise,
            including when the counterparty is not installed
        """
        return any(
            len(context.query_broadcast_receivers(identity.package_name, OTP_REQUESTED_ACTION)) > 0
            for identity in CounterpartyIdentity.resolve(identities)
        )

    def is_counterparty_installed(
        self,
        context: PlatformContext,
        identities: Optional[Iterable[CounterpartyIdentity]] = None
    ) -> bool:
        """Check whether any selected counterparty (defaults to all known) is installed"""
        return any(
            self._is_installed(context, identity)
            for identity in CounterpartyIdentity.resolve(identities)
        )

    @staticmethod
    def _is_installed(context: PlatformContext, identity: CounterpartyIdentity) -> bool:
        try:
            context.get_package_info(identity.package_name)
            return True
        except PackageNotFoundError:
            return False
