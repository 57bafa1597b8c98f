"""
Handshake request builder
Creates the outbound request sent to a counterparty application
"""

import logging
from importlib import metadata
from typing import Optional

from .config import HandshakeConfig
from .enums import CounterpartyIdentity
from .exceptions import InvalidArgumentError, PackageNotFoundError
from .messages import DEFAULT_SDK_VERSION, OTP_REQUESTED_ACTION, HandshakeRequest
from .platform import PlatformContext

logger = logging.getLogger(__name__)

DISTRIBUTION_NAME = "otp-handshake"


class HandshakeRequestBuilder:
    """
    Builds handshake requests

    Every request carries a freshly minted capability token. The counterparty
    uses it only to validate the requester's package against the package
    registered for its authentication template.

    Subclass to change how requests are built.
    """

    distribution_name = DISTRIBUTION_NAME

    def __init__(self, send_sdk_version: bool = True):
        self.send_sdk_version = send_sdk_version

    @classmethod
    def from_config(cls, config: Optional[HandshakeConfig] = None) -> 'HandshakeRequestBuilder':
        config = config or HandshakeConfig.from_env()
        return cls(send_sdk_version=config.send_sdk_version)

    def build(self, context: PlatformContext, identity: CounterpartyIdentity) -> HandshakeRequest:
        """
        Build a handshake request for a counterparty

        Args:
            context: Requester's platform context
            identity: Counterparty the request is addressed to

        Returns:
            Request ready to broadcast

        Raises:
            InvalidArgumentError: if context or identity is missing
        """
        if identity is None:
            raise InvalidArgumentError("Counterparty identity must be defined.")
        if context is None:
            raise InvalidArgumentError("Context cannot be None.")
        if not isinstance(identity, CounterpartyIdentity):
            raise InvalidArgumentError(f"Not a counterparty identity: {identity!r}")

        target_package = identity.package_name
        if logger.isEnabledFor(logging.DEBUG):
            self._log_target_details(context, target_package)

        caller_info = context.mint_capability_token()
        sdk_version = self.get_sdk_version() if self.send_sdk_version else None

        return HandshakeRequest(
            target_package=target_package,
            action=OTP_REQUESTED_ACTION,
            caller_info=caller_info,
            sdk_version=sdk_version
        )

    def get_sdk_version(self) -> str:
        """Installed distribution version, or DEFAULT_SDK_VERSION when no metadata is found"""
        try:
            return metadata.version(self.distribution_name)
        except metadata.PackageNotFoundError:
            return DEFAULT_SDK_VERSION

    def _log_target_details(self, context: PlatformContext, target_package: str) -> None:
        try:
            package_info = context.get_package_info(target_package)
        except PackageNotFoundError:
            logger.info(f"Package {target_package} not found. Is it visible to this application?")
            return

        logger.debug(f"Package info: {package_info}")
        for receiver in context.query_broadcast_receivers(target_package, OTP_REQUESTED_ACTION):
            logger.debug(f"Receiver: {receiver}")
