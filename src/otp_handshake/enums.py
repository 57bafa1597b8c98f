"""
Closed enumerations shared by the handshake and inbound validation paths
"""

from enum import Enum
from typing import Iterable, Optional, Tuple

from .exceptions import InvalidArgumentError


class CounterpartyIdentity(str, Enum):
    """Trusted counterparty applications, valued by their package identifier"""
    CONSUMER = "com.whatsapp"
    BUSINESS = "com.whatsapp.w4b"

    @property
    def package_name(self) -> str:
        return self.value

    @classmethod
    def known(cls) -> Tuple['CounterpartyIdentity', ...]:
        """All known identities, consumer first"""
        return (cls.CONSUMER, cls.BUSINESS)

    @classmethod
    def resolve(
        cls,
        identities: Optional[Iterable['CounterpartyIdentity']] = None
    ) -> Tuple['CounterpartyIdentity', ...]:
        """
        Normalize an identity selection

        None selects every known identity. An explicit empty collection
        selects nothing.

        Raises:
            InvalidArgumentError: if a member is not a CounterpartyIdentity
        """
        if identities is None:
            return cls.known()

        resolved = tuple(identities)
        for identity in resolved:
            if not isinstance(identity, cls):
                raise InvalidArgumentError(f"Not a counterparty identity: {identity!r}")
        return resolved


class OtpErrorKind(str, Enum):
    """Classification reported to error callbacks"""
    # Token absent or issued by a package outside the allow-list
    UNTRUSTED_SOURCE = "untrusted_source"
    # Trusted message without the expected payload
    PAYLOAD_MISSING = "payload_missing"
    # Any other failure while extracting
    UNCLASSIFIED = "unclassified"
