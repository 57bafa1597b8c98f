"""
Handshake and inbound message schemas
Wire keys and models exchanged with counterparty applications
"""

import logging
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .capability import CapabilityToken
from .exceptions import MalformedMessageError

logger = logging.getLogger(__name__)

OTP_REQUESTED_ACTION = "com.whatsapp.otp.OTP_REQUESTED"

# Reserved extra keys
CALLER_INFO_KEY = "_ci_"
SDK_VERSION_KEY = "SDK_VERSION"
CODE_KEY = "code"
OTP_ERROR_IDENTIFIER_KEY = "error"
OTP_ERROR_MESSAGE_KEY = "error_message"

DEFAULT_SDK_VERSION = "0.1.0_not_from_manifest"


class HandshakeRequest(BaseModel):
    """Outbound handshake announcing that OTP autofill should be enabled"""
    model_config = ConfigDict(extra="forbid", frozen=True)

    target_package: str = Field(min_length=1, description="Counterparty package the request is addressed to")
    action: str = Field(default=OTP_REQUESTED_ACTION, description="Transport-level action tag")
    caller_info: CapabilityToken = Field(description="Token attesting the requester's package")
    sdk_version: Optional[str] = Field(default=None, description="Requester SDK version, when reported")

    @property
    def extras(self) -> Dict[str, Any]:
        """Keyed extras as carried by the transport; SDK_VERSION only when reported"""
        extras: Dict[str, Any] = {CALLER_INFO_KEY: self.caller_info}
        if self.sdk_version is not None:
            extras[SDK_VERSION_KEY] = self.sdk_version
        return extras

    def to_wire(self) -> Dict[str, Any]:
        """JSON-compatible representation for transports"""
        extras = dict(self.extras)
        extras[CALLER_INFO_KEY] = self.caller_info.model_dump(mode="json")
        return {
            'package': self.target_package,
            'action': self.action,
            'extras': extras,
        }


class InboundMessage(BaseModel):
    """Message received from a counterparty; extras are untrusted until validated"""
    model_config = ConfigDict(extra="forbid", frozen=True)

    action: Optional[str] = Field(default=None, description="Transport-level action tag")
    extras: Dict[str, Any] = Field(default_factory=dict, description="Keyed message extras")

    @classmethod
    def from_wire(cls, data: Mapping[str, Any]) -> 'InboundMessage':
        """Build a message from its JSON-compatible representation"""
        return cls(action=data.get('action'), extras=data.get('extras') or {})

    def get_string_extra(self, key: str) -> Optional[str]:
        """
        Read a string extra

        Returns:
            The value, or None when the key is absent

        Raises:
            MalformedMessageError: if the extra holds a non-string value
        """
        value = self.extras.get(key)
        if value is None:
            return None
        if not isinstance(value, str):
            raise MalformedMessageError(
                f"Extra '{key}' holds {type(value).__name__}, expected str"
            )
        return value

    def get_capability_token(self) -> Optional[CapabilityToken]:
        """Read the embedded capability token; anything unparseable reads as absent"""
        value = self.extras.get(CALLER_INFO_KEY)
        if value is None or isinstance(value, CapabilityToken):
            return value

        if isinstance(value, Mapping):
            try:
                return CapabilityToken.model_validate(value)
            except ValidationError as e:
                logger.warning(f"Ignoring unparseable capability token: {e.error_count()} errors")
                return None

        logger.warning(f"Ignoring capability token of type {type(value).__name__}")
        return None


class DebugSignal(BaseModel):
    """Diagnostic identifier/message pair sent by a counterparty"""
    model_config = ConfigDict(extra="forbid", frozen=True)

    otp_error_identifier: Optional[str] = Field(default=None, description="Identifier for the error")
    otp_error_message: Optional[str] = Field(default=None, description="Message for the error")


def create_otp_code_message(caller_info: CapabilityToken, code: Optional[str]) -> InboundMessage:
    """Create a counterparty message carrying an OTP code"""
    extras: Dict[str, Any] = {CALLER_INFO_KEY: caller_info}
    if code is not None:
        extras[CODE_KEY] = code
    return InboundMessage(extras=extras)


def create_debug_signal_message(
    caller_info: CapabilityToken,
    otp_error_identifier: Optional[str],
    otp_error_message: Optional[str]
) -> InboundMessage:
    """Create a counterparty message carrying a debug signal"""
    extras: Dict[str, Any] = {CALLER_INFO_KEY: caller_info}
    if otp_error_identifier is not None:
        extras[OTP_ERROR_IDENTIFIER_KEY] = otp_error_identifier
    if otp_error_message is not None:
        extras[OTP_ERROR_MESSAGE_KEY] = otp_error_message
    return InboundMessage(extras=extras)
