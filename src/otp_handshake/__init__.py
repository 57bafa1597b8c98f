"""
OTP autofill handshake with trusted counterparty applications
"""

from .capability import CapabilityToken, TokenAuthority
from .config import HandshakeConfig
from .enums import CounterpartyIdentity, OtpErrorKind
from .exceptions import (
    OtpHandshakeError,
    InvalidArgumentError,
    UntrustedSourceError,
    MalformedMessageError,
    PackageNotFoundError,
)
from .handshake_handler import HandshakeHandler
from .incoming_handler import IncomingMessageHandler, OtpResult, ValidationOutcome
from .messages import DebugSignal, HandshakeRequest, InboundMessage
from .platform import LocalPlatformContext, PackageRegistry, PlatformContext
from .request_builder import HandshakeRequestBuilder

__all__ = [
    'CapabilityToken',
    'TokenAuthority',
    'HandshakeConfig',
    'CounterpartyIdentity',
    'OtpErrorKind',
    'OtpHandshakeError',
    'InvalidArgumentError',
    'UntrustedSourceError',
    'MalformedMessageError',
    'PackageNotFoundError',
    'HandshakeHandler',
    'IncomingMessageHandler',
    'OtpResult',
    'ValidationOutcome',
    'DebugSignal',
    'HandshakeRequest',
    'InboundMessage',
    'LocalPlatformContext',
    'PackageRegistry',
    'PlatformContext',
    'HandshakeRequestBuilder',
]
