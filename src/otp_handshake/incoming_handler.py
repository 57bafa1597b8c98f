"""
Inbound message validation and extraction
Payloads are trusted only after the embedded capability token attests a known counterparty
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

from .enums import CounterpartyIdentity, OtpErrorKind
from .exceptions import UntrustedSourceError
from .messages import (
    CODE_KEY,
    OTP_ERROR_IDENTIFIER_KEY,
    OTP_ERROR_MESSAGE_KEY,
    DebugSignal,
    InboundMessage,
)
from .platform import PlatformContext

logger = logging.getLogger(__name__)

ErrorHandler = Callable[[OtpErrorKind, Optional[BaseException]], None]


class ValidationFailureReason:
    """Reasons an inbound message is not trusted"""
    TOKEN_ABSENT = "token_absent"
    TOKEN_UNVERIFIED = "token_unverified"
    ISSUER_NOT_ALLOWED = "issuer_not_allowed"


@dataclass(frozen=True)
class ValidationOutcome:
    """Result of checking an inbound message's origin"""

    valid: bool
    issuer: Optional[str] = None
    failure_reason: Optional[str] = None

    @classmethod
    def valid_result(cls, issuer: str) -> 'ValidationOutcome':
        return cls(valid=True, issuer=issuer)

    @classmethod
    def invalid_result(cls, failure_reason: str, issuer: Optional[str] = None) -> 'ValidationOutcome':
        return cls(valid=False, issuer=issuer, failure_reason=failure_reason)


@dataclass(frozen=True)
class OtpResult:
    """Tagged success/failure of an extraction"""

    success: bool
    value: Any = None
    error_kind: Optional[OtpErrorKind] = None
    cause: Optional[BaseException] = None

    @classmethod
    def success_result(cls, value: Any) -> 'OtpResult':
        return cls(success=True, value=value)

    @classmethod
    def failure_result(cls, error_kind: OtpErrorKind, cause: Optional[BaseException] = None) -> 'OtpResult':
        return cls(success=False, error_kind=error_kind, cause=cause)

    def dispatch(self, on_success: Callable[[Any], None], on_error: ErrorHandler) -> None:
        """Invoke exactly one of the callbacks; exceptions they raise propagate"""
        if self.success:
            on_success(self.value)
        else:
            on_error(self.error_kind, self.cause)


class IncomingMessageHandler:
    """Handles messages coming from counterparty applications"""

    def __init__(self, context: PlatformContext):
        """
        Initialize handler

        Args:
            context: Receiving process's platform context, used to attest token creators
        """
        self.context = context

    def validate(
        self,
        message: InboundMessage,
        identities: Optional[Iterable[CounterpartyIdentity]] = None
    ) -> ValidationOutcome:
        """
        Check the message's capability token against allowed counterparties

        Args:
            message: Inbound message
            identities: Allowed counterparties; None allows all known, an
                empty collection allows none

        Returns:
            ValidationOutcome carrying the attested issuer when valid
        """
        allowed = CounterpartyIdentity.resolve(identities)

        token = message.get_capability_token()
        if token is None:
            logger.debug("Inbound message carries no capability token")
            return ValidationOutcome.invalid_result(ValidationFailureReason.TOKEN_ABSENT)

        issuer = self.context.resolve_token_creator(token)
        if issuer is None:
            return ValidationOutcome.invalid_result(ValidationFailureReason.TOKEN_UNVERIFIED)

        if any(identity.package_name == issuer for identity in allowed):
            return ValidationOutcome.valid_result(issuer)

        logger.warning(f"Rejected inbound message issued by {issuer!r}")
        return ValidationOutcome.invalid_result(ValidationFailureReason.ISSUER_NOT_ALLOWED, issuer)

    def is_from_trusted_counterparty(
        self,
        message: InboundMessage,
        identities: Optional[Iterable[CounterpartyIdentity]] = None
    ) -> bool:
        """True if the message's token was created by one of identities (defaults to all known)"""
        return self.validate(message, identities).valid

    def get_otp_code(self, message: InboundMessage) -> Optional[str]:
        """
        Extract the OTP code

        Returns:
            The code, or None if the trusted message carries none

        Raises:
            UntrustedSourceError: if the message is not from a known counterparty
        """
        if self.is_from_trusted_counterparty(message):
            return message.get_string_extra(CODE_KEY)
        raise UntrustedSourceError("Invalid message: not from a trusted counterparty")

    def get_debug_signal(self, message: InboundMessage) -> DebugSignal:
        """
        Extract the debug signal; both fields may be None

        Raises:
            UntrustedSourceError: if the message is not from a known counterparty
        """
        if self.is_from_trusted_counterparty(message):
            return DebugSignal(
                otp_error_identifier=message.get_string_extra(OTP_ERROR_IDENTIFIER_KEY),
                otp_error_message=message.get_string_extra(OTP_ERROR_MESSAGE_KEY)
            )
        raise UntrustedSourceError("Invalid message: not from a trusted counterparty")

    def resolve_otp_code(self, message: InboundMessage) -> OtpResult:
        """Extract the OTP code into an OtpResult; never raises"""
        try:
            code = self.get_otp_code(message)
        except UntrustedSourceError as e:
            return OtpResult.failure_result(OtpErrorKind.UNTRUSTED_SOURCE, e)
        except Exception as e:
            logger.error(f"Failed to extract OTP code: {e}")
            return OtpResult.failure_result(OtpErrorKind.UNCLASSIFIED, e)

        if code is None:
            return OtpResult.failure_result(OtpErrorKind.PAYLOAD_MISSING)
        return OtpResult.success_result(code)

    def resolve_debug_signal(self, message: InboundMessage) -> OtpResult:
        """Extract the debug signal into an OtpResult; never raises"""
        try:
            return OtpResult.success_result(self.get_debug_signal(message))
        except UntrustedSourceError as e:
            return OtpResult.failure_result(OtpErrorKind.UNTRUSTED_SOURCE, e)
        except Exception as e:
            logger.error(f"Failed to extract debug signal: {e}")
            return OtpResult.failure_result(OtpErrorKind.UNCLASSIFIED, e)

    def process_otp_code(
        self,
        message: InboundMessage,
        on_code: Callable[[str], None],
        on_error: ErrorHandler
    ) -> None:
        """
        Deliver the OTP code to on_code, or classify the failure for on_error

        Exactly one callback runs, once, before this returns. on_error
        receives PAYLOAD_MISSING with no cause when a trusted message has no
        code.

        Extraction failures never raise; they are reported to on_error. An
        exception raised by a callback itself propagates to the caller and
        does not trigger the other callback.
        """
        self.resolve_otp_code(message).dispatch(on_code, on_error)

    def process_otp_debug_signals(
        self,
        message: InboundMessage,
        on_signal: Callable[[DebugSignal], None],
        on_error: ErrorHandler
    ) -> None:
        """
        Deliver the debug signal to on_signal, or classify the failure for on_error

        Exactly one callback runs. An exception raised by a callback itself
        propagates to the caller and does not trigger the other callback.
        """
        self.resolve_debug_signal(message).dispatch(on_signal, on_error)
