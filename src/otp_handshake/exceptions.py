"""
Exception types raised by the otp_handshake package
"""


class OtpHandshakeError(Exception):
    """Base class for otp_handshake errors"""
    pass


class InvalidArgumentError(OtpHandshakeError, ValueError):
    """Raised when a required argument is missing or of the wrong kind"""
    pass


class UntrustedSourceError(OtpHandshakeError):
    """Raised when an inbound message is not from a trusted counterparty"""
    pass


class MalformedMessageError(OtpHandshakeError):
    """Raised when a message extra holds a value of an unexpected type"""
    pass


class PackageNotFoundError(OtpHandshakeError):
    """Raised by a platform registry for packages that are not installed"""

    def __init__(self, package_name: str):
        super().__init__(f"Package not found: {package_name}")
        self.package_name = package_name
