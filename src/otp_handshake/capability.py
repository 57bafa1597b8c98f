"""
Capability tokens
Ed25519-attested handles whose creator package cannot be forged
"""

import base64
import logging
import secrets
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ed25519
from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from .canonical_utils import canonical_json, stable_hash
from .clock import Clock, SystemClock

logger = logging.getLogger(__name__)


class TokenVerificationFailureReason:
    """Reasons a token fails authority verification"""
    KEY_MISMATCH = "key_mismatch"
    INVALID_SIGNATURE = "invalid_signature"
    MALFORMED_SIGNATURE = "malformed_signature"


def _token_body(token_id: str, creator_package: str, issued_at: datetime) -> Dict[str, Any]:
    """The exact structure canonicalized and signed by the authority"""
    return {
        'token_id': token_id,
        'creator_package': creator_package,
        'issued_at': issued_at,
    }


class CapabilityToken(BaseModel):
    """Opaque handle minted by a TokenAuthority on behalf of a package"""
    model_config = ConfigDict(extra="forbid", frozen=True)

    token_id: str = Field(min_length=1, description="Unique token identifier")
    creator_package: str = Field(description="Package the token was minted for")
    issued_at: datetime = Field(description="Mint timestamp in UTC")
    key_id: str = Field(min_length=1, description="Identifier of the minting authority key")
    sig_b64: str = Field(min_length=1, description="Base64 encoded Ed25519 signature")

    @field_validator('issued_at')
    @classmethod
    def validate_utc_timestamp(cls, v):
        """Ensure timestamp is in UTC"""
        if v.tzinfo is None:
            v = v.replace(tzinfo=timezone.utc)
        elif v.tzinfo != timezone.utc:
            v = v.astimezone(timezone.utc)
        return v

    @field_serializer('issued_at')
    def serialize_issued_at(self, value: datetime) -> str:
        return value.isoformat().replace('+00:00', 'Z')

    def canonical_bytes(self) -> bytes:
        """Produce deterministic bytes covered by the signature"""
        body = _token_body(self.token_id, self.creator_package, self.issued_at)
        return canonical_json(body).encode('utf-8')


class TokenAuthority:
    """
    Platform-side signer for capability tokens

    Only the holder of the authority's private key can mint a token, so a
    token that verifies against the authority's public key carries an
    authentic creator package.
    """

    def __init__(
        self,
        private_key: Optional[ed25519.Ed25519PrivateKey] = None,
        clock: Optional[Clock] = None
    ):
        """
        Initialize authority

        Args:
            private_key: Optional existing private key, generates new one if None
            clock: Clock used to stamp issued_at (defaults to SystemClock)
        """
        self._private_key = private_key or ed25519.Ed25519PrivateKey.generate()
        self._public_key = self._private_key.public_key()
        self._key_id = stable_hash(self.public_key_b64)
        self.clock = clock or SystemClock()

    @property
    def key_id(self) -> str:
        return self._key_id

    @property
    def public_key(self) -> ed25519.Ed25519PublicKey:
        return self._public_key

    @property
    def public_key_b64(self) -> str:
        public_bytes = self._public_key.public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw
        )
        return base64.b64encode(public_bytes).decode('utf-8')

    def mint(self, creator_package: str) -> CapabilityToken:
        """
        Mint a fresh token recording creator_package as its creator

        Args:
            creator_package: Package identity the token attests

        Returns:
            Signed capability token
        """
        token_id = secrets.token_urlsafe(32)
        issued_at = self.clock.now()
        body = _token_body(token_id, creator_package, issued_at)
        signature = self._private_key.sign(canonical_json(body).encode('utf-8'))

        logger.debug(f"Minted capability token {token_id[:8]} for {creator_package}")
        return CapabilityToken(
            token_id=token_id,
            creator_package=creator_package,
            issued_at=issued_at,
            key_id=self._key_id,
            sig_b64=base64.b64encode(signature).decode('utf-8')
        )

    def verify(self, token: CapabilityToken) -> Tuple[bool, Optional[str]]:
        """
        Verify that token was minted by this authority and is unaltered

        Returns:
            Tuple of (is_valid, failure_reason)
        """
        if token.key_id != self._key_id:
            return False, TokenVerificationFailureReason.KEY_MISMATCH

        try:
            signature = base64.b64decode(token.sig_b64, validate=True)
        except ValueError:
            return False, TokenVerificationFailureReason.MALFORMED_SIGNATURE

        try:
            self._public_key.verify(signature, token.canonical_bytes())
        except InvalidSignature:
            return False, TokenVerificationFailureReason.INVALID_SIGNATURE

        return True, None

    def creator_of(self, token: CapabilityToken) -> Optional[str]:
        """Return the authentic creator package, or None if the token does not verify"""
        is_valid, reason = self.verify(token)
        if not is_valid:
            logger.warning(f"Capability token {token.token_id[:8]} rejected: {reason}")
            return None
        return token.creator_package
