"""
Host platform interface
Package registry, broadcast channel and capability token attestation
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from .capability import CapabilityToken, TokenAuthority
from .exceptions import PackageNotFoundError
from .messages import HandshakeRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PackageInfo:
    """Installed package metadata"""
    package_name: str
    version_name: Optional[str] = None


@dataclass(frozen=True)
class ReceiverInfo:
    """A broadcast receiver registered by a package for one action"""
    package_name: str
    action: str
    name: str


class PlatformContext(ABC):
    """Context of a process running on the host platform"""

    @property
    @abstractmethod
    def package_name(self) -> str:
        """Package identity of this process"""
        pass

    @abstractmethod
    def mint_capability_token(self) -> CapabilityToken:
        """Mint a token attesting this process's package"""
        pass

    @abstractmethod
    def resolve_token_creator(self, token: CapabilityToken) -> Optional[str]:
        """Platform-recorded creator of token, or None if it cannot be attested"""
        pass

    @abstractmethod
    def send_broadcast(self, request: HandshakeRequest) -> None:
        """Hand a request to the broadcast channel"""
        pass

    @abstractmethod
    def query_broadcast_receivers(self, package_name: str, action: str) -> List[ReceiverInfo]:
        """Receivers registered by package_name for action"""
        pass

    @abstractmethod
    def get_package_info(self, package_name: str) -> PackageInfo:
        """
        Look up an installed package

        Raises:
            PackageNotFoundError: if the package is not installed
        """
        pass


class PackageRegistry:
    """In-memory registry of installed packages and their broadcast receivers"""

    def __init__(self):
        self._packages: Dict[str, PackageInfo] = {}
        self._receivers: Dict[str, List[ReceiverInfo]] = {}

    def install(self, package_name: str, version_name: Optional[str] = None) -> PackageInfo:
        info = PackageInfo(package_name=package_name, version_name=version_name)
        self._packages[package_name] = info
        self._receivers.setdefault(package_name, [])
        logger.info(f"Installed package {package_name}")
        return info

    def uninstall(self, package_name: str) -> None:
        if self._packages.pop(package_name, None) is None:
            raise PackageNotFoundError(package_name)
        self._receivers.pop(package_name, None)
        logger.info(f"Uninstalled package {package_name}")

    def register_receiver(self, package_name: str, action: str, name: Optional[str] = None) -> ReceiverInfo:
        """Register a broadcast receiver; the package must be installed"""
        if package_name not in self._packages:
            raise PackageNotFoundError(package_name)
        receiver = ReceiverInfo(
            package_name=package_name,
            action=action,
            name=name or f"{package_name}.Receiver{len(self._receivers[package_name])}"
        )
        self._receivers[package_name].append(receiver)
        return receiver

    def get_package_info(self, package_name: str) -> PackageInfo:
        info = self._packages.get(package_name)
        if info is None:
            raise PackageNotFoundError(package_name)
        return info

    def query_broadcast_receivers(self, package_name: str, action: str) -> List[ReceiverInfo]:
        return [
            receiver for receiver in self._receivers.get(package_name, [])
            if receiver.action == action
        ]


class LocalPlatformContext(PlatformContext):
    """
    In-process platform context

    Processes sharing a registry and an authority behave like applications on
    one device: tokens minted by one can be attested by another.
    """

    def __init__(
        self,
        package_name: str,
        registry: PackageRegistry,
        authority: TokenAuthority,
        transport: Optional[Callable[[HandshakeRequest], None]] = None,
        record_broadcasts: bool = True
    ):
        """
        Initialize context

        Args:
            package_name: Package identity of this process
            registry: Shared package registry
            authority: Shared token authority
            transport: Optional callable invoked for every broadcast
            record_broadcasts: Keep sent requests in sent_broadcasts for
                inspection; the list is never trimmed, so disable this for
                long-lived contexts
        """
        self._package_name = package_name
        self.registry = registry
        self.authority = authority
        self.transport = transport
        self.record_broadcasts = record_broadcasts
        self.sent_broadcasts: List[HandshakeRequest] = []

    @property
    def package_name(self) -> str:
        return self._package_name

    def mint_capability_token(self) -> CapabilityToken:
        return self.authority.mint(self._package_name)

    def resolve_token_creator(self, token: CapabilityToken) -> Optional[str]:
        return self.authority.creator_of(token)

    def send_broadcast(self, request: HandshakeRequest) -> None:
        if self.record_broadcasts:
            self.sent_broadcasts.append(request)
        logger.info(f"Broadcast {request.action} from {self._package_name} to {request.target_package}")
        if self.transport is not None:
            self.transport(request)

    def query_broadcast_receivers(self, package_name: str, action: str) -> List[ReceiverInfo]:
        return self.registry.query_broadcast_receivers(package_name, action)

    def get_package_info(self, package_name: str) -> PackageInfo:
        return self.registry.get_package_info(package_name)
