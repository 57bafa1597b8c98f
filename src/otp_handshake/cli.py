#!/usr/bin/env python3
"""
otp-handshake CLI

Provides:
- demo: Run a local handshake and OTP delivery round trip
"""

import logging
import sys

import click

from .capability import TokenAuthority
from .config import HandshakeConfig
from .enums import CounterpartyIdentity
from .handshake_handler import HandshakeHandler
from .incoming_handler import IncomingMessageHandler
from .messages import OTP_REQUESTED_ACTION, create_otp_code_message
from .platform import LocalPlatformContext, PackageRegistry
from .request_builder import DISTRIBUTION_NAME

UNTRUSTED_PACKAGE = "com.not.trusted"


@click.group()
@click.version_option(package_name=DISTRIBUTION_NAME, prog_name="otp-handshake")
@click.option('--verbose', '-v', is_flag=True, help='Verbose logging')
def main(verbose: bool):
    """OTP autofill handshake tooling"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr
    )


@main.command()
@click.option('--host-package', default='com.example.app', show_default=True, help='Requesting application package')
@click.option('--counterparty', type=click.Choice(['consumer', 'business']), default='consumer', show_default=True)
@click.option('--code', default='567567', show_default=True, help='OTP code the counterparty replies with')
@click.option('--forge', is_flag=True, help=f'Reply from {UNTRUSTED_PACKAGE} instead of the counterparty')
def demo(host_package: str, counterparty: str, code: str, forge: bool):
    """Run a local handshake and OTP delivery round trip"""
    registry = PackageRegistry()
    authority = TokenAuthority()
    identity = CounterpartyIdentity[counterparty.upper()]

    registry.install(host_package)
    registry.install(identity.package_name)
    registry.register_receiver(identity.package_name, OTP_REQUESTED_ACTION)

    host = LocalPlatformContext(host_package, registry, authority, record_broadcasts=False)
    config = HandshakeConfig.from_env()
    handler = HandshakeHandler(send_sdk_version=config.send_sdk_version)

    click.echo(f"HANDSHAKE_SUPPORTED={str(handler.is_handshake_supported(host)).lower()}")
    for request in handler.send_handshake(host):
        click.echo(f"SENT target={request.target_package} sdk_version={request.sdk_version}")

    sender_package = UNTRUSTED_PACKAGE if forge else identity.package_name
    sender = LocalPlatformContext(sender_package, registry, authority, record_broadcasts=False)
    reply = create_otp_code_message(sender.mint_capability_token(), code)

    def on_code(received: str):
        click.echo("✅ DEMO_RESULT=CODE_RECEIVED")
        click.echo(f"OTP_CODE={received}")

    def on_error(kind, cause):
        click.echo("❌ DEMO_RESULT=REJECTED")
        click.echo(f"OTP_ERROR={kind.value}")

    IncomingMessageHandler(host).process_otp_code(reply, on_code, on_error)


if __name__ == '__main__':
    main()
