"""
Tests for the otp-handshake CLI
"""

from click.testing import CliRunner

from otp_handshake.cli import main


class TestDemoCommand:
    """Test the local round-trip demo"""

    def test_demo_delivers_code(self):
        result = CliRunner().invoke(main, ['demo', '--code', '123456'])

        assert result.exit_code == 0
        assert "HANDSHAKE_SUPPORTED=true" in result.output
        assert "SENT target=com.whatsapp " in result.output
        assert "SENT target=com.whatsapp.w4b " in result.output
        assert "DEMO_RESULT=CODE_RECEIVED" in result.output
        assert "OTP_CODE=123456" in result.output

    def test_demo_business_counterparty(self):
        result = CliRunner().invoke(main, ['demo', '--counterparty', 'business'])

        assert result.exit_code == 0
        assert "OTP_CODE=567567" in result.output

    def test_demo_rejects_forged_reply(self):
        result = CliRunner().invoke(main, ['demo', '--forge'])

        assert result.exit_code == 0
        assert "DEMO_RESULT=REJECTED" in result.output
        assert "OTP_ERROR=untrusted_source" in result.output
        assert "OTP_CODE" not in result.output

    def test_demo_respects_sdk_version_setting(self):
        result = CliRunner().invoke(
            main, ['demo'], env={'OTP_HANDSHAKE_SEND_SDK_VERSION': 'false'}
        )

        assert result.exit_code == 0
        assert "sdk_version=None" in result.output
