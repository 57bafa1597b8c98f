"""
Tests for HandshakeConfig
Tests defaults, file and environment overrides
"""

import json

import pytest

from otp_handshake.config import HandshakeConfig


class TestHandshakeConfig:
    """Test configuration loading"""

    def test_defaults(self):
        assert HandshakeConfig.from_env({}).send_sdk_version is True

    def test_environment_disables_version(self):
        config = HandshakeConfig.from_env({'OTP_HANDSHAKE_SEND_SDK_VERSION': 'false'})

        assert config.send_sdk_version is False

    def test_environment_truthy_values(self):
        for value in ('true', '1', 'yes', 'ON'):
            config = HandshakeConfig.from_env({'OTP_HANDSHAKE_SEND_SDK_VERSION': value})
            assert config.send_sdk_version is True

    def test_config_file(self, tmp_path):
        """Test values loaded from a JSON file"""
        config_file = tmp_path / "otp_handshake.json"
        config_file.write_text(json.dumps({'send_sdk_version': False}))

        config = HandshakeConfig.from_env({'OTP_HANDSHAKE_CONFIG': str(config_file)})

        assert config.send_sdk_version is False

    def test_environment_overrides_file(self, tmp_path):
        config_file = tmp_path / "otp_handshake.json"
        config_file.write_text(json.dumps({'send_sdk_version': False}))

        config = HandshakeConfig.from_env({
            'OTP_HANDSHAKE_CONFIG': str(config_file),
            'OTP_HANDSHAKE_SEND_SDK_VERSION': 'true',
        })

        assert config.send_sdk_version is True

    def test_unreadable_config_file(self, tmp_path, caplog):
        """Test that a broken file falls back to defaults"""
        config_file = tmp_path / "otp_handshake.json"
        config_file.write_text("{not json")

        config = HandshakeConfig.from_env({'OTP_HANDSHAKE_CONFIG': str(config_file)})

        assert config.send_sdk_version is True
        assert "Failed to load handshake configuration" in caplog.text

    def test_missing_config_file(self, tmp_path):
        config = HandshakeConfig.from_env({'OTP_HANDSHAKE_CONFIG': str(tmp_path / "absent.json")})

        assert config == HandshakeConfig()

    @pytest.mark.parametrize("content", ["5", "[false]", '"send_sdk_version"', "null"])
    def test_config_file_not_an_object(self, tmp_path, caplog, content):
        """Test that a file holding a non-object JSON value is logged and ignored"""
        config_file = tmp_path / "otp_handshake.json"
        config_file.write_text(content)

        config = HandshakeConfig.from_env({'OTP_HANDSHAKE_CONFIG': str(config_file)})

        assert config == HandshakeConfig()
        assert "Failed to load handshake configuration" in caplog.text

    @pytest.mark.parametrize("value, expected", [
        ("false", False),
        ("off", False),
        ("true", True),
        (" Yes ", True),
    ])
    def test_config_file_string_flags(self, tmp_path, value, expected):
        """Test that string flags in the file are read like environment values"""
        config_file = tmp_path / "otp_handshake.json"
        config_file.write_text(json.dumps({'send_sdk_version': value}))

        config = HandshakeConfig.from_env({'OTP_HANDSHAKE_CONFIG': str(config_file)})

        assert config.send_sdk_version is expected

    def test_config_file_wrong_value_type(self, tmp_path, caplog):
        """Test that a non-boolean flag leaves the default in place"""
        config_file = tmp_path / "otp_handshake.json"
        config_file.write_text(json.dumps({'send_sdk_version': 0}))

        config = HandshakeConfig.from_env({'OTP_HANDSHAKE_CONFIG': str(config_file)})

        assert config.send_sdk_version is True
        assert "Failed to load handshake configuration" in caplog.text
