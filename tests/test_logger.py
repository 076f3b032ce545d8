"""
Tests for the logger
"""

from amazon_appstore.logger import Logger, redact


class TestLogger:
    """Tests for Logger"""

    def test_debug_disabled_by_default(self, monkeypatch, capsys):
        """Should drop debug messages unless APPSTORE_DEBUG_LOGGING is true"""
        monkeypatch.delenv("APPSTORE_DEBUG_LOGGING", raising=False)
        Logger().debugf("hidden %s", "message")
        assert capsys.readouterr().out == ""

    def test_debug_enabled(self, monkeypatch, capsys):
        monkeypatch.setenv("APPSTORE_DEBUG_LOGGING", "TRUE")
        logger = Logger()
        logger.debugf("GET %s returned %d", "https://x/y", 200)

        assert logger.debug_enabled is True
        assert capsys.readouterr().out == "[DEBUG] GET https://x/y returned 200\n"

    def test_levels_and_streams(self, capsys):
        """Should write info to stdout and warnings and errors to stderr"""
        logger = Logger()
        logger.infof("info %s", "a")
        logger.warnf("warn %v", "b")
        logger.errorf("error %+v", {"k": "v"})

        captured = capsys.readouterr()
        assert captured.out == "[INFO] info a\n"
        assert captured.err == '[WARN] warn b\n[ERROR] error {"k": "v"}\n'

    def test_secrets_are_redacted(self, capsys):
        Logger().infof("headers: %s", {"Authorization": "Bearer abc.def"})
        assert "abc.def" not in capsys.readouterr().out


class TestRedact:
    """Tests for redact"""

    def test_bearer_token(self):
        assert redact("Authorization: Bearer abc123") == "Authorization: Bearer ***"

    def test_form_encoded_secret(self):
        assert (
            redact("client_id=X&client_secret=Y&grant_type=client_credentials")
            == "client_id=X&client_secret=***&grant_type=client_credentials"
        )

    def test_json_access_token(self):
        assert redact('{"access_token": "abc", "expires_in": 3600}') == (
            '{"access_token": "***", "expires_in": 3600}'
        )
