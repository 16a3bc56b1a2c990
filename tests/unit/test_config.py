from kms_sdk.config import KMSSDKSettings, configure_settings, get_settings


class TestKMSSDKSettings:
    def teardown_method(self):
        configure_settings()

    def test_defaults(self, monkeypatch):
        for name in ("KMS_SDK_CONNECT_TIMEOUT", "KMS_SDK_READ_TIMEOUT", "KMS_SDK_MAX_POOL_CONNECTIONS"):
            monkeypatch.delenv(name, raising=False)
        settings = KMSSDKSettings()
        assert settings.connect_timeout == 10
        assert settings.read_timeout == 30
        assert settings.max_pool_connections == 10

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("KMS_SDK_READ_TIMEOUT", "5")
        assert KMSSDKSettings().read_timeout == 5

    def test_configure_settings_refreshes_cache(self):
        before = get_settings()
        configure_settings(connect_timeout=2)
        after = get_settings()

        assert after is not before
        assert after.connect_timeout == 2
        assert get_settings() is after
