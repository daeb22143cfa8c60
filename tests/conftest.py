# Shared fixtures.
# Created: 2026-10-12

import pytest

from wechat_connect.config import Settings


@pytest.fixture
def make_settings():
    def _make(**overrides):
        values = dict(
            wechat_app_id="wx_test_app",
            wechat_app_secret="s3cret",
            wechat_redirect_uri="http://localhost:3000/callback",
            wechat_token="t",
            wechat_login_url="https://example.com/login",
            dev_mode=False,
        )
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _make
