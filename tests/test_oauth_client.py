# Tests for oauth/client.py and oauth/models.py
# Created: 2026-10-12

import json
from unittest.mock import AsyncMock, MagicMock, patch
from urllib.parse import parse_qs, urlsplit

import httpx
import pytest

from wechat_connect.errors import DecodeError, ProviderError, TransportError
from wechat_connect.oauth.client import WeChatOAuthClient, decode_response
from wechat_connect.oauth.models import (
    AccessGrant,
    OAuthCredentials,
    ProfileInfo,
    ProviderErrorBody,
)

CREDS = OAuthCredentials(
    app_id="wx_test_app",
    app_secret="s3cret",
    redirect_uri="http://localhost:3000/callback?next=/home",
)

GRANT_JSON = {
    "access_token": "ACCESS",
    "expires_in": 7200,
    "refresh_token": "REFRESH",
    "openid": "OPENID",
    "scope": "snsapi_userinfo",
}

PROFILE_JSON = {
    "openid": "OPENID",
    "nickname": "张三",
    "sex": 2,
    "province": "广东",
    "city": "深圳",
    "country": "中国",
    "headimgurl": "https://thirdwx.qlogo.cn/avatar.png",
    "privilege": ["PRIVILEGE1", "PRIVILEGE2"],
    "unionid": "UNIONID",
}


def _client(handler, requests=None):
    def _record(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        return handler(request)

    http = httpx.AsyncClient(transport=httpx.MockTransport(_record))
    return WeChatOAuthClient(CREDS, http_client=http)


def _json(payload, status=200):
    return lambda request: httpx.Response(status, content=json.dumps(payload).encode("utf-8"))


# ---------------------------------------------------------------------------
# Authorization URL
# ---------------------------------------------------------------------------


class TestAuthorizationUrl:
    def test_exact_format(self):
        url = WeChatOAuthClient(CREDS).build_authorization_url("STATE123")
        assert url == (
            "https://open.weixin.qq.com/connect/oauth2/authorize"
            "?appid=wx_test_app"
            "&redirect_uri=http%3A%2F%2Flocalhost%3A3000%2Fcallback%3Fnext%3D%2Fhome"
            "&response_type=code&scope=snsapi_userinfo&state=STATE123#wechat_redirect"
        )

    def test_contains_required_parts(self):
        url = WeChatOAuthClient(CREDS).build_authorization_url("abc-_XYZ")
        assert "appid=wx_test_app" in url
        assert "state=abc-_XYZ" in url
        assert "snsapi_userinfo" in url
        assert CREDS.redirect_uri not in url
        assert url.endswith("#wechat_redirect")


# ---------------------------------------------------------------------------
# Two-stage decode
# ---------------------------------------------------------------------------


class TestDecodeResponse:
    def test_success_variant(self):
        result = decode_response(json.dumps(GRANT_JSON), AccessGrant)
        assert isinstance(result, AccessGrant)
        assert result.subject_id == "OPENID"

    def test_error_variant(self):
        result = decode_response('{"errcode":40029,"errmsg":"invalid code"}', AccessGrant)
        assert isinstance(result, ProviderErrorBody)
        assert result.errcode == 40029
        assert result.errmsg == "invalid code"

    def test_zero_errcode_with_full_payload_is_success(self):
        payload = dict(GRANT_JSON, errcode=0, errmsg="ok")
        assert isinstance(decode_response(json.dumps(payload), AccessGrant), AccessGrant)

    def test_zero_errcode_alone_is_error_variant(self):
        result = decode_response('{"errcode":0,"errmsg":"ok"}', AccessGrant)
        assert isinstance(result, ProviderErrorBody)
        assert result.errcode == 0
        assert result.errmsg == "ok"

    def test_errcode_without_errmsg(self):
        result = decode_response('{"errcode":40029}', AccessGrant)
        assert result == ProviderErrorBody(errcode=40029, errmsg="")

    def test_non_integer_errcode_is_decode_error(self):
        with pytest.raises(DecodeError):
            decode_response('{"errcode":"bad","errmsg":"x"}', AccessGrant)

    def test_invalid_json(self):
        with pytest.raises(DecodeError):
            decode_response("<html>oops</html>", AccessGrant)

    def test_non_object(self):
        with pytest.raises(DecodeError):
            decode_response("[1, 2]", AccessGrant)

    def test_missing_fields(self):
        with pytest.raises(DecodeError):
            decode_response('{"access_token": "x"}', AccessGrant)


# ---------------------------------------------------------------------------
# Remote calls
# ---------------------------------------------------------------------------


class TestExchangeCode:
    async def test_success(self):
        requests = []
        client = _client(_json(GRANT_JSON), requests)

        grant = await client.exchange_code("CODE")

        assert grant.access_token == "ACCESS"
        assert grant.expires_in == 7200
        assert grant.refresh_token == "REFRESH"
        assert grant.openid == "OPENID"
        assert grant.scope == "snsapi_userinfo"

        (req,) = requests
        assert req.method == "GET"
        assert req.url.path == "/sns/oauth2/access_token"
        params = parse_qs(urlsplit(str(req.url)).query)
        assert params == {
            "appid": ["wx_test_app"],
            "secret": ["s3cret"],
            "code": ["CODE"],
            "grant_type": ["authorization_code"],
        }

    async def test_provider_error(self):
        client = _client(_json({"errcode": 40163, "errmsg": "code been used"}))
        with pytest.raises(ProviderError) as excinfo:
            await client.exchange_code("USED")
        assert excinfo.value.code == 40163
        assert excinfo.value.message == "code been used"

    async def test_zero_errcode_without_grant_is_provider_error(self):
        client = _client(_json({"errcode": 0, "errmsg": "ok"}))
        with pytest.raises(ProviderError) as excinfo:
            await client.exchange_code("CODE")
        assert excinfo.value.code == 0
        assert excinfo.value.message == "ok"

    async def test_garbage_body(self):
        client = _client(lambda request: httpx.Response(200, content=b"not json"))
        with pytest.raises(DecodeError):
            await client.exchange_code("CODE")

    async def test_http_status_error_hides_secret(self):
        client = _client(lambda request: httpx.Response(500, content=b""))
        with pytest.raises(TransportError) as excinfo:
            await client.exchange_code("CODE")
        assert "500" in str(excinfo.value)
        assert "s3cret" not in str(excinfo.value)

    async def test_connection_error(self):
        def _fail(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = _client(_fail)
        with pytest.raises(TransportError):
            await client.exchange_code("CODE")


class TestFetchProfile:
    async def test_success(self):
        requests = []
        client = _client(_json(PROFILE_JSON), requests)

        profile = await client.fetch_profile("ACCESS", "OPENID")

        assert profile.subject_id == "OPENID"
        assert profile.display_name == "张三"
        assert profile.gender == "female"
        assert profile.province == "广东"
        assert profile.avatar_url.endswith("avatar.png")
        assert profile.privilege == ["PRIVILEGE1", "PRIVILEGE2"]
        assert profile.unionid == "UNIONID"

        (req,) = requests
        assert req.url.path == "/sns/userinfo"
        params = parse_qs(urlsplit(str(req.url)).query)
        assert params == {"access_token": ["ACCESS"], "openid": ["OPENID"], "lang": ["zh_CN"]}

    async def test_without_unionid(self):
        payload = {k: v for k, v in PROFILE_JSON.items() if k != "unionid"}
        profile = await _client(_json(payload)).fetch_profile("ACCESS", "OPENID")
        assert profile.unionid is None

    async def test_provider_error(self):
        client = _client(_json({"errcode": 40001, "errmsg": "invalid credential"}))
        with pytest.raises(ProviderError) as excinfo:
            await client.fetch_profile("BAD", "OPENID")
        assert excinfo.value.code == 40001


class TestRefreshGrant:
    async def test_success(self):
        requests = []
        client = _client(_json(dict(GRANT_JSON, access_token="NEW")), requests)

        grant = await client.refresh_grant("REFRESH")

        assert grant.access_token == "NEW"
        (req,) = requests
        assert req.url.path == "/sns/oauth2/refresh_token"
        params = parse_qs(urlsplit(str(req.url)).query)
        assert params == {
            "appid": ["wx_test_app"],
            "grant_type": ["refresh_token"],
            "refresh_token": ["REFRESH"],
        }

    async def test_expired_refresh_token(self):
        client = _client(_json({"errcode": 42002, "errmsg": "refresh_token expired"}))
        with pytest.raises(ProviderError):
            await client.refresh_grant("OLD")


async def test_default_transport_opens_own_client():
    """Without an injected client, each call opens an httpx.AsyncClient."""
    mock_resp = MagicMock()
    mock_resp.raise_for_status = MagicMock()
    mock_resp.content = json.dumps(GRANT_JSON).encode("utf-8")

    with patch("httpx.AsyncClient") as mock_client_cls:
        mock_client = AsyncMock()
        mock_client.get.return_value = mock_resp
        mock_client.__aenter__ = AsyncMock(return_value=mock_client)
        mock_client.__aexit__ = AsyncMock(return_value=False)
        mock_client_cls.return_value = mock_client

        grant = await WeChatOAuthClient(CREDS, timeout=3.0).exchange_code("CODE")

    assert grant.openid == "OPENID"
    mock_client_cls.assert_called_once_with(timeout=3.0)
    mock_client.get.assert_awaited_once()


class TestProfileInfo:
    @pytest.mark.parametrize("sex,gender", [(0, "unknown"), (1, "male"), (2, "female"), (9, "unknown")])
    def test_gender(self, sex, gender):
        profile = ProfileInfo(openid="o", nickname="n", sex=sex)
        assert profile.gender == gender

    def test_frozen(self):
        profile = ProfileInfo(openid="o", nickname="n")
        with pytest.raises(Exception):
            profile.nickname = "changed"
