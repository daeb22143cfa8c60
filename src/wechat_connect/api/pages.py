# HTML pages for the login flow.
# Created: 2026-10-12

from __future__ import annotations

from html import escape

from wechat_connect.oauth.models import ProfileInfo

_BASE_HTML = """<!DOCTYPE html>
<html lang="zh-CN"><head><meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{title}</title>
<style>
body {{ font-family: system-ui; max-width: 480px; margin: 40px auto; padding: 20px; }}
.btn {{ display: inline-block; padding: 10px 24px; border-radius: 6px; font-size: 16px;
  background: #07c160; color: white; text-decoration: none; }}
.btn:hover {{ background: #06ad56; }}
.card {{ background: #f3f4f6; padding: 16px; border-radius: 8px; margin: 16px 0; }}
.avatar {{ width: 80px; height: 80px; border-radius: 50%; }}
.error {{ color: #b91c1c; }}
.dev {{ background: #fef3c7; padding: 8px 12px; border-radius: 6px; font-size: 14px; }}
dt {{ font-weight: 600; margin-top: 8px; }}
</style></head><body>
{body}
</body></html>"""

_GENDER_LABELS = {"male": "男", "female": "女", "unknown": "未知"}


def _page(title: str, body: str) -> str:
    return _BASE_HTML.format(title=escape(title), body=body)


def render_login_page(auth_url: str, dev_mode: bool = False) -> str:
    notice = (
        '<p class="dev">开发模式：登录将使用模拟用户数据，不会连接微信。</p>' if dev_mode else ""
    )
    body = (
        "<h2>微信登录</h2>"
        f"{notice}"
        "<p>使用微信账号登录以继续。</p>"
        f'<p><a class="btn" href="{escape(auth_url)}">使用微信登录</a></p>'
    )
    return _page("微信登录", body)


def render_profile_page(profile: ProfileInfo) -> str:
    privileges = ", ".join(escape(p) for p in profile.privilege) or "无"
    unionid = escape(profile.unionid) if profile.unionid else "无"
    avatar = (
        f'<img class="avatar" src="{escape(profile.avatar_url)}" alt="avatar">'
        if profile.avatar_url
        else ""
    )
    body = (
        "<h2>登录成功</h2>"
        f'<div class="card">{avatar}<dl>'
        f"<dt>昵称</dt><dd>{escape(profile.display_name)}</dd>"
        f"<dt>OpenID</dt><dd>{escape(profile.openid)}</dd>"
        f"<dt>UnionID</dt><dd>{unionid}</dd>"
        f"<dt>性别</dt><dd>{_GENDER_LABELS[profile.gender]}</dd>"
        f"<dt>地区</dt><dd>{escape(profile.country)} {escape(profile.province)} "
        f"{escape(profile.city)}</dd>"
        f"<dt>特权</dt><dd>{privileges}</dd>"
        "</dl></div>"
        '<p><a href="/">返回首页</a></p>'
    )
    return _page("用户信息", body)


def render_error_page(message: str) -> str:
    body = (
        "<h2>出错了</h2>"
        f'<p class="error">{escape(message)}</p>'
        '<p><a href="/">返回首页</a></p>'
    )
    return _page("错误", body)
