from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

# --------------------------------
# 設定値

# OAuth2 クライアントに渡す固定のリダイレクト先（参照はされない）
OAUTH_REDIRECT_URI = "https://developers.google.com/oauthplayground"

# リフレッシュトークンからアクセストークンを取得するエンドポイント
GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"

# 既定のメールサービス
DEFAULT_MAIL_SERVICE = "gmail"

TRUTHY_VALUES = {"1", "true", "yes", "on"}
# --------------------------------


@dataclass
class Settings:
    client_id: str
    client_secret: str
    refresh_token: str
    email: str
    access_token: str | None = None
    mail_service: str = DEFAULT_MAIL_SERVICE
    refresh_access_token: bool = False

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> "Settings":
        e = env if env is not None else os.environ

        def require(name: str) -> str:
            value = e.get(name)
            if value is None or not value.strip():
                raise ValueError(f"Environment variable {name} is required.")
            return value.strip()

        def optional(name: str) -> str | None:
            value = e.get(name)
            if value is None or not value.strip():
                return None
            return value.strip()

        client_id = require("CLIENT_ID")
        client_secret = require("CLIENT_SECRET")
        refresh_token = require("REFRESH_TOKEN")
        email = require("EMAIL")
        refresh_access_token = (optional("REFRESH_ACCESS_TOKEN") or "").lower() in TRUTHY_VALUES
        access_token = optional("ACCESS_TOKEN") if refresh_access_token else require("ACCESS_TOKEN")

        return Settings(
            client_id=client_id,
            client_secret=client_secret,
            refresh_token=refresh_token,
            email=email,
            access_token=access_token,
            mail_service=optional("MAIL_SERVICE") or DEFAULT_MAIL_SERVICE,
            refresh_access_token=refresh_access_token,
        )
