"""
Bearer-token authentication against the ERP API.

Handles:
- Pre-issued token (KGC_API_TOKEN) or email/password login
- Token expiry with a safety margin
- Automatic refresh via refresh_token
"""

import getpass
import logging
import time

import requests

from erp_dashboard.config import (
    API_BASE_URL,
    API_EMAIL,
    API_PASSWORD,
    API_TOKEN,
    LOGIN_PATH,
    REFRESH_PATH,
    TOKEN_EXPIRY_MARGIN,
)

logger = logging.getLogger(__name__)


def _unwrap(payload: dict) -> dict:
    """Responses come as {data: {...}}; tolerate a bare object too."""
    if isinstance(payload, dict) and isinstance(payload.get("data"), dict):
        return payload["data"]
    return payload or {}


class KgcAuth:
    def __init__(
        self,
        email: str = None,
        password: str = None,
        token: str = None,
        base_url: str = None,
        session: requests.Session = None,
    ):
        self.email = email or API_EMAIL
        self.password = password or API_PASSWORD
        self.base_url = (base_url or API_BASE_URL).rstrip("/")
        self.session = session or requests.Session()

        self.access_token: str | None = token or API_TOKEN
        self.refresh_token: str | None = None
        # A pre-issued token has no known expiry; trust it until a 401
        self.expires_at: float = float("inf") if self.access_token else 0

        if not self.access_token and not (self.email and self.password):
            raise ValueError(
                "KGC_API_TOKEN or KGC_API_EMAIL + KGC_API_PASSWORD is required. "
                "Set them in .env or st.secrets"
            )

    # ─── Valid token (main entry point) ───

    def get_access_token(self) -> str:
        """Return a valid access_token, refreshing or logging in when needed."""
        if self.access_token and time.time() < self.expires_at:
            return self.access_token

        if self.refresh_token:
            try:
                self.refresh()
                return self.access_token
            except requests.exceptions.HTTPError:
                logger.warning("token refresh rejected, logging in again")

        self.login()
        return self.access_token

    def invalidate(self):
        """Forget the current token (after a 401)."""
        self.access_token = None
        self.expires_at = 0

    # ─── Flows ───

    def login(self) -> dict:
        if not (self.email and self.password):
            raise ValueError("Login needs KGC_API_EMAIL and KGC_API_PASSWORD.")

        response = self.session.post(
            f"{self.base_url}{LOGIN_PATH}",
            json={"email": self.email, "password": self.password},
        )
        response.raise_for_status()
        token_data = _unwrap(response.json())
        self._save_token(token_data)
        logger.info("logged in to ERP API as %s", self.email)
        return token_data

    def refresh(self):
        if not self.refresh_token:
            raise ValueError("No refresh_token available.")

        response = self.session.post(
            f"{self.base_url}{REFRESH_PATH}",
            json={"refreshToken": self.refresh_token},
        )
        response.raise_for_status()
        self._save_token(_unwrap(response.json()))

    def _save_token(self, token_data: dict):
        self.access_token = token_data["accessToken"]
        self.refresh_token = token_data.get("refreshToken", self.refresh_token)
        expires_in = token_data.get("expiresIn", 3600)
        self.expires_at = time.time() + expires_in - TOKEN_EXPIRY_MARGIN


# ─── CLI entry point ───

if __name__ == "__main__":
    email = API_EMAIL or input("Email: ").strip()
    password = API_PASSWORD or getpass.getpass("Jelszó: ")
    auth = KgcAuth(email=email, password=password)
    data = auth.login()
    print("Token obtained. Put it in .env as KGC_API_TOKEN:")
    print(data["accessToken"])
