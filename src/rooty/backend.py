"""HTTP transport for the hosted backend: remote procedures, tables, and auth."""
from __future__ import annotations

import json
import logging
from typing import Callable

import requests

from rooty import db
from rooty.errors import AuthError, BackendError, TransportError
from rooty.models import Profile, User

logger = logging.getLogger(__name__)

SESSION_STORAGE_KEY = "rooty.auth.session"


class BackendClient:
    def __init__(self, base_url: str, api_key: str, timeout: float = 15.0,
                 session: requests.Session | None = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.access_token: str | None = None
        self.http = session or requests.Session()

    def _headers(self, token: str | None = None) -> dict:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {token or self.access_token or self.api_key}",
            "Content-Type": "application/json",
        }

    def _request(self, method: str, path: str, token: str | None = None, **kwargs):
        url = f"{self.base_url}{path}"
        try:
            resp = self.http.request(method, url, headers=self._headers(token), timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise TransportError(f"Network error. Please check your connection and try again. ({e})") from e
        try:
            payload = resp.json() if resp.content else None
        except ValueError:
            payload = resp.text or None
        if resp.status_code >= 400:
            raise BackendError.from_payload(payload, status=resp.status_code)
        return payload

    def rpc(self, name: str, params: dict | None = None):
        """Invoke a remote procedure and return its decoded result."""
        logger.debug("rpc %s %s", name, params)
        return self._request("POST", f"/rest/v1/rpc/{name}", json=params or {})

    def select(self, table: str, **filters) -> list:
        params = {"select": "*"}
        params.update({column: f"eq.{value}" for column, value in filters.items()})
        return self._request("GET", f"/rest/v1/{table}", params=params) or []

    def insert(self, table: str, rows, token: str | None = None) -> None:
        self._request(
            "POST", f"/rest/v1/{table}", token=token, json=rows,
        )

    def auth(self, method: str, path: str, **kwargs):
        return self._request(method, f"/auth/v1/{path}", **kwargs)


class AuthClient:
    """Current user/session, sign-in/up/out, and change notifications."""

    def __init__(self, backend: BackendClient, db_path: str) -> None:
        self.backend = backend
        self.db_path = db_path
        self.user: User | None = None
        self.profile: Profile | None = None
        self._listeners: list[Callable] = []
        self._restore()

    @property
    def is_admin(self) -> bool:
        return self.profile is not None and self.profile.role == "admin"

    @property
    def is_learner(self) -> bool:
        return self.profile is not None and self.profile.role == "learner"

    def on_change(self, callback: Callable) -> Callable[[], None]:
        """Subscribe to sign-in/sign-out events. Returns an unsubscribe function."""
        self._listeners.append(callback)

        def unsubscribe():
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _notify(self, event: str) -> None:
        for callback in list(self._listeners):
            callback(event, self.user)

    def _restore(self) -> None:
        try:
            stored = db.get_item(self.db_path, SESSION_STORAGE_KEY)
            if not stored:
                return
            data = json.loads(stored)
            self._set_session(data["access_token"], data["user"])
        except Exception as e:
            logger.warning("Could not restore saved session: %s", e)
            self.user = None
            self.backend.access_token = None

    def _set_session(self, access_token: str, user: dict) -> None:
        self.backend.access_token = access_token
        self.user = User(id=user["id"], email=user.get("email") or "", metadata=user.get("user_metadata") or {})
        self.profile = self._fetch_profile(self.user.id)

    def _save_session(self, access_token: str, user: dict) -> None:
        try:
            db.set_item(self.db_path, SESSION_STORAGE_KEY, json.dumps({"access_token": access_token, "user": user}))
        except Exception as e:
            logger.warning("Could not persist session: %s", e)

    def _fetch_profile(self, user_id: str) -> Profile | None:
        try:
            rows = self.backend.select("profiles", id=user_id)
        except (BackendError, TransportError) as e:
            logger.error("Error fetching profile: %s", e)
            return None
        if not rows:
            return None
        row = rows[0]
        return Profile(id=row["id"], role=row.get("role") or "learner", display_name=row.get("display_name"))

    def sign_in(self, email: str, password: str) -> None:
        try:
            data = self.backend.auth(
                "POST", "token", params={"grant_type": "password"},
                json={"email": email, "password": password},
            )
        except BackendError as e:
            raise AuthError(e.message) from e
        if not data or not data.get("access_token"):
            raise AuthError("Sign-in failed: no session returned")
        self._set_session(data["access_token"], data["user"])
        self._save_session(data["access_token"], data["user"])
        logger.info("Signed in as %s", email)
        self._notify("SIGNED_IN")

    def sign_up(self, email: str, password: str, display_name: str | None = None) -> None:
        try:
            data = self.backend.auth("POST", "signup", json={"email": email, "password": password})
        except BackendError as e:
            raise AuthError(e.message) from e
        user = (data or {}).get("user") or (data if data and data.get("id") else None)
        if not user:
            raise AuthError("No user returned")
        token = (data or {}).get("access_token")
        try:
            self.backend.insert(
                "profiles",
                {"id": user["id"], "role": "learner", "display_name": display_name or email.split("@")[0]},
                token=token,
            )
        except (BackendError, TransportError) as e:
            logger.error("Error creating profile: %s", e)
        if token:
            self._set_session(token, user)
            self._save_session(token, user)
            self._notify("SIGNED_IN")

    def sign_out(self) -> None:
        if self.backend.access_token:
            try:
                self.backend.auth("POST", "logout")
            except (BackendError, TransportError) as e:
                logger.warning("Sign-out request failed: %s", e)
        self.backend.access_token = None
        self.user = None
        self.profile = None
        try:
            db.remove_item(self.db_path, SESSION_STORAGE_KEY)
        except Exception as e:
            logger.warning("Could not clear saved session: %s", e)
        self._notify("SIGNED_OUT")
