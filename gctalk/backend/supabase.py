"""
Hosted backend client speaking the Supabase REST surface.

Auth goes through GoTrue (``/auth/v1``), tables through PostgREST
(``/rest/v1``). The feed is one embedded-resource query:

    feedback?select=*,profiles(full_name,class),
        comments(id,content,created_at,profiles(full_name,class))
        &order=created_at.desc

Row-level security on the service enforces that ``user_id`` on inserts
matches the bearer token's user.
"""

import logging
from typing import Any

import httpx

from gctalk.auth.session import Identity, Session
from gctalk.auth.store import SessionStore
from gctalk.backend.base import AuthenticationError, BackendClient, BackendError
from gctalk.backend.http_client import HTTPClient, HTTPClientError, RetryConfig
from gctalk.config.settings import Settings, get_settings
from gctalk.feed.schemas import Feedback, NewComment, NewFeedback

logger = logging.getLogger(__name__)

PROFILE_COLUMNS = "profiles(full_name,class)"
FEED_SELECT = (
    f"*,{PROFILE_COLUMNS},"
    f"comments(id,content,created_at,{PROFILE_COLUMNS})"
)
FEED_ORDER = "created_at.desc"


class SupabaseBackend(BackendClient):
    """
    ``BackendClient`` over HTTP.

    Usage:
        async with SupabaseBackend(store=SessionStore(path)) as backend:
            feed = await backend.fetch_feed()
    """

    def __init__(
        self,
        settings: Settings | None = None,
        store: SessionStore | None = None,
        http_client: HTTPClient | None = None,
    ) -> None:
        """
        Args:
            settings: Connection settings. Uses cached settings if None.
            store: Optional persistence for the session between runs.
            http_client: Optional preconfigured client (tests).
        """
        self._settings = settings or get_settings()
        if not self._settings.supabase_anon_key:
            raise ValueError("SUPABASE_ANON_KEY is not configured")

        self._anon_key = self._settings.supabase_anon_key
        self._store = store
        self._session: Session | None = None
        self._restored = False
        self._http = http_client or HTTPClient(
            base_url=self._settings.rest_base_url,
            retry_config=RetryConfig(
                max_retries=self._settings.max_http_retries,
                max_backoff_seconds=self._settings.max_backoff_seconds,
            ),
            timeout=self._settings.http_timeout_seconds,
        )

    async def __aenter__(self) -> "SupabaseBackend":
        await self._http.open()
        return self

    async def close(self) -> None:
        await self._http.close()

    # ── Auth ────────────────────────────────────────────

    async def get_session(self) -> Session | None:
        """
        Return the held session, restoring it from the store once and
        refreshing it when the access token has expired.
        """
        if not self._restored:
            self._restored = True
            if self._session is None and self._store is not None:
                self._session = self._store.load()

        session = self._session
        if session is None or not session.is_expired():
            return session

        try:
            refreshed = await self._refresh(session)
        except AuthenticationError as e:
            logger.info("Stored session could not be refreshed: %s", e)
            self._replace_session(None)
            return None

        self._replace_session(refreshed)
        return refreshed

    async def get_user(self) -> Identity | None:
        session = await self.get_session()
        if session is None:
            return None

        try:
            response = await self._call(
                "GET", "/auth/v1/user", headers=self._headers(session.access_token)
            )
        except AuthenticationError:
            # Rejected token: drop it locally as well
            self._replace_session(None)
            raise
        return Identity.from_dict(response.json())

    async def sign_in_with_password(self, email: str, password: str) -> Session:
        response = await self._call(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "password"},
            headers=self._headers(),
            json_body={"email": email, "password": password},
        )
        session = Session.from_token_response(response.json())
        self._restored = True
        self._replace_session(session)
        logger.info("Signed in as %s", session.identity.id)
        return session

    async def sign_out(self) -> None:
        """
        End the session on the service and drop it locally.

        A token the service already rejects (401/403) or a session it no
        longer knows (404) still counts as signed out. Other failures
        propagate and the session is kept.
        """
        session = await self.get_session()
        if session is not None:
            try:
                await self._call(
                    "POST", "/auth/v1/logout", headers=self._headers(session.access_token)
                )
            except BackendError as e:
                if not isinstance(e, AuthenticationError) and e.status_code != 404:
                    raise
                logger.info("Logout rejected by service, dropping local session: %s", e)
        self._replace_session(None)

    async def _refresh(self, session: Session) -> Session:
        response = await self._call(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "refresh_token"},
            headers=self._headers(),
            json_body={"refresh_token": session.refresh_token},
        )
        logger.debug("Access token refreshed for %s", session.identity.id)
        return Session.from_token_response(response.json())

    def _replace_session(self, session: Session | None) -> None:
        self._session = session
        if self._store is None:
            return
        if session is None:
            self._store.clear()
        else:
            self._store.save(session)

    # ── Tables ──────────────────────────────────────────

    async def fetch_feed(self) -> list[Feedback]:
        response = await self._call(
            "GET",
            "/rest/v1/feedback",
            params={"select": FEED_SELECT, "order": FEED_ORDER},
            headers=await self._table_headers(),
        )
        rows: list[dict[str, Any]] = response.json() or []
        try:
            return [Feedback.from_row(row) for row in rows]
        except (KeyError, TypeError, ValueError) as e:
            raise BackendError(f"Malformed feed row: {e}") from e

    async def insert_feedback(self, feedback: NewFeedback) -> None:
        await self._insert("feedback", feedback.to_row())

    async def insert_comment(self, comment: NewComment) -> None:
        await self._insert("comments", comment.to_row())

    async def _insert(self, table: str, row: dict[str, Any]) -> None:
        headers = await self._table_headers()
        headers["Prefer"] = "return=minimal"
        await self._call("POST", f"/rest/v1/{table}", headers=headers, json_body=row)

    # ── Transport ───────────────────────────────────────

    def _headers(self, access_token: str | None = None) -> dict[str, str]:
        return {
            "apikey": self._anon_key,
            "Authorization": f"Bearer {access_token or self._anon_key}",
        }

    async def _table_headers(self) -> dict[str, str]:
        session = await self.get_session()
        return self._headers(session.access_token if session else None)

    async def _call(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self._http.request(method, path, **kwargs)
        except HTTPClientError as e:
            # The auth service answers bad credentials and dead refresh tokens with 400
            rejected = e.status_code in (401, 403) or (
                e.status_code == 400 and path.startswith("/auth/")
            )
            if rejected:
                raise AuthenticationError(str(e), status_code=e.status_code) from e
            raise BackendError(str(e), status_code=e.status_code) from e
