# Rev 0.2.0
from __future__ import annotations
import json
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Tuple

from supabase import AsyncClient, acreate_client

from ..repositories.db import LocalDatabase
from ..utils.logging_setup import get_logger
from .bootstrap import ConnectionConfig, split_link

SUPABASE_CONFIG_KEY = "gantt-supabase-config"

ClientFactory = Callable[[str, str], Awaitable[Any]]


@dataclass(frozen=True)
class RemoteSession:
    client: AsyncClient
    config: ConnectionConfig


class ConnectionContext:
    """
    Which backend is live. Either one RemoteSession or None (local mode);
    client and flag are swapped together in a single assignment, so readers
    that snapshot `session` never see a half-applied reconfiguration.

    A fixed config (compiled-in/environment) overrides anything the user
    supplies and is never cleared from local storage by user action.
    """

    def __init__(self, db: LocalDatabase, fixed: Optional[ConnectionConfig] = None,
                 client_factory: ClientFactory = acreate_client):
        self._db = db
        self._fixed = fixed
        self._client_factory = client_factory
        self._session: Optional[RemoteSession] = None
        self._log = get_logger("ConnectionContext")

    # ---------- state ----------

    @property
    def session(self) -> Optional[RemoteSession]:
        return self._session

    @property
    def is_remote(self) -> bool:
        return self._session is not None

    @property
    def is_fixed(self) -> bool:
        return self._fixed is not None

    def stored_config(self) -> Optional[ConnectionConfig]:
        raw = self._db.get_item(SUPABASE_CONFIG_KEY)
        if not raw:
            return None
        try:
            rec = json.loads(raw)
            url, key = rec["url"], rec["key"]
        except (ValueError, TypeError, KeyError) as e:
            self._log.warning("Ignoring unreadable stored connection config: %s", e)
            return None
        if url and key:
            return ConnectionConfig(str(url), str(key))
        return None

    def current_config(self) -> Optional[ConnectionConfig]:
        return self._fixed or self.stored_config()

    # ---------- transitions ----------

    async def _release(self, previous: Optional[RemoteSession]) -> None:
        """Close the realtime socket and drop the auth session of a replaced client."""
        current = self._session.client if self._session is not None else None
        if previous is None or previous.client is current:
            return
        try:
            await previous.client.remove_all_channels()
            await previous.client.auth.sign_out()
        except Exception as e:
            self._log.warning("Releasing previous Supabase client failed: %s", e)

    async def _deactivate(self) -> None:
        previous, self._session = self._session, None
        if not self.is_fixed:
            self._db.remove_item(SUPABASE_CONFIG_KEY)
        await self._release(previous)

    async def init_remote(self, url: str, key: str) -> bool:
        """
        Non-empty url+key: build a client, go remote, remember the config.
        Empty input or a failed build: go local, forget the config.
        """
        url, key = (url or "").strip(), (key or "").strip()
        if not (url and key):
            self._log.info("Remote disabled; using local store")
            await self._deactivate()
            return False

        if self._fixed is not None:
            url, key = self._fixed.url, self._fixed.key

        try:
            client = await self._client_factory(url, key)
        except Exception:
            self._log.exception("Supabase client init failed for %s", url)
            await self._deactivate()
            return False

        config = ConnectionConfig(url, key)
        previous, self._session = self._session, RemoteSession(client=client, config=config)
        await self._release(previous)
        if not self.is_fixed:
            self._db.set_item(SUPABASE_CONFIG_KEY, json.dumps(config.as_record()))
        self._log.info("Remote mode on (%s)", url)
        return True

    async def resume(self) -> bool:
        """Reconnect on startup from the fixed config, else the stored one."""
        config = self.current_config()
        if config is None:
            return False
        return await self.init_remote(config.url, config.key)

    async def init_from_link(self, link: str) -> Tuple[bool, str]:
        """
        Consume sbUrl/sbKey from a share link. Returns (connected, cleaned link);
        the config is persisted by init_remote before the caller drops the params.
        """
        config, cleaned = split_link(link)
        if config is None:
            return False, link
        connected = await self.init_remote(config.url, config.key)
        return connected, cleaned
