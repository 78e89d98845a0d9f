# Rev 0.2.0
from __future__ import annotations
from typing import Any, Awaitable, Callable, Iterable, Optional

from ..utils.logging_setup import get_logger
from .connection import ConnectionContext

CHANNEL_NAME = "db-changes"

Unsubscribe = Callable[[], Awaitable[None]]


async def _noop() -> None:
    return None


class ChangeNotifier:
    """
    Push-change bridge. subscribe() opens one realtime channel and calls
    `callback()` (no arguments) for every insert/update/delete it sees; the
    callback is a "re-read now" signal, never a delta. In local mode nothing
    is opened and the returned unsubscribe does nothing.
    Subscribing twice opens two channels: unsubscribe before resubscribing.
    """

    def __init__(self, connection: ConnectionContext):
        self._connection = connection
        self._log = get_logger("ChangeNotifier")

    async def subscribe(self, callback: Callable[[], Any],
                        tables: Optional[Iterable[str]] = None) -> Unsubscribe:
        session = self._connection.session
        if session is None:
            return _noop

        client = session.client
        log = self._log
        if tables is not None:
            tables = list(tables)

        def _on_change(payload: Any) -> None:
            data = payload.get("data", {}) if isinstance(payload, dict) else {}
            log.debug("Realtime change: %s %s", data.get("type"), data.get("table"))
            callback()

        def _on_status(status: Any, err: Optional[Exception] = None) -> None:
            if err is not None:
                log.error("Realtime status %s: %s", status, err)
            else:
                log.info("Realtime status %s", status)

        channel = client.channel(CHANNEL_NAME)
        if tables is None:
            channel.on_postgres_changes("*", schema="public", callback=_on_change)
        else:
            for table in tables:
                channel.on_postgres_changes("*", schema="public", table=table, callback=_on_change)
        await channel.subscribe(_on_status)
        log.info("Realtime subscription opened (%s)", "public" if tables is None else ",".join(tables))

        released = False

        async def unsubscribe() -> None:
            nonlocal released
            if released:
                return
            released = True
            log.info("Realtime subscription released")
            await client.remove_channel(channel)

        return unsubscribe
