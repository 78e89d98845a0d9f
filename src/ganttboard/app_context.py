# ganttboard application context
# Rev 0.2.0

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .utils.logging_setup import get_logger
from .models.ids import IdGenerator
from .repositories.db import LocalDatabase
from .repositories.local_store import LocalRepository, LocalStore
from .services.admin_gate import AdminGate
from .services.bootstrap import (
    EnvironmentConfig, config_from_link, resolve_environment, strip_config_params,
)
from .services.change_notifier import ChangeNotifier
from .services.connection import ConnectionContext
from .services.data_service import DataService
from .services.settings_service import SettingsService


@dataclass
class AppContext:
    """Central container for shared app resources."""
    db: LocalDatabase
    environment: EnvironmentConfig
    connection: ConnectionContext
    data: DataService
    notifier: ChangeNotifier
    settings: SettingsService
    admin: AdminGate

    @classmethod
    def create(cls, db_path: Optional[Path | str] = None,
               environ: Optional[Mapping[str, str]] = None,
               dotenv_path: Optional[Path | str] = None,
               **connection_kwargs) -> "AppContext":
        """Open the local store and wire services; no network I/O happens here."""
        log = get_logger("AppContext")
        env = resolve_environment(environ, dotenv_path)
        db = LocalDatabase(db_path)
        ids = IdGenerator()
        connection = ConnectionContext(db, fixed=env.fixed_connection, **connection_kwargs)
        local = LocalRepository(LocalStore(db), ids=ids)
        ctx = cls(
            db=db,
            environment=env,
            connection=connection,
            data=DataService(connection, local, ids=ids),
            notifier=ChangeNotifier(connection),
            settings=SettingsService(connection),
            admin=AdminGate(db, env.admin_password),
        )
        log.info("AppContext initialized with store=%s", db.path)
        return ctx

    async def start(self, link: Optional[str] = None) -> Optional[str]:
        """
        Pick the backend for this session: fixed config, then a share link,
        then the stored config. Returns the link with config params removed
        (None when no link was given).
        """
        if link is not None and not self.connection.is_fixed and config_from_link(link) is not None:
            _, cleaned = await self.connection.init_from_link(link)
            return cleaned
        await self.connection.resume()
        return strip_config_params(link) if link is not None else None
