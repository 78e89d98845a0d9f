# Rev 0.2.0

from __future__ import annotations
import asyncio
import json

from ganttboard.app_context import AppContext
from ganttboard.services.connection import SUPABASE_CONFIG_KEY

URL = "https://demo.supabase.co"


def make(tmp_path, client_factory, environ=None):
    return AppContext.create(
        db_path=tmp_path / "board.db", environ=environ or {}, dotenv_path=tmp_path / "absent.env",
        client_factory=client_factory,
    )


def test_starts_local_without_any_config(tmp_path, client_factory):
    ctx = make(tmp_path, client_factory)
    assert asyncio.run(ctx.start()) is None
    assert ctx.connection.is_remote is False
    assert ctx.admin.has_password() is False
    ctx.db.close()


def test_share_link_connects_and_is_persisted(tmp_path, client_factory):
    ctx = make(tmp_path, client_factory)
    cleaned = asyncio.run(ctx.start(f"https://board.example/?sbUrl={URL}&sbKey=k1"))
    assert cleaned == "https://board.example/"
    assert ctx.connection.is_remote
    assert json.loads(ctx.db.get_item(SUPABASE_CONFIG_KEY)) == {"url": URL, "key": "k1"}
    ctx.db.close()

    again = make(tmp_path, client_factory)
    assert asyncio.run(again.start()) is None
    assert again.connection.is_remote
    again.db.close()


def test_environment_config_beats_share_link(tmp_path, client_factory):
    env = {"SUPABASE_URL": "https://fixed.supabase.co", "SUPABASE_KEY": "fixed", "ADMIN_PASSWORD": "pw"}
    ctx = make(tmp_path, client_factory, env)
    cleaned = asyncio.run(ctx.start(f"https://board.example/?sbUrl={URL}&sbKey=k1"))
    assert cleaned == "https://board.example/"
    assert client_factory.calls == [("https://fixed.supabase.co", "fixed")]
    assert ctx.admin.is_fixed and ctx.admin.verify("pw")
    ctx.db.close()
