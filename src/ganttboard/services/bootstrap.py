# Rev 0.2.0
"""
Connection bootstrap: where the remote target, its key and the admin password
come from.

Per field, first non-empty wins:
  1. compiled-in constants below (empty in the distributed build)
  2. NAME, then VITE_NAME from the process environment
  3. NAME, then VITE_NAME from a .env file (python-dotenv)
A share link (sbUrl/sbKey query parameters) and the locally stored record are
consulted later by ConnectionContext, and only when 1-3 yield no connection.
"""
from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Tuple
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from dotenv import dotenv_values

from ..utils.logging_setup import get_logger

BUILTIN_SUPABASE_URL = ""
BUILTIN_SUPABASE_KEY = ""
BUILTIN_ADMIN_PASSWORD = ""

LINK_URL_PARAM = "sbUrl"
LINK_KEY_PARAM = "sbKey"


@dataclass(frozen=True)
class ConnectionConfig:
    url: str
    key: str

    def as_record(self) -> dict:
        return {"url": self.url, "key": self.key}


@dataclass(frozen=True)
class EnvironmentConfig:
    url: str = ""
    key: str = ""
    admin_password: str = ""

    @property
    def fixed_connection(self) -> Optional[ConnectionConfig]:
        if self.url and self.key:
            return ConnectionConfig(self.url, self.key)
        return None


def clean_value(value: object) -> str:
    """Strip surrounding double quotes and whitespace, as .env tooling leaves them."""
    if not value:
        return ""
    text = str(value).strip()
    if len(text) >= 2 and text[0] == text[-1] == '"':
        text = text[1:-1]
    return text.strip()


def _lookup(name: str, builtin: str, environ: Mapping[str, str], dotenv: Mapping[str, Optional[str]]) -> str:
    for candidate in (
        builtin,
        environ.get(name), environ.get(f"VITE_{name}"),
        dotenv.get(name), dotenv.get(f"VITE_{name}"),
    ):
        value = clean_value(candidate)
        if value:
            return value
    return ""


def resolve_environment(
    environ: Optional[Mapping[str, str]] = None,
    dotenv_path: Optional[Path | str] = None,
) -> EnvironmentConfig:
    environ = os.environ if environ is None else environ
    dotenv: Mapping[str, Optional[str]] = {}
    path = Path(dotenv_path) if dotenv_path else Path.cwd() / ".env"
    if path.is_file():
        dotenv = dotenv_values(path)

    cfg = EnvironmentConfig(
        url=_lookup("SUPABASE_URL", BUILTIN_SUPABASE_URL, environ, dotenv),
        key=_lookup("SUPABASE_KEY", BUILTIN_SUPABASE_KEY, environ, dotenv),
        admin_password=_lookup("ADMIN_PASSWORD", BUILTIN_ADMIN_PASSWORD, environ, dotenv),
    )
    get_logger("bootstrap").info(
        "Environment config: url=%s key=%s password=%s",
        bool(cfg.url), bool(cfg.key), bool(cfg.admin_password),
    )
    return cfg


# ---------- share links ----------

def config_from_link(link: str) -> Optional[ConnectionConfig]:
    params = dict(parse_qsl(urlsplit(link).query))
    url, key = clean_value(params.get(LINK_URL_PARAM)), clean_value(params.get(LINK_KEY_PARAM))
    if url and key:
        return ConnectionConfig(url, key)
    return None


def strip_config_params(link: str) -> str:
    parts = urlsplit(link)
    kept = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True)
            if k not in (LINK_URL_PARAM, LINK_KEY_PARAM)]
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(kept), parts.fragment))


def shareable_link(base: str, config: ConnectionConfig) -> str:
    parts = urlsplit(base)
    params = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True)
              if k not in (LINK_URL_PARAM, LINK_KEY_PARAM)]
    params += [(LINK_URL_PARAM, config.url), (LINK_KEY_PARAM, config.key)]
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(params), parts.fragment))


def split_link(link: str) -> Tuple[Optional[ConnectionConfig], str]:
    return config_from_link(link), strip_config_params(link)
