"""
Runtime settings.

Values come from the environment, optionally pre-filled from a `.env` file:

    OGE_BASE_URL     portal root (default: IUT Dijon OGE instance)
    OGE_SESSION      JSESSIONID of an already authenticated browser session
    OGE_TIMEOUT      request timeout in seconds (default 30)
    OGE_USER_AGENT   User-Agent header sent with every request
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from dotenv import find_dotenv, load_dotenv

from ogeportal.errors import ConfigError

DEFAULT_BASE_URL = "https://iutdijon.u-bourgogne.fr/oge"
DEFAULT_TIMEOUT = 30.0
DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"


@dataclass(frozen=True)
class Settings:
    base_url: str = DEFAULT_BASE_URL
    session_cookie: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT


def _parse_timeout(raw: str) -> float:
    try:
        timeout = float(raw)
    except ValueError:
        raise ConfigError(f"OGE_TIMEOUT must be a number of seconds, got {raw!r}") from None
    if timeout <= 0:
        raise ConfigError(f"OGE_TIMEOUT must be positive, got {raw!r}")
    return timeout


def load_settings(env_file: Optional[Union[str, Path]] = None) -> Settings:
    """
    Build Settings from the environment.

    A `.env` file (current directory, or `env_file` when given) is loaded first;
    variables already present in the environment win over the file.
    """
    load_dotenv(env_file if env_file is not None else find_dotenv(usecwd=True))

    base_url = (os.getenv("OGE_BASE_URL") or DEFAULT_BASE_URL).strip().rstrip("/")
    session_cookie = (os.getenv("OGE_SESSION") or "").strip() or None
    raw_timeout = (os.getenv("OGE_TIMEOUT") or "").strip()
    timeout = _parse_timeout(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT
    user_agent = (os.getenv("OGE_USER_AGENT") or "").strip() or DEFAULT_USER_AGENT

    return Settings(
        base_url=base_url,
        session_cookie=session_cookie,
        timeout=timeout,
        user_agent=user_agent,
    )
