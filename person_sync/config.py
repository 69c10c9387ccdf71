from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from dotenv import dotenv_values

from person_sync.crm_client import PipedriveConfig
from person_sync.errors import ConfigError

DEFAULT_TIMEOUT = 30.0


@dataclass
class Settings:
    api_key: str = field(repr=False)
    company_domain: str
    timeout: float = DEFAULT_TIMEOUT
    log_level: str = "INFO"

    def to_client_config(self) -> PipedriveConfig:
        return PipedriveConfig(
            api_key=self.api_key,
            company_domain=self.company_domain,
            timeout=self.timeout,
        )


def _required(env: Mapping[str, Optional[str]], name: str, env_file: str) -> str:
    value = (env.get(name) or "").strip()
    if not value:
        raise ConfigError(f"{name} must be set in {env_file} or the environment")
    return value


def load_settings(env_file: str = ".env", environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Read settings from `env_file` (if it exists), overlaid by the process environment.
    Pass `environ` to use something other than os.environ.
    """
    env = dict(dotenv_values(env_file)) if os.path.isfile(env_file) else {}
    env.update(os.environ if environ is None else environ)

    raw_timeout = (env.get("PIPEDRIVE_TIMEOUT") or "").strip()
    try:
        timeout = float(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT
    except ValueError:
        raise ConfigError(f"PIPEDRIVE_TIMEOUT must be a number of seconds, got {raw_timeout!r}")
    if not math.isfinite(timeout) or timeout <= 0:
        raise ConfigError(f"PIPEDRIVE_TIMEOUT must be a positive number of seconds, got {raw_timeout!r}")

    log_level = (env.get("LOG_LEVEL") or "INFO").strip().upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ConfigError(f"LOG_LEVEL {log_level!r} is not a logging level")

    return Settings(
        api_key=_required(env, "PIPEDRIVE_API_KEY", env_file),
        company_domain=_required(env, "PIPEDRIVE_COMPANY_DOMAIN", env_file),
        timeout=timeout,
        log_level=log_level,
    )
