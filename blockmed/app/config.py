"""Runtime settings read from the environment (and a local .env file)."""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

load_dotenv()

DEFAULT_CONTRACT_ADDRESS = "0xc5cCa15f2428004cd21D832Cf330a7Ceb5d3BFA4"


def _flag(value: str) -> bool:
    return value.strip().lower() not in ("0", "false", "no", "off", "")


@dataclass(frozen=True)
class Settings:
    rpc_url: str = "http://127.0.0.1:8545"
    contract_address: str = DEFAULT_CONTRACT_ADDRESS
    private_key: Optional[str] = None
    account_index: int = 0
    finalization_timeout: float = 120.0
    poll_interval: float = 0.5
    connect_on_startup: bool = True
    database_url: str = "sqlite:///./blockmed.db"
    log_level: str = "INFO"
    log_format: str = "text"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        timeout = float(env.get("BLOCKMED_FINALIZATION_TIMEOUT", "120"))
        if timeout <= 0:
            raise ValueError("BLOCKMED_FINALIZATION_TIMEOUT must be positive")
        return cls(
            rpc_url=env.get("BLOCKMED_RPC_URL", cls.rpc_url),
            contract_address=env.get("BLOCKMED_CONTRACT_ADDRESS", DEFAULT_CONTRACT_ADDRESS),
            private_key=env.get("BLOCKMED_PRIVATE_KEY") or None,
            account_index=int(env.get("BLOCKMED_ACCOUNT_INDEX", "0")),
            finalization_timeout=timeout,
            poll_interval=float(env.get("BLOCKMED_POLL_INTERVAL", "0.5")),
            connect_on_startup=_flag(env.get("BLOCKMED_CONNECT_ON_STARTUP", "true")),
            database_url=env.get("DATABASE_URL", cls.database_url),
            log_level=env.get("BLOCKMED_LOG_LEVEL", "INFO").upper(),
            log_format=env.get("BLOCKMED_LOG_FORMAT", "text").lower(),
        )


settings = Settings.from_env()
