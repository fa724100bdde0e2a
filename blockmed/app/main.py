"""FastAPI application bootstrap for BlockMed."""
from contextlib import asynccontextmanager
import logging
from typing import Optional

from fastapi import FastAPI

from .config import Settings, settings as default_settings
from .infra.chain import connect_web3, load_contract
from .infra.db import init_db, make_engine
from .logging_config import setup_logging
from .routers import audit, providers, records, session
from .services.controller import RecordSessionController
from .services.gateway import Web3LedgerGateway
from .services.identity import IdentityBinder, LocalKeyWallet, NodeWallet
from .services.outcomes import FanoutSink, LoggingSink, OutcomeLogSink, OutcomeSink

logger = logging.getLogger(__name__)


def build_controller(cfg: Settings, sink: OutcomeSink) -> RecordSessionController:
    """Wire gateway, wallet and binder for the configured ledger."""
    w3 = connect_web3(cfg.rpc_url)
    gateway = Web3LedgerGateway(w3, load_contract(w3, cfg.contract_address), cfg.poll_interval)
    if cfg.private_key:
        wallet = LocalKeyWallet(w3, cfg.private_key)
    else:
        wallet = NodeWallet(w3, cfg.account_index)
    return RecordSessionController(
        gateway,
        IdentityBinder(wallet, gateway),
        sink,
        finalization_timeout=cfg.finalization_timeout,
    )


def create_app(
    cfg: Optional[Settings] = None,
    controller: Optional[RecordSessionController] = None,
    outcome_log: Optional[OutcomeLogSink] = None,
) -> FastAPI:
    cfg = cfg or default_settings
    outcome_log = outcome_log or OutcomeLogSink(make_engine(cfg.database_url))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(cfg.log_level, cfg.log_format)
        init_db(outcome_log.engine)
        if cfg.connect_on_startup:
            outcome = app.state.controller.connect()
            logger.info("startup connect: %s", outcome.message)
        yield

    app = FastAPI(title="BlockMed API", version="0.1.0", lifespan=lifespan)
    app.state.outcome_log = outcome_log
    app.state.controller = controller or build_controller(
        cfg, FanoutSink([LoggingSink(), outcome_log])
    )

    app.include_router(session.router, prefix="/session", tags=["session"])
    app.include_router(records.router, prefix="/records", tags=["records"])
    app.include_router(providers.router, prefix="/providers", tags=["providers"])
    app.include_router(audit.router, prefix="/audit", tags=["audit"])

    return app


app = create_app()
