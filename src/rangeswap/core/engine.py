"""
Engine assembly.

Wires a ledger, pool manager, position manager and swap router together
from an ``EngineConfig``.

Usage:
    engine = create_engine(configure_logging=True)
    engine.ledger.mint("0xtoken0", "alice", 10**24)
    pool = engine.pool_manager.create_and_initialize_pool_if_necessary({...})
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from prometheus_client import CollectorRegistry

from .config import EngineConfig, load_config
from .defi.pool_manager import PoolManager
from .defi.position_manager import PositionManager
from .defi.swap_router import SwapRouter
from .ledger import BalanceLedger, InMemoryLedger
from .logging_config import setup_logging_from_config
from .metrics import DEXMetrics, get_dex_metrics

logger = logging.getLogger(__name__)


@dataclass
class Engine:
    config: EngineConfig
    ledger: BalanceLedger
    pool_manager: PoolManager
    position_manager: PositionManager
    router: SwapRouter
    metrics: Optional[DEXMetrics] = None


def create_engine(
    config: Optional[EngineConfig] = None,
    ledger: Optional[BalanceLedger] = None,
    metrics_registry: Optional[CollectorRegistry] = None,
    time_provider: Callable[[], float] | None = None,
    configure_logging: bool = False,
) -> Engine:
    """
    Build an engine.

    Args:
        config: Settings (default: ``load_config()`` from the environment)
        ledger: Balance ledger (default: a fresh ``InMemoryLedger``)
        metrics_registry: Prometheus registry for a dedicated metrics
            instance; without one the process-wide instance is used when
            metrics are enabled
        time_provider: Clock for deadline checks
        configure_logging: Install JSON log handlers on the ``rangeswap``
            logger from the config's level, file and environment
    """
    config = config or load_config()
    config.validate()
    if configure_logging:
        setup_logging_from_config(config)
    ledger = ledger if ledger is not None else InMemoryLedger()

    metrics = None
    if config.metrics_enabled:
        metrics = DEXMetrics(registry=metrics_registry) if metrics_registry else get_dex_metrics()

    pool_manager = PoolManager(ledger=ledger, fee_tiers=config.fee_tiers, metrics=metrics)
    engine = Engine(
        config=config,
        ledger=ledger,
        pool_manager=pool_manager,
        position_manager=PositionManager(pool_manager, time_provider=time_provider),
        router=SwapRouter(pool_manager, time_provider=time_provider),
        metrics=metrics,
    )

    logger.info(
        "Engine created",
        extra={
            "event": "engine.created",
            "environment": config.environment,
            "fee_tiers": list(config.fee_tiers),
            "metrics_enabled": metrics is not None,
        }
    )
    return engine
