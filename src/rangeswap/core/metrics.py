"""
Pool and swap metrics for rangeswap.

Prometheus metrics for swap execution, liquidity movement and pool health.
Pools and registries take an optional ``DEXMetrics``; when none is given
nothing is recorded.
"""

from __future__ import annotations

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge


class DEXMetrics:
    """Metrics for pool operations."""

    def __init__(self, registry: CollectorRegistry | None = None):
        self.registry = registry or REGISTRY

        # Swap metrics
        self.swaps_total = Counter(
            'rangeswap_swaps_total',
            'Swaps attempted, by outcome',
            ['pool', 'direction', 'status'],
            registry=self.registry
        )

        self.swap_volume = Counter(
            'rangeswap_swap_volume_total',
            'Total swap input volume in base units',
            ['pool', 'token'],
            registry=self.registry
        )

        self.swap_fees_collected = Counter(
            'rangeswap_swap_fees_total',
            'Total swap fees charged',
            ['pool', 'token'],
            registry=self.registry
        )

        # Liquidity metrics
        self.liquidity_added = Counter(
            'rangeswap_liquidity_added_total',
            'Total liquidity minted into pools',
            ['pool'],
            registry=self.registry
        )

        self.liquidity_removed = Counter(
            'rangeswap_liquidity_removed_total',
            'Total liquidity burned from pools',
            ['pool'],
            registry=self.registry
        )

        self.tokens_collected = Counter(
            'rangeswap_tokens_collected_total',
            'Tokens paid out to position owners',
            ['pool', 'token'],
            registry=self.registry
        )

        self.pool_liquidity = Gauge(
            'rangeswap_pool_liquidity',
            'Current active liquidity',
            ['pool'],
            registry=self.registry
        )

        self.pool_sqrt_price = Gauge(
            'rangeswap_pool_sqrt_price_x96',
            'Current sqrt price (Q64.96)',
            ['pool'],
            registry=self.registry
        )

        # Registry metrics
        self.pools_total = Gauge(
            'rangeswap_pools_total',
            'Total number of pools',
            registry=self.registry
        )

        self.pool_creations = Counter(
            'rangeswap_pool_creations_total',
            'Total pools created',
            ['fee'],
            registry=self.registry
        )

        self.operation_failures = Counter(
            'rangeswap_operation_failures_total',
            'Pool operations rejected or rolled back',
            ['pool', 'operation', 'error_type'],
            registry=self.registry
        )


# Singleton instance
_dex_metrics_instance = None


def get_dex_metrics(registry=None):
    """Get or create singleton metrics instance."""
    global _dex_metrics_instance
    if _dex_metrics_instance is None:
        _dex_metrics_instance = DEXMetrics(registry=registry)
    return _dex_metrics_instance
