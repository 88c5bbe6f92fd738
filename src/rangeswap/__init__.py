"""
rangeswap - Concentrated Liquidity AMM Engine

Single-range liquidity pools with exact fixed-point pricing and fee
accounting.

Main Components:
- Math: tick/sqrt-price conversions, amount deltas and swap steps
- Pools: initialize, mint, burn, collect and swap with rollback on failure
- Registry: pool factory, pool manager and position manager
- Routing: exact-input and exact-output swaps across a pair's pools
"""

__version__ = "0.1.0"

__all__ = []
