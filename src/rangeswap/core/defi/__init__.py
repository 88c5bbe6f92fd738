"""
rangeswap pools and periphery.

- Pool: single-range concentrated liquidity pool
- Factory / PoolManager: pool creation, lookup and enumeration
- PositionManager: per-owner position handles
- SwapRouter: exact-input / exact-output routing and quotes
- Periphery / pay_from: shared base and payment callback for both
"""

from .events import Burn, Collect, Mint, PaymentRequest, PoolCreated, Swap
from .factory import Factory, compute_pool_address, sort_tokens
from .periphery import Periphery, pay_from
from .pool import Pool, Position, SwapResult
from .pool_manager import Pair, PoolInfo, PoolManager
from .position_manager import MintResult, PositionInfo, PositionManager
from .swap_router import RouteResult, SwapRouter

__all__ = [
    # Pool
    "Pool",
    "Position",
    "SwapResult",
    # Registry
    "Factory",
    "PoolManager",
    "Pair",
    "PoolInfo",
    "compute_pool_address",
    "sort_tokens",
    # Periphery
    "Periphery",
    "pay_from",
    "PositionManager",
    "PositionInfo",
    "MintResult",
    "SwapRouter",
    "RouteResult",
    # Records
    "PoolCreated",
    "Mint",
    "Burn",
    "Collect",
    "Swap",
    "PaymentRequest",
]
