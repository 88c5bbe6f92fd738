"""
rangeswap Core Module

Engine building blocks: constants, exceptions, the balance ledger,
configuration, logging, metrics and input schemas. Pool logic lives in
``rangeswap.core.defi``.
"""

__all__ = []
