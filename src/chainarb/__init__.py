"""
Cross-chain arbitrage opportunity valuation and bot collateral allocation.

Keeps a set of tracked cross-venue opportunities priced and profitable
figures current, and allocates trading bot capital into state channel
collateral deposits across network peers.
"""

__version__ = "1.0.0"
