"""MonScreener package.

This package aggregates Monad token data from the chain (bonding-curve
launches, ERC20 transfers, wallet state) and from DEXScreener, and serves it
over an HTTP API.
"""

__version__ = "0.1.0"
__author__ = "MonScreener Contributors"
