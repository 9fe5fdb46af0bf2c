"""HTTP API for MonScreener."""

from monscreener.api.routes import routers

__all__ = ['routers']
