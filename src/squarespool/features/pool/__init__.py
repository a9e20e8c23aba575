"""Pool feature: HTTP routes over the axis, payout and dice engines."""

from .router import create_pool_routers

__all__ = ["create_pool_routers"]
