from .service import RevenueService

__all__ = ["RevenueService"]
