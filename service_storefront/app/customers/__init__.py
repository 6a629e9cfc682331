from .service import CustomerInsightsService

__all__ = ["CustomerInsightsService"]
