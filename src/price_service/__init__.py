from price_service.store import PriceNotFound, PriceStore

__all__ = ["PriceNotFound", "PriceStore"]
