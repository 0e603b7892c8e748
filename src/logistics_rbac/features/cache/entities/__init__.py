from .protocols import Cache

__all__ = ["Cache"]
