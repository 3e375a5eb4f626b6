from .base import BaseTransport

__all__ = ["BaseTransport"]
