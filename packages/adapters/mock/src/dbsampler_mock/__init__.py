from .adapter import MockAdapter

__all__ = ["MockAdapter"]
