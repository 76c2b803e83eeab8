from .adapter import BaseSQLAlchemyAdapter
from .params import bind_positional

__all__ = [
    "BaseSQLAlchemyAdapter",
    "bind_positional",
]
