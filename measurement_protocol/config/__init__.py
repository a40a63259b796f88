from .options import RequestOptions

__all__ = [
    "RequestOptions",
]
