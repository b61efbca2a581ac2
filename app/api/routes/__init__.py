from . import improvements

__all__ = ["improvements"]
