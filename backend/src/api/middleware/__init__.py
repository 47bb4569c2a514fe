"""FastAPI dependencies for request identity and error handling."""

from .error_handlers import (
    http_exception_handler,
    internal_exception_handler,
    note_graph_exception_handler,
    register_error_handlers,
    validation_exception_handler,
)
from .identity import get_owner_id

__all__ = [
    "get_owner_id",
    "register_error_handlers",
    "validation_exception_handler",
    "http_exception_handler",
    "note_graph_exception_handler",
    "internal_exception_handler",
]
