"""
Middleware modules
"""
from .logging_middleware import LoggingMiddleware
from .error_handlers import register_exception_handlers

__all__ = ["LoggingMiddleware", "register_exception_handlers"]
