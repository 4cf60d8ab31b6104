"""HTTP edge helpers shared by the routers."""

from .errors import ApiError, api_error_handler, error_from_generation, unauthorized_error

__all__ = ["ApiError", "api_error_handler", "error_from_generation", "unauthorized_error"]
