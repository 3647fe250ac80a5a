from .api_response import ApiResponse, ErrorResponse, error_response, success_response

__all__ = ["ApiResponse", "ErrorResponse", "error_response", "success_response"]
