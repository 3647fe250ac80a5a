from .auth_service import AuthResult, AuthService

__all__ = ["AuthResult", "AuthService"]
