from academy.middleware.auth import AuthMiddleware

__all__ = ["AuthMiddleware"]
