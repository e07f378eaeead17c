from academy.services.user.user_service import UserService, USER_INDEXES

__all__ = ["UserService", "USER_INDEXES"]
