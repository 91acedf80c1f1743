from userdesk.models.user import Draft, User

__all__ = ["Draft", "User"]
