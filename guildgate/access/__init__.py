from guildgate.access.resolver import resolve, authorize
from guildgate.access.admin import is_admin, has_elevated_permission

__all__ = ["resolve", "authorize", "is_admin", "has_elevated_permission"]
