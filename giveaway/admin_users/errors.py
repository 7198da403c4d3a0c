from giveaway.core.errors import DomainError


class AdminUserError(DomainError):
    code = "E_ADMIN_USER"


class AdminUserNotFoundError(AdminUserError):
    code = "E_ADMIN_USER_NOT_FOUND"
    message = "User not found"


class AdminUserExistsError(AdminUserError):
    code = "E_ADMIN_USER_EXISTS"
    message = "A user with this email already exists"


class AdminUserInvalidError(AdminUserError):
    code = "E_ADMIN_USER_INVALID"
    message = "Invalid user data"


class AdminUserSelfChangeError(AdminUserError):
    code = "E_ADMIN_USER_SELF_CHANGE"
    message = "You cannot change or delete your own account"


class AdminUserHasCampaignsError(AdminUserError):
    code = "E_ADMIN_USER_HAS_CAMPAIGNS"
    message = "Cannot delete a user who has created campaigns"


class ProfileInvalidError(AdminUserError):
    code = "E_PROFILE_INVALID"
    message = "Invalid profile data"
