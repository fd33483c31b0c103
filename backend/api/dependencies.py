"""
API dependencies for authentication and authorization.
"""

from typing import Annotated

from fastapi import Depends

from api.routes.auth import get_current_user
from core.exceptions import Forbidden
from infrastructure.database.models.user import User, UserRole

CurrentUser = Annotated[User, Depends(get_current_user)]


def restrict_to(*roles: UserRole):
    """
    Build a dependency that admits only users holding one of ``roles``.

    Usage::

        @router.post("/", dependencies=[Depends(restrict_to(UserRole.ADMIN))])
    """
    allowed = {role.value for role in roles}

    async def _guard(current_user: CurrentUser) -> User:
        if current_user.role not in allowed:
            raise Forbidden("You do not have permission to perform this action")
        return current_user

    return _guard


get_current_admin_user = restrict_to(UserRole.ADMIN)
get_current_customer = restrict_to(UserRole.CUSTOMER)
get_current_distributor = restrict_to(UserRole.DISTRIBUTOR)

AdminUser = Annotated[User, Depends(get_current_admin_user)]
CustomerUser = Annotated[User, Depends(get_current_customer)]
DistributorUser = Annotated[User, Depends(get_current_distributor)]
