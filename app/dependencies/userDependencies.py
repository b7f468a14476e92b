from typing import Annotated
from fastapi import Depends
from app.modules.auth.dependencies import get_auth_context, require_admin
from app.modules.auth.schemas import AuthContext

# Usuario autenticado (cualquier rol)
auth_dependency = Annotated[AuthContext, Depends(get_auth_context)]

# Usuario autenticado con rol admin en user_roles
admin_dependency = Annotated[AuthContext, Depends(require_admin)]
