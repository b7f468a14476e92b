from fastapi import APIRouter

from app.dependencies.userDependencies import auth_dependency
from app.modules.auth.schemas import CurrentUserOut

auth_router = APIRouter()


@auth_router.get("/me", response_model=CurrentUserOut)
async def get_me(auth_context: auth_dependency):
    """
    Usuario actual y si tiene acceso al panel de administración.
    """
    return CurrentUserOut(
        user_id=auth_context.user_id,
        email=auth_context.email,
        full_name=auth_context.full_name,
        role=auth_context.role,
        is_admin=auth_context.is_admin
    )
