from fastapi import APIRouter, Depends
from app.schemas.user import RegisterRequest, LoginRequest, PublicUser
from app.dependencies.service_dependencies import get_identity_registry
from app.services.identity_service import IdentityRegistry

router = APIRouter(tags=["auth"])

@router.post("/register", response_model=PublicUser)
async def register(
    request: RegisterRequest,
    identity: IdentityRegistry = Depends(get_identity_registry)
):
    """
    Register a new user and issue their id.
    """
    return identity.register(nickname=request.nickname, name=request.name)

@router.post("/login", response_model=PublicUser)
async def login(
    request: LoginRequest,
    identity: IdentityRegistry = Depends(get_identity_registry)
):
    """
    Log in with the id and nickname pair.
    """
    return identity.login(user_id=request.id, nickname=request.nickname)
