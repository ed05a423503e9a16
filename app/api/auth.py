from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt

from app.api.deps import get_services
from app.core.container import Services
from app.core.exceptions import NotFoundError
from app.core.roles import Actor
from app.core.security import ALGORITHM, SECRET_KEY, create_access_token
from app.models.user import User
from app.schemas.auth import LoginRequest, RegisterRequest, RegisterResponse, TokenResponse
from app.schemas.user import UserOut

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


router = APIRouter(tags=["Auth"])


# -------------------------
# REGISTER (lecturer self-registration)
# -------------------------
@router.post("/register", response_model=RegisterResponse, status_code=201)
def register(payload: RegisterRequest, services: Services = Depends(get_services)):
    user = services.users.register(payload.name, payload.email, payload.password)

    return RegisterResponse(
        id=str(user.id),
        email=user.email,
        name=user.name,
        role=user.role,
        is_approved=user.is_approved,
        message=(
            "Your lecturer account has been created and sent to HR for approval. "
            "You will be able to log in once HR activates your profile."
        ),
    )


# -------------------------
# LOGIN
# -------------------------
@router.post("/login", response_model=TokenResponse)
def login(payload: LoginRequest, services: Services = Depends(get_services)):
    user = services.users.authenticate(payload.email, payload.password, payload.role)

    token = create_access_token({
        "sub": str(user.id),
        "email": user.email,
        "role": user.role.value,
    })

    return TokenResponse(access_token=token)


def get_current_user(
    token: str = Depends(oauth2_scheme),
    services: Services = Depends(get_services),
) -> User:
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        user_id = payload.get("sub")
        if not user_id:
            raise HTTPException(status_code=401, detail="Invalid token")

        user = services.users.get_user(UUID(user_id))
    except (JWTError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid token")
    except NotFoundError:
        raise HTTPException(status_code=401, detail="User not found")

    if not user.can_sign_in:
        raise HTTPException(status_code=401, detail="Account awaiting HR approval")

    return user


def get_current_actor(user: User = Depends(get_current_user)) -> Actor:
    return Actor.from_user(user)


@router.get("/me", response_model=UserOut)
def me(current_user: User = Depends(get_current_user)):
    return current_user
