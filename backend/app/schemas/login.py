"""Sign-in request and token response for therapists."""

from pydantic import BaseModel, EmailStr

from backend.app.schemas.user import UserRead


class LoginRequest(BaseModel):
    """Credentials posted to ``/auth/login``."""

    email: EmailStr
    password: str


class AccessToken(BaseModel):
    access_token: str
    token_type: str = "bearer"
    therapist: UserRead
