from pydantic import BaseModel, EmailStr, Field, ConfigDict

from quizhub.schemas.common import UTCDateTime


class UserRegister(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6, description="Plain password, hashed before storage")


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class PublicUser(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: EmailStr
    created_at: UTCDateTime
    updated_at: UTCDateTime


class LoginResponse(BaseModel):
    user: PublicUser
    token: str
