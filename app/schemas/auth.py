from pydantic import BaseModel, Field, field_validator

from app.models.enums import Permission, UserRole


class LoginRequest(BaseModel):
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1, max_length=255)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class UserRead(BaseModel):
    id: int
    email: str
    name: str
    role: UserRole
    permission: Permission


class LoginResponse(BaseModel):
    token: str
    user: UserRead


class SessionResponse(BaseModel):
    user: UserRead
