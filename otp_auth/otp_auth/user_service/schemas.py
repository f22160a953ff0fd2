from pydantic import AfterValidator, BaseModel, EmailStr, field_validator
from pydantic_core import PydanticCustomError

from datetime import datetime
from typing import Annotated, Any, Dict, Optional, Union


# Checked in order, the first failing rule is reported
PASSWORD_RULES = (
    (lambda p: len(p) >= 8, "Password must be at least 8 characters"),
    (lambda p: any(c.isascii() and c.isupper() for c in p), "Password must contain at least one uppercase letter"),
    (lambda p: any(c.isascii() and c.islower() for c in p), "Password must contain at least one lowercase letter"),
    (lambda p: any(c.isascii() and c.isdigit() for c in p), "Password must contain at least one number"),
    (lambda p: any(not (c.isascii() and c.isalnum()) for c in p), "Password must contain at least one special character"),
)


def check_password_strength(password: str) -> str:
    for rule, message in PASSWORD_RULES:
        if not rule(password):
            raise PydanticCustomError("password_policy", message)
    return password


Password = Annotated[str, AfterValidator(check_password_strength)]


class SignInRequest(BaseModel):
    email: EmailStr
    password: Password


class SignUpRequest(BaseModel):
    name: str
    email: EmailStr
    phone: str
    password: Password
    otp: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if len(v) < 2:
            raise PydanticCustomError("name_length", "Name must be at least 2 characters")
        return v

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        if len(v) < 10:
            raise PydanticCustomError("phone_length", "Phone number must be at least 10 digits")
        return v

    @field_validator("otp")
    @classmethod
    def validate_otp(cls, v: str) -> str:
        if len(v) != 4 or not v.isdigit():
            raise PydanticCustomError("otp_format", "OTP must be a 4 digit code")
        return v


class SendCodeRequest(BaseModel):
    email: EmailStr


class UserOut(BaseModel):
    id: str
    name: str
    email: str
    phone: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class UserResponse(BaseModel):
    message: str
    data: UserOut


class UserDetailResponse(BaseModel):
    message: str
    # Empty object when the user no longer exists
    data: Union[UserOut, Dict[str, Any]]


class MessageResponse(BaseModel):
    message: str


class TokenIdentity(BaseModel):
    id: str
    email: str
    name: str
