from typing import Optional

from pydantic import EmailStr, Field, field_validator

from . import RequestSchema, limits
from .users import Availability, SkillList, Bio, Location


class RegisterSchema(RequestSchema):
    name: str = Field(..., min_length=limits.NAME_MIN, max_length=limits.NAME_MAX)
    email: EmailStr
    password: str = Field(..., min_length=limits.PASSWORD_MIN, max_length=limits.PASSWORD_MAX)
    skills_offered: SkillList = Field(default_factory=list)
    skills_wanted: SkillList = Field(default_factory=list)
    bio: Bio = ''
    location: Location = ''
    availability: Optional[Availability] = None

    @field_validator('name', mode='before')
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator('email')
    @classmethod
    def normalize_email(cls, value):
        return value.strip().lower()


class LoginSchema(RequestSchema):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator('email')
    @classmethod
    def normalize_email(cls, value):
        return value.strip().lower()


class ChangePasswordSchema(RequestSchema):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=limits.PASSWORD_MIN, max_length=limits.PASSWORD_MAX)
