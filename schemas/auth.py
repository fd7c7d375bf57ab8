import re

from pydantic import Field, field_validator, model_validator

from .common import RequestSchema

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
# lower, upper, digit and special character
PASSWORD_RULES = (r"[a-z]", r"[A-Z]", r"\d", r"[\W_]")


class LoginSchema(RequestSchema):
    email: str = Field(pattern=EMAIL_PATTERN)
    password: str = Field(min_length=1)


class RefreshTokenSchema(RequestSchema):
    refreshToken: str = Field(min_length=1)


class ForgotPasswordSchema(RequestSchema):
    email: str = Field(pattern=EMAIL_PATTERN)


class VerifyUserSchema(RequestSchema):
    token: str = Field(min_length=1)


class ResetPasswordSchema(RequestSchema):
    token: str = Field(min_length=1)
    password: str = Field(min_length=8, max_length=30)
    confirmPassword: str

    @field_validator("password")
    @classmethod
    def password_complexity(cls, value):
        if not all(re.search(rule, value) for rule in PASSWORD_RULES):
            raise ValueError("must contain upper, lower, number and special character")
        return value

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.confirmPassword:
            raise ValueError("Passwords do not match")
        return self
