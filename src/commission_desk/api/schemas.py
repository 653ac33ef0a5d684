"""Pydantic models for JSON request bodies."""

from pydantic import AliasChoices, BaseModel, Field


class LoginRequest(BaseModel):
    """Admin login payload."""

    email: str | None = None
    password: str | None = None


class EnquiryRequest(BaseModel):
    """Public enquiry payload; accepts the contact form's short field names."""

    name: str = Field(default="", validation_alias=AliasChoices("name", "cname"))
    email: str = Field(default="", validation_alias=AliasChoices("email", "cemail"))
    message: str = Field(
        default="", validation_alias=AliasChoices("message", "cmsg", "text")
    )


class SubmissionPatch(BaseModel):
    """Admin triage update; omitted fields are left unchanged."""

    status: str | None = None
    notes: str | None = Field(default=None, max_length=10_000)
