# backend/app/forms/schemas.py
"""
Lead-capture form payloads.

Each model mirrors the fields of one public form. Values arrive as raw form
strings; blanks are normalized to None so "required" means "non-blank".
`to_record()` gives the row that is written to the backend and mirrored to
the spreadsheet.
"""

from __future__ import annotations

from typing import Any, ClassVar, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator


class FormValidationError(ValueError):
    def __init__(self, message: str, fields: Optional[List[str]] = None) -> None:
        super().__init__(message)
        self.fields = fields or []


class LeadForm(BaseModel):
    model_config = ConfigDict(extra="ignore")

    required: ClassVar[Tuple[str, ...]] = ()
    labels: ClassVar[Dict[str, str]] = {}

    @field_validator("*", mode="before")
    @classmethod
    def _blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @classmethod
    def parse(cls, raw: Mapping[str, Any]) -> "LeadForm":
        """Build the form, raising FormValidationError when a required field is blank."""
        form = cls(**{k: v for k, v in raw.items() if k in cls.model_fields})
        missing = [f for f in cls.required if not getattr(form, f)]
        if missing:
            names = ", ".join(cls.labels.get(f, f) for f in missing)
            raise FormValidationError(f"Please fill in all required fields: {names}", missing)
        return form

    def to_record(self) -> Dict[str, Any]:
        return self.model_dump()


class ContactForm(LeadForm):
    required = ("name", "email", "message")
    labels = {"name": "Name", "email": "Email", "message": "Message"}

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    message: Optional[str] = None


class ApplicationForm(LeadForm):
    required = ("first_name", "last_name", "email", "phone", "position", "experience")
    labels = {
        "first_name": "First Name", "last_name": "Last Name", "email": "Email",
        "phone": "Phone", "position": "Position", "experience": "Experience",
    }

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    position: Optional[str] = None
    experience: Optional[str] = None
    cover_letter: Optional[str] = None
    linkedin_url: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def to_record(self) -> Dict[str, Any]:
        # linkedin_url is collected on the form but not stored with applications
        return {
            "full_name": self.full_name,
            "email": self.email,
            "phone": self.phone,
            "position": self.position,
            "experience": self.experience,
            "cover_letter": self.cover_letter,
        }


class GetStartedForm(LeadForm):
    required = ("first_name", "last_name", "email")
    labels = {"first_name": "First Name", "last_name": "Last Name", "email": "Email"}

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    company: Optional[str] = None
    phone: Optional[str] = None
    job_title: Optional[str] = None
    message: Optional[str] = None


class ResumeForm(LeadForm):
    required = ("full_name", "email")
    labels = {"full_name": "Full Name", "email": "Email"}

    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    position_interested: Optional[str] = None
    experience_level: Optional[str] = None
    skills: Optional[str] = None
    cover_letter: Optional[str] = None
    linkedin_url: Optional[str] = None
    portfolio_url: Optional[str] = None


class NewsletterForm(LeadForm):
    email: Optional[str] = None

    @classmethod
    def parse(cls, raw: Mapping[str, Any]) -> "NewsletterForm":
        form = cls(email=raw.get("email"))
        if not form.email or "@" not in form.email:
            raise FormValidationError("Please enter a valid email address", ["email"])
        return form


__all__ = [
    "FormValidationError", "LeadForm", "ContactForm", "ApplicationForm",
    "GetStartedForm", "ResumeForm", "NewsletterForm",
]
