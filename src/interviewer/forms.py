"""Setup-form validation at the input boundary."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic import ValidationError as PydanticValidationError

from interviewer.errors import ValidationError
from interviewer.prompts import DEFAULT_LANGUAGE, SUPPORTED_LANGUAGES


class SetupForm(BaseModel):
    """Validated setup inputs: résumé, job description and language."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    resume: str
    job_description: str
    language: str = DEFAULT_LANGUAGE

    @field_validator("resume", "job_description")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("language")
    @classmethod
    def _supported_language(cls, value: str) -> str:
        if value not in SUPPORTED_LANGUAGES:
            raise ValueError(f"must be one of {', '.join(SUPPORTED_LANGUAGES)}")
        return value

    @classmethod
    def parse(
        cls, resume: str, job_description: str, language: str = DEFAULT_LANGUAGE
    ) -> SetupForm:
        """Validate raw inputs, raising the library `ValidationError`."""
        try:
            return cls(resume=resume, job_description=job_description, language=language)
        except PydanticValidationError as e:
            fields = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
            raise ValidationError(
                f"Invalid setup input: {', '.join(fields) or 'unknown field'}",
                hint="Paste both the resume and the job description, and pick a "
                "supported language.",
            ) from e


def can_submit(resume: str, job_description: str, *, is_loading: bool) -> bool:
    """Whether the generate action should be enabled."""
    return bool(resume.strip() and job_description.strip()) and not is_loading
