"""Pydantic models for the generated resume (apply target)."""

from __future__ import annotations

import re
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

MAX_SUMMARY_LINES = 4
MAX_EXPERIENCE_HIGHLIGHTS = 5

RESUME_DATE_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


class _ResumeBase(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @field_validator("*", mode="before")
    @classmethod
    def _null_to_default(cls, v, info):
        # LLM output often uses null for "nothing"; treat it as the empty value
        if v is None:
            field = cls.model_fields[info.field_name]
            if field.default_factory is not None:
                return field.default_factory()
            return field.default
        return v


class ResumeHeader(_ResumeBase):
    name: str = ""
    title: str = ""
    email: str = ""
    phone: str = ""
    location: str = ""
    links: list[str] = Field(default_factory=list)
    nationality: str = ""
    marital_status: str = ""


class ResumeExperience(_ResumeBase):
    id: str = ""
    company: str = ""
    role: str = ""
    location: str = ""
    start: str = ""
    end: str = ""
    highlights: list[str] = Field(default_factory=list)


class ResumeProject(_ResumeBase):
    name: str = ""
    description: str = ""
    start: str = ""
    end: str = ""
    highlights: list[str] = Field(default_factory=list)


class ResumeEducation(_ResumeBase):
    institution: str = ""
    degree: str = ""
    field: str = ""
    location: str = ""
    start: str = ""
    end: str = ""
    highlights: list[str] = Field(default_factory=list)


class ResumeAchievement(_ResumeBase):
    title: str = ""
    date: str = ""
    highlights: list[str] = Field(default_factory=list)


class ResumeCertification(_ResumeBase):
    name: str = ""
    issuer: str = ""
    date: str = ""
    expires: str = ""


class ResumeModel(_ResumeBase):
    header: ResumeHeader = Field(default_factory=ResumeHeader)
    summary: list[str] = Field(default_factory=list)
    skills: dict[str, list[str]] = Field(default_factory=dict)
    experience: list[ResumeExperience] = Field(default_factory=list)
    projects: list[ResumeProject] = Field(default_factory=list)
    education: list[ResumeEducation] = Field(default_factory=list)
    achievements: list[ResumeAchievement] = Field(default_factory=list)
    certifications: list[ResumeCertification] = Field(default_factory=list)


def is_placeholder(value: str) -> bool:
    return value.strip().upper().startswith("TO-FILL:")


def is_full_url(value: str) -> bool:
    if not value:
        return False
    if is_placeholder(value):
        return True
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _check_date(value: str, field_name: str) -> None:
    if value in ("", "Present") or is_placeholder(value):
        return
    if not RESUME_DATE_PATTERN.match(value):
        raise ValueError(f"{field_name} must be YYYY-MM or Present")


def validate_resume_model(model: ResumeModel) -> None:
    """Enforce required fields, length caps and formatting rules.

    Raises ValueError naming the first offending field.
    """
    if not model.header.name.strip():
        raise ValueError("header.name is required")
    if model.header.nationality.strip() or model.header.marital_status.strip():
        raise ValueError("sensitive fields like nationality or maritalStatus are not allowed")
    if len(model.summary) > MAX_SUMMARY_LINES:
        raise ValueError(f"summary must have at most {MAX_SUMMARY_LINES} lines")
    for i, link in enumerate(model.header.links):
        if not is_full_url(link.strip()):
            raise ValueError(f"header.links[{i}] must be a full URL")

    for i, exp in enumerate(model.experience):
        if len(exp.highlights) > MAX_EXPERIENCE_HIGHLIGHTS:
            raise ValueError(
                f"experience[{i}].highlights must have at most {MAX_EXPERIENCE_HIGHLIGHTS} items"
            )
        _check_date(exp.start, f"experience[{i}].start")
        _check_date(exp.end, f"experience[{i}].end")
    for i, project in enumerate(model.projects):
        _check_date(project.start, f"projects[{i}].start")
        _check_date(project.end, f"projects[{i}].end")
    for i, edu in enumerate(model.education):
        _check_date(edu.start, f"education[{i}].start")
        _check_date(edu.end, f"education[{i}].end")
    for i, achievement in enumerate(model.achievements):
        _check_date(achievement.date, f"achievements[{i}].date")
    for i, cert in enumerate(model.certifications):
        _check_date(cert.date, f"certifications[{i}].date")
        _check_date(cert.expires, f"certifications[{i}].expires")
