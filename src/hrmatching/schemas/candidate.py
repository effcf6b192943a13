from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class SkillEntry(BaseModel):
    """Named skill with a self-declared or assessed proficiency."""

    name: str
    level: int = Field(default=0, ge=0, le=100)
    category: str | None = None

    model_config = ConfigDict(extra="forbid", frozen=True)


class SoftSkills(BaseModel):
    """Assessed soft-skill scores (0-100). ``None`` means not assessed."""

    communication: int | None = Field(default=None, ge=0, le=100)
    adaptation: int | None = Field(default=None, ge=0, le=100)
    teamwork: int | None = Field(default=None, ge=0, le=100)
    leadership: int | None = Field(default=None, ge=0, le=100)

    model_config = ConfigDict(extra="forbid", frozen=True)


class AccessibilityInfo(BaseModel):
    """Accessibility needs and requested accommodations."""

    needs_accommodation: bool | None = None
    accommodations: list[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid", frozen=True)


class CandidateProfile(BaseModel):
    """Fully populated candidate document as handed over by the candidate store."""

    candidate_id: str
    name: str | None = None
    title: str | None = None
    summary: str | None = None
    location: str | None = None
    experience_years: float | None = Field(default=None, ge=0)
    experience_descriptions: list[str] = Field(default_factory=list)
    education: list[str] = Field(default_factory=list)
    sectors: list[str] = Field(default_factory=list)
    skills: list[SkillEntry] = Field(default_factory=list)
    languages: list[str] = Field(default_factory=list)
    soft_skills: SoftSkills = Field(default_factory=SoftSkills)
    accessibility: AccessibilityInfo = Field(default_factory=AccessibilityInfo)
    preferred_locations: list[str] = Field(default_factory=list)
    work_modes: list[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="allow", frozen=True)

    def skill_level(self, name: str) -> int | None:
        """Return the level of an exactly named skill (case-insensitive)."""
        wanted = name.strip().lower()
        for skill in self.skills:
            if skill.name.strip().lower() == wanted:
                return skill.level
        return None

    def free_text(self) -> list[str]:
        """Searchable free-text fragments, lower-cased."""
        corpus: list[str] = []
        if self.title:
            corpus.append(self.title)
        if self.summary:
            corpus.append(self.summary)
        corpus.extend(self.experience_descriptions)
        corpus.extend(skill.name for skill in self.skills)
        return [text.lower() for text in corpus if text]
