"""
Raw catalog records as exported by the course catalog JSON feed.
"""

import re
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

_PREFIX = re.compile(r"^[A-Za-z]+")
_LEVEL = re.compile(r"\d")


class UnitConstraint(BaseModel):
    """A requisite rule, e.g. {"type": "prerequisite", "units": ["FIT1045"]}."""
    type: str
    units: List[str] = Field(default_factory=list)


class UnitRecord(BaseModel):
    """
    One unit of study.

    `id` is whatever the feed uses as a database key (often an object);
    the unit code is the identifier used in the hierarchy.
    """
    id: Any = None
    code: str
    title: str
    description: str = ""
    faculty: Optional[str] = None
    constraints: List[UnitConstraint] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore")

    @field_validator("code")
    @classmethod
    def _strip_code(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("unit code must not be empty")
        return value

    @property
    def faculty_label(self) -> str:
        """Explicit faculty, else the alphabetic prefix of the code."""
        if self.faculty:
            return self.faculty
        match = _PREFIX.match(self.code)
        return match.group(0).upper() if match else "Other"

    @property
    def level(self) -> Optional[int]:
        """Year level, taken from the first digit of the code."""
        match = _LEVEL.search(self.code)
        return int(match.group(0)) if match else None

