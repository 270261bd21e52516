from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TeamMemberBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    role: str
    birthday: date
    hiring_date: date = Field(alias="hiringDate")
    location: str


class TeamMemberCreate(TeamMemberBase):
    """Fields collected by the add-member form."""


class TeamMember(TeamMemberBase):
    id: str

    @property
    def initial(self) -> str:
        return self.name[:1].upper()

    def __repr__(self):
        return f"<TeamMember {self.name}>"


class TeamMemberUpdate(BaseModel):
    """Partial update: only fields explicitly set are written."""

    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    role: Optional[str] = None
    birthday: Optional[date] = None
    hiring_date: Optional[date] = Field(default=None, alias="hiringDate")
    location: Optional[str] = None
