from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict

from velion_dkn.documents.schemas import Envelope


class UserSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    department: Optional[str] = None
    region: Optional[str] = None
    expertise: Optional[str] = None
    role: str


class ExpertEntry(UserSummary):
    document_count: int = 0


class LeaderboardEntry(ExpertEntry):
    total_downloads: int = 0


class ExpertFilters(BaseModel):
    department: Optional[str] = None
    region: Optional[str] = None
    expertise: Optional[str] = None
    search: Optional[str] = None


class UserStats(BaseModel):
    document_count: int
    total_downloads: int
    rank: int


class LeaderboardResponse(Envelope):
    leaderboard: list[LeaderboardEntry]


class ExpertsResponse(Envelope):
    count: int
    experts: list[ExpertEntry]


class UserStatsResponse(Envelope):
    stats: UserStats


class DepartmentsResponse(Envelope):
    departments: list[str]


class RegionsResponse(Envelope):
    regions: list[str]
