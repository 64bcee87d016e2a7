from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Query

from velion_dkn.auth.security import CurrentPrincipal
from velion_dkn.users.schemas import (
    DepartmentsResponse,
    ExpertFilters,
    ExpertsResponse,
    LeaderboardResponse,
    RegionsResponse,
    UserStatsResponse,
)

from ..deps import DirectoryDep

ROUTER_PREFIX = "/users"
ROUTER_TAG = "Users"

router = APIRouter()


@router.get("/leaderboard", response_model=LeaderboardResponse)
async def leaderboard(
    principal: CurrentPrincipal,
    directory: DirectoryDep,
    limit: int = Query(10, ge=1),
) -> LeaderboardResponse:
    return LeaderboardResponse(leaderboard=await directory.leaderboard(limit))


@router.get("/experts", response_model=ExpertsResponse)
async def experts(
    principal: CurrentPrincipal,
    directory: DirectoryDep,
    department: Optional[str] = None,
    region: Optional[str] = None,
    expertise: Optional[str] = None,
    search: Optional[str] = None,
) -> ExpertsResponse:
    found = await directory.experts(
        ExpertFilters(department=department, region=region, expertise=expertise, search=search)
    )
    return ExpertsResponse(count=len(found), experts=found)


@router.get("/stats", response_model=UserStatsResponse)
async def my_stats(principal: CurrentPrincipal, directory: DirectoryDep) -> UserStatsResponse:
    return UserStatsResponse(stats=await directory.stats(principal.id))


@router.get("/stats/{user_id}", response_model=UserStatsResponse)
async def user_stats(user_id: int, principal: CurrentPrincipal, directory: DirectoryDep) -> UserStatsResponse:
    return UserStatsResponse(stats=await directory.stats(user_id))


@router.get("/departments", response_model=DepartmentsResponse)
async def departments(principal: CurrentPrincipal, directory: DirectoryDep) -> DepartmentsResponse:
    return DepartmentsResponse(departments=await directory.departments())


@router.get("/regions", response_model=RegionsResponse)
async def regions(principal: CurrentPrincipal, directory: DirectoryDep) -> RegionsResponse:
    return RegionsResponse(regions=await directory.regions())
