"""College list, suggestion, filter and course endpoints."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException, Query, Request
from pydantic import BaseModel, field_validator

from ..errors import EntityStoreError
from ..filters import FilterSelection
from ..service import CollegeDirectory

router = APIRouter(prefix="/api")


class InvalidateRequest(BaseModel):
    category: str
    reason: str = "manual"

    @field_validator("category")
    @classmethod
    def _validate_category(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("category is required")
        return value.strip()


class SuggestionItem(BaseModel):
    text: str
    type: str
    score: int
    match_type: str
    id: Optional[Any] = None


def _selection(
    stream: Optional[str],
    state: Optional[str],
    management_type: Optional[str],
    course: Optional[str],
    branch: Optional[str],
) -> FilterSelection:
    return FilterSelection.from_mapping(
        {
            "stream": stream,
            "state": state,
            "management_type": management_type,
            "course": course,
            "branch": branch,
        }
    )


@router.get("/colleges")
async def list_colleges(
    request: Request,
    stream: Optional[str] = None,
    state: Optional[str] = None,
    management_type: Optional[str] = None,
    course: Optional[str] = None,
    branch: Optional[str] = None,
    q: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=200),
) -> Dict[str, Any]:
    directory = _get_directory(request)
    selection = _selection(stream, state, management_type, course, branch)
    try:
        return await directory.search(selection, query=q, page=page, limit=limit)
    except EntityStoreError as exc:
        raise HTTPException(status_code=503, detail="College data unavailable") from exc


@router.get("/colleges/suggestions", response_model=List[SuggestionItem])
async def college_suggestions(
    request: Request,
    q: str = "",
    limit: int = Query(8, ge=1, le=50),
) -> List[Dict[str, Any]]:
    directory = _get_directory(request)
    try:
        return await directory.suggestions(q, limit=limit)
    except EntityStoreError as exc:
        raise HTTPException(status_code=503, detail="College data unavailable") from exc


@router.get("/colleges/filters")
async def college_filters(
    request: Request,
    stream: Optional[str] = None,
    state: Optional[str] = None,
    management_type: Optional[str] = None,
    course: Optional[str] = None,
    branch: Optional[str] = None,
    q: Optional[str] = None,
) -> Dict[str, Any]:
    directory = _get_directory(request)
    selection = _selection(stream, state, management_type, course, branch)
    try:
        return await directory.filters(selection, query=q)
    except EntityStoreError as exc:
        raise HTTPException(status_code=503, detail="College data unavailable") from exc


@router.get("/colleges/{college_id}/courses")
async def college_courses(request: Request, college_id: int, q: Optional[str] = None) -> Dict[str, Any]:
    directory = _get_directory(request)
    try:
        courses = await directory.courses(college_id, query=q)
    except EntityStoreError as exc:
        raise HTTPException(status_code=503, detail="Course data unavailable") from exc
    if courses is None:
        raise HTTPException(status_code=404, detail=f"College {college_id} not found")
    return {"data": courses, "total": len(courses)}


@router.post("/cache/invalidate")
def invalidate_cache(request: Request, payload: InvalidateRequest) -> Dict[str, Any]:
    directory = _get_directory(request)
    return directory.invalidate(payload.category, payload.reason)


@router.get("/cache/stats")
def cache_stats(request: Request) -> Dict[str, Any]:
    directory = _get_directory(request)
    return directory.cache.stats()


def _get_directory(request: Request) -> CollegeDirectory:
    directory = getattr(request.app.state, "directory", None)
    if not isinstance(directory, CollegeDirectory):
        raise HTTPException(status_code=503, detail="College directory not ready")
    return directory
