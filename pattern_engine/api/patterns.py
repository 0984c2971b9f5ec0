"""Pattern endpoints: trending, nearby, filtered listing and detail.

Provides API endpoints for:
- Trending patterns for a dashboard widget
- Patterns near a point for a map or report page
- Listing patterns filtered by type and status
- A single pattern with its linked reports and cached narrative
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from pattern_engine.config import Settings
from pattern_engine.database import get_db
from pattern_engine.dependencies import get_query_service, get_settings
from pattern_engine.errors import PatternNotFoundError
from pattern_engine.logging_config import get_logger
from pattern_engine.schemas.pattern import (
    NearbyPattern,
    PatternDetail,
    PatternList,
    PatternStatus,
    PatternType,
    TrendingPattern,
)

logger = get_logger(__name__)
router = APIRouter()


@router.get("/", response_model=PatternList)
def list_patterns(
    pattern_type: Optional[PatternType] = Query(default=None, alias="type"),
    status: Optional[PatternStatus] = None,
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> PatternList:
    """List patterns, most significant first.

    Args:
        pattern_type: Optional pattern type filter (query parameter ``type``).
        status: Optional lifecycle status filter.
        limit: Page size (max 100).
        offset: Number of records to skip.
    """
    logger.info(
        "patterns_list_requested",
        pattern_type=pattern_type.value if pattern_type else None,
        status=status.value if status else None,
        limit=limit,
        offset=offset,
    )
    return get_query_service(db, settings).list_patterns(
        pattern_type=pattern_type.value if pattern_type else None,
        status=status.value if status else None,
        limit=limit,
        offset=offset,
    )


@router.get("/trending", response_model=List[TrendingPattern])
def trending_patterns(
    limit: int = 5,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> List[TrendingPattern]:
    """Active and emerging patterns. ``limit`` is clamped to the configured maximum."""
    return get_query_service(db, settings).get_trending_patterns(limit)


@router.get("/nearby", response_model=List[NearbyPattern])
def nearby_patterns(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    radius_km: Optional[float] = Query(default=None, gt=0),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> List[NearbyPattern]:
    """Visible patterns whose centre lies within ``radius_km`` of the point, nearest first."""
    return get_query_service(db, settings).get_nearby_patterns(lat, lng, radius_km)


@router.get("/{pattern_id}", response_model=PatternDetail)
def get_pattern(
    pattern_id: int,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> PatternDetail:
    try:
        return get_query_service(db, settings).get_pattern(pattern_id)
    except PatternNotFoundError as e:
        logger.warning("pattern_not_found", pattern_id=pattern_id)
        raise HTTPException(status_code=404, detail=str(e))
