# hr_insights/api/analytics_routes.py

from datetime import date
from typing import Optional

import numpy as np
import pandas as pd
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session

from hr_insights.analytics import queries
from hr_insights.analytics.dataset import load_dataset
from hr_insights.database import get_session
from hr_insights.exceptions import UnknownDimensionError

router = APIRouter(prefix="/api/analytics", tags=["Analytics"])

VIEWS = {
    "latest-reviews":         queries.latest_review_per_employee,
    "engagement-rank":        queries.department_engagement_rank,
    "engagement-by-tenure":   queries.engagement_by_tenure_band,
    "below-department-avg":   queries.below_department_average,
    "running-engagement":     queries.running_engagement,
    "score-distribution":     queries.score_distribution,
    "monthly-review-trend":   queries.monthly_review_trend,
    "reviewer-effectiveness": queries.reviewer_effectiveness,
    "training-vs-performance": queries.training_vs_performance,
    "benefit-adoption":       queries.benefit_adoption,
    "attrition":              queries.attrition_by_department,
    "department-sentiment":   queries.department_sentiment,
}


def frame_to_records(df: pd.DataFrame) -> list[dict]:
    """JSON-safe rows: dates as ISO strings, missing values as None."""
    out = df.copy()
    for col in out.columns:
        if pd.api.types.is_datetime64_any_dtype(out[col]):
            out[col] = out[col].dt.strftime("%Y-%m-%d")
    out = out.astype(object).where(out.notna(), None)
    records = out.to_dict(orient="records")
    return [
        {k: (v.item() if isinstance(v, np.generic) else v) for k, v in row.items()}
        for row in records
    ]


def _respond(df: pd.DataFrame) -> dict:
    return {"columns": list(df.columns), "rows": frame_to_records(df)}


@router.get("/views")
def list_views():
    return {"views": sorted(VIEWS) + ["ranked-average", "coverage-gap", "no-recent-training",
                                      "top-training-programs", "quarterly-engagement"]}


@router.get("/ranked-average")
def ranked_average(metric: str = "engagement_score", by: str = "department",
                   session: Session = Depends(get_session)):
    try:
        return _respond(queries.ranked_group_average(load_dataset(session), metric, by))
    except UnknownDimensionError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/coverage-gap")
def coverage_gap(present_in: str = "responses", missing_from: str = "reviews",
                 session: Session = Depends(get_session)):
    try:
        return _respond(queries.coverage_gap(load_dataset(session), present_in, missing_from))
    except UnknownDimensionError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/no-recent-training")
def no_recent_training(as_of: Optional[date] = None, days: int = Query(default=365, ge=0),
                       session: Session = Depends(get_session)):
    return _respond(queries.no_recent_training(load_dataset(session), as_of=as_of, days=days))


@router.get("/top-training-programs")
def top_training_programs(limit: int = Query(default=5, ge=1, le=100),
                          session: Session = Depends(get_session)):
    return _respond(queries.top_training_programs(load_dataset(session), limit=limit))


@router.get("/quarterly-engagement")
def quarterly_engagement(year: Optional[int] = None, quarter: Optional[int] = Query(default=None, ge=1, le=4),
                         session: Session = Depends(get_session)):
    return _respond(queries.quarterly_department_engagement(load_dataset(session), year, quarter))


@router.get("/{view}")
def get_view(view: str, session: Session = Depends(get_session)):
    if view not in VIEWS:
        raise HTTPException(status_code=404, detail=f"Unknown view: {view}")
    return _respond(VIEWS[view](load_dataset(session)))
