# hr_insights/analytics/queries.py
#
# Derived people-analytics views. Every function is a pure read of an
# HRDataset and returns an ordered DataFrame. Averages are rounded to two
# decimals unless precision=None.

from datetime import date, timedelta
from typing import Optional

import numpy as np
import pandas as pd

from hr_insights.analytics.dataset import HRDataset
from hr_insights.exceptions import UnknownDimensionError

AVG_PRECISION = 2
TOTAL_LABEL = "ALL"

# Grouping dimension → (lookup attribute on HRDataset, join key, label column)
DIMENSIONS = {
    "department": ("departments", "department_id", "department_name"),
    "job_role":   ("job_roles",   "job_id",        "job_title"),
}

# Scored attribute → fact table holding it
METRICS = {
    "engagement_score":   "responses",
    "satisfaction_score": "responses",
    "score":              "reviews",
}

# Fact tables that carry an employee_id, for coverage checks
EMPLOYEE_TABLES = ("employees", "reviews", "responses", "training", "employee_benefits")

TENURE_BANDS = ["0-1", "2-4", "5+"]


# ── Helpers ──
def _round(values: pd.Series, precision: Optional[int]) -> pd.Series:
    return values.round(precision) if precision is not None else values


def _empty(columns: list[str]) -> pd.DataFrame:
    return pd.DataFrame(columns=columns)


def _staff(ds: HRDataset, dimension: str = "department") -> pd.DataFrame:
    """Employees joined to a dimension lookup, with a display name."""
    lookup, key, _ = _dimension(dimension)
    staff = ds.employees.merge(getattr(ds, lookup), on=key, how="inner")
    staff["full_name"] = staff["first_name"].astype(str) + " " + staff["last_name"].astype(str)
    return staff


def _dimension(name: str) -> tuple[str, str, str]:
    if name not in DIMENSIONS:
        raise UnknownDimensionError(
            f"Unknown dimension: {name}. Available: {list(DIMENSIONS.keys())}"
        )
    return DIMENSIONS[name]


def _metric_table(ds: HRDataset, metric: str) -> pd.DataFrame:
    if metric not in METRICS:
        raise UnknownDimensionError(
            f"Unknown metric: {metric}. Available: {list(METRICS.keys())}"
        )
    return getattr(ds, METRICS[metric])


def _latest_reviews(reviews: pd.DataFrame) -> pd.DataFrame:
    """Most recent review per employee; same-day ties go to the highest review_id."""
    ordered = reviews.sort_values(["employee_id", "review_date", "review_id"])
    return ordered.drop_duplicates(subset=["employee_id"], keep="last")


def tenure_band(years) -> Optional[str]:
    if years is None or pd.isna(years):
        return None
    if years < 2:
        return "0-1"
    if years < 5:
        return "2-4"
    return "5+"


# ── Latest-per-employee ──
def latest_review_per_employee(ds: HRDataset) -> pd.DataFrame:
    columns = ["employee_id", "full_name", "department_name", "review_id", "review_date", "score"]
    latest = _latest_reviews(ds.reviews)
    df = _staff(ds).merge(latest, on="employee_id", how="inner")
    if df.empty:
        return _empty(columns)
    df = df.sort_values(["department_name", "full_name", "employee_id"])
    return df[columns].reset_index(drop=True)


# ── Ranked group average ──
def ranked_group_average(ds: HRDataset,
                         metric: str = "engagement_score",
                         by: str = "department",
                         precision: Optional[int] = AVG_PRECISION) -> pd.DataFrame:
    """
    Mean of `metric` per `by` group, ranked descending.
    Ties share a rank and the next rank is skipped (1, 1, 3).
    """
    _, _, label = _dimension(by)
    columns = [label, "average", "rank"]
    facts = _metric_table(ds, metric)
    df = _staff(ds, by).merge(facts, on="employee_id", how="inner")
    if df.empty:
        return _empty(columns)

    grouped = df.groupby(label)[metric].mean().reset_index(name="average")
    grouped["average"] = _round(grouped["average"], precision)
    grouped["rank"] = grouped["average"].rank(method="min", ascending=False).astype("Int64")
    grouped = grouped.sort_values(["rank", label], na_position="last")
    return grouped[columns].reset_index(drop=True)


def department_engagement_rank(ds: HRDataset, precision: Optional[int] = AVG_PRECISION) -> pd.DataFrame:
    ranked = ranked_group_average(ds, "engagement_score", "department", precision)
    return ranked.rename(columns={"average": "avg_engagement", "rank": "engagement_rank"})


# ── Banded cohort ──
def engagement_by_tenure_band(ds: HRDataset, precision: Optional[int] = AVG_PRECISION) -> pd.DataFrame:
    """Mean engagement and response count per (job title, tenure band)."""
    columns = ["job_title", "tenure_band", "avg_engagement", "responses"]
    df = _staff(ds, "job_role").merge(ds.responses, on="employee_id", how="inner")
    df["tenure_band"] = df["years_at_company"].map(tenure_band)
    df = df.dropna(subset=["tenure_band"])
    if df.empty:
        return _empty(columns)

    grouped = df.groupby(["job_title", "tenure_band"]).agg(
        avg_engagement=("engagement_score", "mean"),
        responses=("response_id", "size"),
    ).reset_index()
    grouped["avg_engagement"] = _round(grouped["avg_engagement"], precision)
    grouped["tenure_band"] = pd.Categorical(grouped["tenure_band"], TENURE_BANDS, ordered=True)
    grouped = grouped.sort_values(["job_title", "tenure_band"])
    grouped["tenure_band"] = grouped["tenure_band"].astype(str)
    return grouped[columns].reset_index(drop=True)


# ── Below own-group average ──
def below_department_average(ds: HRDataset, precision: Optional[int] = AVG_PRECISION) -> pd.DataFrame:
    """Reviews scoring strictly below the mean of all reviews in the same department."""
    columns = ["employee_id", "full_name", "department_name", "review_id", "score", "department_avg"]
    df = _staff(ds).merge(ds.reviews, on="employee_id", how="inner")
    if df.empty:
        return _empty(columns)

    df["department_avg"] = df.groupby("department_id")["score"].transform("mean")
    below = df[df["score"] < df["department_avg"]].copy()
    below["department_avg"] = _round(below["department_avg"], precision)
    below = below.sort_values(["department_name", "score", "employee_id", "review_id"])
    return below[columns].reset_index(drop=True)


# ── Coverage gap ──
def coverage_gap(ds: HRDataset, present_in: str = "responses", missing_from: str = "reviews") -> pd.DataFrame:
    """Employee ids found in one table and absent from another (set difference)."""
    for name in (present_in, missing_from):
        if name not in EMPLOYEE_TABLES:
            raise UnknownDimensionError(
                f"Unknown table: {name}. Available: {list(EMPLOYEE_TABLES)}"
            )
    left = set(getattr(ds, present_in)["employee_id"].dropna().astype(int))
    right = set(getattr(ds, missing_from)["employee_id"].dropna().astype(int))
    return pd.DataFrame({"employee_id": sorted(left - right)}, dtype="int64")


# ── Running aggregate ──
def running_average(ds: HRDataset,
                    metric: str = "engagement_score",
                    precision: Optional[int] = AVG_PRECISION) -> pd.DataFrame:
    """
    Per-employee cumulative mean of a survey metric, in response-date order
    (same-day responses ordered by response_id). One cumulative pass per
    employee; missing values are skipped like SQL AVG does.
    """
    if METRICS.get(metric) != "responses":
        raise UnknownDimensionError(f"Running averages are defined for survey metrics, not {metric}")
    columns = ["employee_id", "response_id", "response_date", metric, "running_avg"]
    df = ds.responses[ds.responses["employee_id"].isin(ds.employees["employee_id"])]
    if df.empty:
        return _empty(columns)

    df = df.sort_values(["employee_id", "response_date", "response_id"]).copy()
    running_sum = df[metric].fillna(0).groupby(df["employee_id"], sort=False).cumsum()
    running_n = df[metric].notna().astype(int).groupby(df["employee_id"], sort=False).cumsum()
    df["running_avg"] = _round(running_sum / running_n.replace(0, np.nan), precision)
    return df[columns].reset_index(drop=True)


def running_engagement(ds: HRDataset, precision: Optional[int] = AVG_PRECISION) -> pd.DataFrame:
    return running_average(ds, "engagement_score", precision).rename(
        columns={"running_avg": "running_avg_engagement"}
    )


# ── Rollup ──
def _group_label(key) -> str:
    if pd.isna(key):
        return "NULL"
    if isinstance(key, (float, np.floating)) and float(key).is_integer():
        return str(int(key))
    return str(key)


def rollup(frame: pd.DataFrame,
           by: str,
           value: Optional[str] = None,
           precision: Optional[int] = AVG_PRECISION) -> pd.DataFrame:
    """
    Count (and optionally average `value`) per `by` group, followed by one
    total row over all input rows. The total row has is_total=True, a null
    group value, and the label "ALL". Rows with a null group value form their
    own group so the group counts always add up to the total.
    """
    columns = [by, "label", "count"] + (["average"] if value else []) + ["is_total"]

    rows = []
    for key, group in frame.groupby(by, dropna=False, sort=True):
        row = {by: key, "label": _group_label(key), "count": len(group), "is_total": False}
        if value:
            row["average"] = group[value].mean()
        rows.append(row)

    total = {by: None, "label": TOTAL_LABEL, "count": len(frame), "is_total": True}
    if value:
        total["average"] = frame[value].mean() if len(frame) else np.nan
    rows.append(total)

    df = pd.DataFrame(rows, columns=columns)
    df["count"] = df["count"].astype(int)
    if value:
        df["average"] = _round(df["average"].astype(float), precision)
    return df


def score_distribution(ds: HRDataset) -> pd.DataFrame:
    """Review count per score with an ALL total row last."""
    df = rollup(ds.reviews, "score")
    df["score"] = pd.to_numeric(df["score"]).astype("Int64")
    return df.rename(columns={"label": "score_bucket", "count": "cnt"})


# ── Time-bucketed trend ──
def monthly_review_trend(ds: HRDataset, precision: Optional[int] = AVG_PRECISION) -> pd.DataFrame:
    columns = ["month", "avg_score", "reviews"]
    reviews = ds.reviews.dropna(subset=["review_date"])
    if reviews.empty:
        return _empty(columns)

    month = reviews["review_date"].dt.to_period("M").dt.to_timestamp()
    grouped = reviews.groupby(month).agg(
        avg_score=("score", "mean"),
        reviews=("review_id", "size"),
    ).reset_index(names="month")
    grouped["avg_score"] = _round(grouped["avg_score"], precision)
    return grouped.sort_values("month")[columns].reset_index(drop=True)


# ── Self-referential comparison ──
def reviewer_effectiveness(ds: HRDataset, precision: Optional[int] = AVG_PRECISION) -> pd.DataFrame:
    """
    For each reviewer: their own latest review score (missing if never
    reviewed) next to the mean score of the reviews they wrote.
    """
    columns = ["reviewer_id", "reviewer_latest_score", "team_avg_score", "reviews_given"]
    written = ds.reviews.dropna(subset=["reviewer_id"])
    if written.empty:
        return _empty(columns)

    team = written.groupby("reviewer_id").agg(
        team_avg_score=("score", "mean"),
        reviews_given=("review_id", "size"),
    ).reset_index()
    own = _latest_reviews(ds.reviews)[["employee_id", "score"]].rename(
        columns={"employee_id": "reviewer_id", "score": "reviewer_latest_score"}
    )
    df = team.merge(own, on="reviewer_id", how="left")
    df["team_avg_score"] = _round(df["team_avg_score"], precision)
    df = df.sort_values(["team_avg_score", "reviewer_id"], ascending=[False, True], na_position="last")
    return df[columns].reset_index(drop=True)


# ── Existence-absence with a time bound ──
def no_recent_training(ds: HRDataset, as_of: Optional[date] = None, days: int = 365) -> pd.DataFrame:
    """Employees with no training enrolment on or after as_of - days."""
    columns = ["employee_id", "full_name", "department_name"]
    cutoff = pd.Timestamp((as_of or date.today()) - timedelta(days=days))
    recent = ds.training[ds.training["enrollment_date"] >= cutoff]["employee_id"]
    staff = _staff(ds)
    df = staff[~staff["employee_id"].isin(recent)]
    if df.empty:
        return _empty(columns)
    return df.sort_values("employee_id")[columns].reset_index(drop=True)


# ── Program, benefit and department reports ──
def training_vs_performance(ds: HRDataset, precision: Optional[int] = AVG_PRECISION) -> pd.DataFrame:
    """Training count next to mean review score, for employees with any training."""
    columns = ["employee_id", "trainings", "avg_score"]
    if ds.training.empty:
        return _empty(columns)

    train = ds.training.groupby("employee_id").size().reset_index(name="trainings")
    perf = ds.reviews.groupby("employee_id")["score"].mean().reset_index(name="avg_score")
    df = train.merge(perf, on="employee_id", how="left")
    df["avg_score"] = _round(df["avg_score"], precision)
    df = df.sort_values(["trainings", "avg_score", "employee_id"],
                        ascending=[False, False, True], na_position="last")
    return df[columns].reset_index(drop=True)


def top_training_programs(ds: HRDataset, limit: int = 5) -> pd.DataFrame:
    columns = ["title", "enrollments"]
    if ds.programs.empty:
        return _empty(columns)

    df = ds.programs.merge(ds.training, on="training_id", how="left")
    grouped = df.groupby("title")["record_id"].count().reset_index(name="enrollments")
    grouped = grouped.sort_values(["enrollments", "title"], ascending=[False, True])
    return grouped[columns].head(limit).reset_index(drop=True)


def benefit_adoption(ds: HRDataset) -> pd.DataFrame:
    """Enrolments, active enrolments and active percentage per benefit."""
    columns = ["benefit_name", "total_enrollments", "active_enrollments", "active_pct"]
    if ds.benefits.empty:
        return _empty(columns)

    df = ds.benefits.merge(ds.employee_benefits, on="benefit_id", how="left")
    df["is_active"] = (df["status"] == "Active").astype(int)
    grouped = df.groupby("benefit_name").agg(
        total_enrollments=("record_id", "count"),
        active_enrollments=("is_active", "sum"),
    ).reset_index()
    totals = grouped["total_enrollments"].replace(0, np.nan)
    grouped["active_pct"] = (100.0 * grouped["active_enrollments"] / totals).round(2)
    grouped = grouped.sort_values(["total_enrollments", "benefit_name"], ascending=[False, True])
    return grouped[columns].reset_index(drop=True)


def attrition_by_department(ds: HRDataset) -> pd.DataFrame:
    columns = ["department_name", "leavers", "headcount", "attrition_pct"]
    staff = _staff(ds)
    if staff.empty:
        return _empty(columns)

    staff["left"] = (staff["attrition"] == "Yes").astype(int)
    grouped = staff.groupby("department_name").agg(
        leavers=("left", "sum"),
        headcount=("employee_id", "size"),
    ).reset_index()
    grouped["attrition_pct"] = (100.0 * grouped["leavers"] / grouped["headcount"]).round(2)
    grouped = grouped.sort_values(["attrition_pct", "department_name"], ascending=[False, True])
    return grouped[columns].reset_index(drop=True)


def department_sentiment(ds: HRDataset, precision: Optional[int] = AVG_PRECISION) -> pd.DataFrame:
    """Engagement and satisfaction KPIs per department."""
    columns = ["department_name", "avg_engagement", "avg_satisfaction", "responses"]
    df = _staff(ds).merge(ds.responses, on="employee_id", how="inner")
    if df.empty:
        return _empty(columns)

    grouped = df.groupby("department_name").agg(
        avg_engagement=("engagement_score", "mean"),
        avg_satisfaction=("satisfaction_score", "mean"),
        responses=("response_id", "size"),
    ).reset_index()
    grouped["avg_engagement"] = _round(grouped["avg_engagement"], precision)
    grouped["avg_satisfaction"] = _round(grouped["avg_satisfaction"], precision)
    grouped = grouped.sort_values(["avg_engagement", "avg_satisfaction", "department_name"],
                                  ascending=[False, False, True])
    return grouped[columns].reset_index(drop=True)


def quarterly_department_engagement(ds: HRDataset,
                                    year: Optional[int] = None,
                                    quarter: Optional[int] = None,
                                    precision: Optional[int] = AVG_PRECISION) -> pd.DataFrame:
    """Department engagement restricted to responses for one survey quarter."""
    today = date.today()
    year = year or today.year
    quarter = quarter or (today.month - 1) // 3 + 1
    columns = ["department_name", "avg_engagement_qtr"]

    surveys = ds.surveys[(ds.surveys["year"] == year) & (ds.surveys["quarter"] == quarter)]
    responses = ds.responses[ds.responses["survey_id"].isin(surveys["survey_id"])]
    df = _staff(ds).merge(responses, on="employee_id", how="inner")
    if df.empty:
        return _empty(columns)

    grouped = df.groupby("department_name")["engagement_score"].mean().reset_index(name="avg_engagement_qtr")
    grouped["avg_engagement_qtr"] = _round(grouped["avg_engagement_qtr"], precision)
    grouped = grouped.sort_values(["avg_engagement_qtr", "department_name"], ascending=[False, True])
    return grouped[columns].reset_index(drop=True)
