# hr_insights/analytics/dataset.py

from dataclasses import dataclass, fields
from typing import Optional

import pandas as pd
from sqlmodel import Session, select

from hr_insights.models import (
    Benefit,
    Department,
    Employee,
    EmployeeBenefit,
    EmployeeTraining,
    JobRole,
    PerformanceReview,
    Survey,
    SurveyResponse,
    TrainingProgram,
)

# Frame name → (table model, date columns)
TABLES = {
    "employees":         (Employee,          []),
    "departments":       (Department,        []),
    "job_roles":         (JobRole,           []),
    "reviews":           (PerformanceReview, ["review_date"]),
    "surveys":           (Survey,            []),
    "responses":         (SurveyResponse,    ["response_date"]),
    "programs":          (TrainingProgram,   []),
    "training":          (EmployeeTraining,  ["enrollment_date"]),
    "benefits":          (Benefit,           []),
    "employee_benefits": (EmployeeBenefit,   ["enrollment_date"]),
}

SCORE_COLUMNS = {"score", "engagement_score", "satisfaction_score", "years_at_company", "job_level"}


def _frame(model, records: list[dict], date_columns: list[str]) -> pd.DataFrame:
    """Frame with every model column present, even when there are no rows."""
    df = pd.DataFrame(records, columns=list(model.model_fields))
    for col in df.columns:
        if col.endswith("_id"):
            df[col] = pd.to_numeric(df[col]).astype("Int64")
        elif col in SCORE_COLUMNS:
            df[col] = pd.to_numeric(df[col]).astype(float)
    for col in date_columns:
        df[col] = pd.to_datetime(df[col])
    return df


@dataclass
class HRDataset:
    """In-memory snapshot of the HR tables, one DataFrame per table."""

    employees:         Optional[pd.DataFrame] = None
    departments:       Optional[pd.DataFrame] = None
    job_roles:         Optional[pd.DataFrame] = None
    reviews:           Optional[pd.DataFrame] = None
    surveys:           Optional[pd.DataFrame] = None
    responses:         Optional[pd.DataFrame] = None
    programs:          Optional[pd.DataFrame] = None
    training:          Optional[pd.DataFrame] = None
    benefits:          Optional[pd.DataFrame] = None
    employee_benefits: Optional[pd.DataFrame] = None

    def __post_init__(self):
        for f in fields(self):
            model, date_columns = TABLES[f.name]
            value = getattr(self, f.name)
            if value is None:
                value = []
            if isinstance(value, pd.DataFrame):
                value = value.to_dict(orient="records")
            setattr(self, f.name, _frame(model, list(value), date_columns))

    @classmethod
    def from_records(cls, **tables: list[dict]) -> "HRDataset":
        unknown = set(tables) - set(TABLES)
        if unknown:
            raise ValueError(f"Unknown tables: {sorted(unknown)}")
        return cls(**tables)


def load_dataset(session: Session) -> HRDataset:
    """Read every table into an HRDataset."""
    tables = {}
    for name, (model, _) in TABLES.items():
        rows = session.exec(select(model)).all()
        tables[name] = [row.model_dump() for row in rows]
    return HRDataset(**tables)
