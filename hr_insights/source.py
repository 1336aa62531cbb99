# hr_insights/source.py
#
# Loads the flat IBM HR export into the ibm_hr_raw table:
#   - Required column check (only the columns generation reads)
#   - Numeric coercion, defaults and clipping
#   - Duplicate EmployeeNumber removal

import logging

import pandas as pd
from sqlmodel import Session, select

from hr_insights.exceptions import SourceDataError
from hr_insights.models import SourceEmployee

logger = logging.getLogger(__name__)

# ── Hard required: generation cannot proceed without these ──
REQUIRED_COLUMNS = [
    "EmployeeNumber",
    "Department",
    "JobRole",
    "JobLevel",
    "Gender",
]

# ── Optional: filled with defaults if missing ──
OPTIONAL_COLUMNS = {
    "Age":                     None,
    "Attrition":               "No",
    "Education":               None,
    "EducationField":          None,
    "EnvironmentSatisfaction": None,
    "JobSatisfaction":         None,
    "MaritalStatus":           None,
    "MonthlyIncome":           None,
    "PerformanceRating":       None,
    "TrainingTimesLastYear":   0,
    "YearsAtCompany":          None,
}

# Source column → ibm_hr_raw attribute
FIELD_MAP = {
    "EmployeeNumber":          "employee_number",
    "Age":                     "age",
    "Attrition":               "attrition",
    "Department":              "department",
    "Education":               "education",
    "EducationField":          "education_field",
    "EnvironmentSatisfaction": "environment_satisfaction",
    "Gender":                  "gender",
    "JobLevel":                "job_level",
    "JobRole":                 "job_role",
    "JobSatisfaction":         "job_satisfaction",
    "MaritalStatus":           "marital_status",
    "MonthlyIncome":           "monthly_income",
    "PerformanceRating":       "performance_rating",
    "TrainingTimesLastYear":   "training_times_last_year",
    "YearsAtCompany":          "years_at_company",
}

# Review score scale the ratings feed into
RATING_MIN, RATING_MAX = 1, 5

_INT_COLUMNS = [
    "Age", "Education", "EnvironmentSatisfaction", "JobSatisfaction",
    "MonthlyIncome", "PerformanceRating", "YearsAtCompany",
]


def _to_int(series: pd.Series) -> pd.Series:
    return pd.to_numeric(series, errors="coerce").round(0).astype("Int64")


def load_source_frame(df: pd.DataFrame) -> pd.DataFrame:
    """
    Validate and clean a raw IBM HR frame.
    Returns a frame whose columns are the ibm_hr_raw attribute names.
    """
    missing = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing:
        raise SourceDataError(f"Missing required source columns: {missing}")

    df = df.copy()
    for col, default in OPTIONAL_COLUMNS.items():
        if col not in df.columns:
            df[col] = default
            logger.info("  ↳ %s: not found — using default (%s)", col, default)

    # --- EmployeeNumber ---
    df["EmployeeNumber"] = pd.to_numeric(df["EmployeeNumber"], errors="coerce").round(0)
    df = df.dropna(subset=["EmployeeNumber"])
    df["EmployeeNumber"] = df["EmployeeNumber"].astype(int)

    before = len(df)
    df = df.drop_duplicates(subset=["EmployeeNumber"])
    if len(df) < before:
        logger.warning("  ↳ Removed %d duplicate EmployeeNumbers", before - len(df))

    # --- JobLevel ---
    df["JobLevel"] = pd.to_numeric(df["JobLevel"], errors="coerce").round(0).fillna(1).astype(int)
    df["JobLevel"] = df["JobLevel"].clip(lower=1)

    # --- TrainingTimesLastYear ---
    df["TrainingTimesLastYear"] = pd.to_numeric(df["TrainingTimesLastYear"], errors="coerce")
    df["TrainingTimesLastYear"] = df["TrainingTimesLastYear"].fillna(0).round(0).astype(int).clip(lower=0)

    for col in _INT_COLUMNS:
        df[col] = _to_int(df[col])

    # --- PerformanceRating ---
    df["PerformanceRating"] = df["PerformanceRating"].clip(lower=RATING_MIN, upper=RATING_MAX)

    # --- Normalize string columns ---
    df["Attrition"] = df["Attrition"].fillna("No").astype(str).str.strip().str.capitalize()
    df["Attrition"] = df["Attrition"].map({"Yes": "Yes", "No": "No"}).fillna("No")
    for col in ["Department", "JobRole", "Gender", "MaritalStatus", "EducationField"]:
        df[col] = df[col].where(df[col].isna(), df[col].astype(str).str.strip())

    df = df[list(FIELD_MAP.keys())].rename(columns=FIELD_MAP)
    return df.sort_values("employee_number").reset_index(drop=True)


def _clean_value(value):
    if pd.isna(value):
        return None
    # numpy scalars → plain Python for the DB driver
    return value.item() if hasattr(value, "item") else value


def ingest_source(session: Session, df: pd.DataFrame) -> int:
    """Replace the contents of ibm_hr_raw with the cleaned frame."""
    frame = load_source_frame(df)
    rows = [
        SourceEmployee(**{k: _clean_value(v) for k, v in record.items()})
        for record in frame.to_dict(orient="records")
    ]

    for old in session.exec(select(SourceEmployee)).all():
        session.delete(old)
    session.flush()
    session.add_all(rows)
    session.commit()

    logger.info("✅ %d source rows loaded into ibm_hr_raw", len(rows))
    return len(rows)


def read_source_csv(path: str) -> pd.DataFrame:
    logger.info("📄 Reading source export from %s", path)
    return pd.read_csv(path)
