"""
Shared fixtures: an in-memory SQLite store, a small IBM-style source frame,
and a seeded random generator.
"""

from datetime import date

import numpy as np
import pandas as pd
import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

import hr_insights.models  # noqa: F401
from hr_insights.config import GenerationConfig
from hr_insights.source import ingest_source

AS_OF = date(2024, 6, 15)

SOURCE_ROWS = [
    # EmployeeNumber, Department, JobRole, JobLevel, Gender, Training, Perf, EnvSat, JobSat, Years, Attrition
    (1,  "Sales",                  "Sales Executive",      2, "Female", 3, 3, 2, 4, 1,  "Yes"),
    (2,  "Research & Development", "Research Scientist",   1, "Male",   2, 4, 3, 2, 10, "No"),
    (4,  "Research & Development", "Laboratory Technician", 1, "Male",  0, 3, 4, 3, 0,  "Yes"),
    (5,  "Research & Development", "Manager",              4, "Female", 4, 3, 4, 3, 8,  "No"),
    (7,  "Sales",                  "Sales Representative", 1, "Male",   1, 4, 1, 4, 2,  "No"),
    (8,  "Sales",                  "Manager",              5, "Female", 5, 3, 3, 1, 7,  "No"),
    (10, "Human Resources",        "Human Resources",      2, "Other",  2, 3, 3, 3, 4,  "No"),
]


def make_source_frame(rows=SOURCE_ROWS) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "EmployeeNumber":          r[0],
                "Department":              r[1],
                "JobRole":                 r[2],
                "JobLevel":                r[3],
                "Gender":                  r[4],
                "TrainingTimesLastYear":   r[5],
                "PerformanceRating":       r[6],
                "EnvironmentSatisfaction": r[7],
                "JobSatisfaction":         r[8],
                "YearsAtCompany":          r[9],
                "Attrition":               r[10],
                "Age":                     30 + r[0],
                "MaritalStatus":           "Single",
                "MonthlyIncome":           4000 + 100 * r[0],
                "Education":               3,
                "EducationField":          "Life Sciences",
            }
            for r in rows
        ]
    )


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def source_frame():
    return make_source_frame()


@pytest.fixture
def loaded_session(session, source_frame):
    ingest_source(session, source_frame)
    return session


@pytest.fixture
def config():
    return GenerationConfig(as_of=AS_OF, seed=7)


@pytest.fixture
def rng():
    return np.random.default_rng(1234)
