from datetime import date
from typing import Optional
from sqlmodel import SQLModel, Field


# ── Flat external source (IBM HR attrition export) ──
class SourceEmployee(SQLModel, table=True):
    __tablename__ = "ibm_hr_raw"

    employee_number: int = Field(primary_key=True)
    age: Optional[int] = Field(default=None)
    attrition: Optional[str] = Field(default="No")
    department: Optional[str] = Field(default=None)
    education: Optional[int] = Field(default=None)
    education_field: Optional[str] = Field(default=None)
    environment_satisfaction: Optional[int] = Field(default=None)
    gender: Optional[str] = Field(default=None)
    job_level: Optional[int] = Field(default=1)
    job_role: Optional[str] = Field(default=None)
    job_satisfaction: Optional[int] = Field(default=None)
    marital_status: Optional[str] = Field(default=None)
    monthly_income: Optional[int] = Field(default=None)
    performance_rating: Optional[int] = Field(default=None)
    training_times_last_year: Optional[int] = Field(default=0)
    years_at_company: Optional[int] = Field(default=None)


# ── Lookups ──
class Department(SQLModel, table=True):
    __tablename__ = "departments"

    department_id: Optional[int] = Field(default=None, primary_key=True)
    department_name: str = Field(max_length=100, unique=True)


class JobRole(SQLModel, table=True):
    __tablename__ = "job_roles"

    job_id: Optional[int] = Field(default=None, primary_key=True)
    job_title: str = Field(max_length=100, unique=True)


class Employee(SQLModel, table=True):
    __tablename__ = "employees"

    # Identity: employee_id is the source EmployeeNumber, never generated
    employee_id: int = Field(primary_key=True)
    first_name: str = Field(max_length=50)
    last_name: str = Field(max_length=50)
    email: Optional[str] = Field(default=None, max_length=120)

    # Demographics
    gender: Optional[str] = Field(default=None, max_length=20)
    marital_status: Optional[str] = Field(default=None, max_length=20)

    # Org placement
    department_id: Optional[int] = Field(default=None, foreign_key="departments.department_id")
    job_id: Optional[int] = Field(default=None, foreign_key="job_roles.job_id")
    job_level: Optional[int] = Field(default=None)

    # Education & tenure
    education_field: Optional[str] = Field(default=None, max_length=100)
    education: Optional[int] = Field(default=None)
    years_at_company: Optional[int] = Field(default=None)
    monthly_income: Optional[int] = Field(default=None)
    attrition: Optional[str] = Field(default="No", max_length=10)   # "Yes" / "No"


# ── Facts ──
class PerformanceReview(SQLModel, table=True):
    __tablename__ = "performance_reviews"

    review_id: Optional[int] = Field(default=None, primary_key=True)
    employee_id: int = Field(foreign_key="employees.employee_id", index=True)
    reviewer_id: Optional[int] = Field(default=None, foreign_key="employees.employee_id")
    review_date: date
    review_period: Optional[str] = Field(default=None, max_length=20)
    score: Optional[int] = Field(default=None)
    comments: Optional[str] = Field(default=None)


class Survey(SQLModel, table=True):
    __tablename__ = "surveys"

    survey_id: Optional[int] = Field(default=None, primary_key=True)
    survey_type: str = Field(max_length=50)
    quarter: Optional[int] = Field(default=None)
    year: Optional[int] = Field(default=None)


class SurveyResponse(SQLModel, table=True):
    __tablename__ = "survey_responses"

    response_id: Optional[int] = Field(default=None, primary_key=True)
    employee_id: int = Field(foreign_key="employees.employee_id", index=True)
    survey_id: int = Field(foreign_key="surveys.survey_id")
    engagement_score: Optional[int] = Field(default=None)     # EnvironmentSatisfaction
    satisfaction_score: Optional[int] = Field(default=None)   # JobSatisfaction
    response_date: date


class TrainingProgram(SQLModel, table=True):
    __tablename__ = "training_programs"

    training_id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(max_length=100)
    topic: Optional[str] = Field(default=None, max_length=100)
    duration_hours: Optional[int] = Field(default=None)


class EmployeeTraining(SQLModel, table=True):
    __tablename__ = "employee_training"

    record_id: Optional[int] = Field(default=None, primary_key=True)
    employee_id: int = Field(foreign_key="employees.employee_id", index=True)
    training_id: int = Field(foreign_key="training_programs.training_id")
    enrollment_date: date
    completion_status: Optional[str] = Field(default=None, max_length=20)


class Benefit(SQLModel, table=True):
    __tablename__ = "benefits"

    benefit_id: Optional[int] = Field(default=None, primary_key=True)
    benefit_name: str = Field(max_length=100)
    benefit_type: Optional[str] = Field(default=None, max_length=50)
    description: Optional[str] = Field(default=None)


class EmployeeBenefit(SQLModel, table=True):
    __tablename__ = "employee_benefits"

    record_id: Optional[int] = Field(default=None, primary_key=True)
    employee_id: int = Field(foreign_key="employees.employee_id", index=True)
    benefit_id: int = Field(foreign_key="benefits.benefit_id")
    enrollment_date: date
    status: Optional[str] = Field(default=None, max_length=20)
