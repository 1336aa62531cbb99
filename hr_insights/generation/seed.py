# hr_insights/generation/seed.py
#
# Builds the reference data and placeholder employees from ibm_hr_raw.
# Every step is idempotent: rows that already exist are left alone.

import logging

from sqlmodel import Session, select

from hr_insights.generation.benefits import BENEFIT_CATALOGUE
from hr_insights.generation.identity import placeholder_identity
from hr_insights.generation.training import TRAINING_CATALOGUE
from hr_insights.models import (
    Benefit,
    Department,
    Employee,
    JobRole,
    SourceEmployee,
    TrainingProgram,
)

logger = logging.getLogger(__name__)


def _distinct_source_values(session: Session, column) -> list[str]:
    values = session.exec(select(column).where(column.is_not(None)).distinct()).all()
    return sorted(v for v in values if v)


def seed_lookups(session: Session) -> dict:
    """Departments and job roles from the source, plus the fixed catalogues."""
    added = {"departments": 0, "job_roles": 0, "training_programs": 0, "benefits": 0}

    existing = set(session.exec(select(Department.department_name)).all())
    for name in _distinct_source_values(session, SourceEmployee.department):
        if name not in existing:
            session.add(Department(department_name=name))
            added["departments"] += 1

    existing = set(session.exec(select(JobRole.job_title)).all())
    for title in _distinct_source_values(session, SourceEmployee.job_role):
        if title not in existing:
            session.add(JobRole(job_title=title))
            added["job_roles"] += 1

    existing = set(session.exec(select(TrainingProgram.title)).all())
    for title, topic, hours in TRAINING_CATALOGUE:
        if title not in existing:
            session.add(TrainingProgram(title=title, topic=topic, duration_hours=hours))
            added["training_programs"] += 1

    existing = set(session.exec(select(Benefit.benefit_name)).all())
    for name, benefit_type, description in BENEFIT_CATALOGUE:
        if name not in existing:
            session.add(Benefit(benefit_name=name, benefit_type=benefit_type, description=description))
            added["benefits"] += 1

    session.flush()
    logger.info("📚 Lookups seeded: %s", added)
    return added


def seed_employees(session: Session) -> int:
    """One placeholder employee per source row that has no employee yet."""
    departments = {d.department_name: d.department_id for d in session.exec(select(Department)).all()}
    job_roles = {j.job_title: j.job_id for j in session.exec(select(JobRole)).all()}
    existing = set(session.exec(select(Employee.employee_id)).all())

    added = 0
    for row in session.exec(select(SourceEmployee).order_by(SourceEmployee.employee_number)).all():
        if row.employee_number in existing:
            continue
        first, last, email = placeholder_identity(row.employee_number)
        session.add(Employee(
            employee_id      = row.employee_number,
            first_name       = first,
            last_name        = last,
            email            = email,
            gender           = row.gender,
            marital_status   = row.marital_status,
            department_id    = departments.get(row.department),
            job_id           = job_roles.get(row.job_role),
            job_level        = row.job_level,
            education_field  = row.education_field,
            education        = row.education,
            years_at_company = row.years_at_company,
            monthly_income   = row.monthly_income,
            attrition        = row.attrition,
        ))
        added += 1

    session.flush()
    logger.info("👥 Employees seeded: %d new, %d already present", added, len(existing))
    return added


def backfill_job_roles(session: Session) -> int:
    """Resolve job_id for employees whose job role was not matched at insert time."""
    job_roles = {j.job_title: j.job_id for j in session.exec(select(JobRole)).all()}
    source_roles = {
        r.employee_number: r.job_role for r in session.exec(select(SourceEmployee)).all()
    }

    fixed = 0
    for emp in session.exec(select(Employee).where(Employee.job_id.is_(None))).all():
        job_id = job_roles.get(source_roles.get(emp.employee_id))
        if job_id is None:
            continue
        emp.job_id = job_id
        session.add(emp)
        fixed += 1

    session.flush()
    if fixed:
        logger.info("  ↳ Job roles backfilled for %d employees", fixed)
    return fixed
