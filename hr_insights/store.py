"""Data access layer for the HR entity store.

Reads the lookup and fact tables the generator needs and guards every
insert with referential and monthly-uniqueness checks.
"""

import logging
from collections import defaultdict
from collections.abc import Iterable
from datetime import date

from sqlmodel import Session, select

from hr_insights.exceptions import ConstraintViolation, ReferentialViolation
from hr_insights.models import (
    Benefit,
    Department,
    Employee,
    EmployeeBenefit,
    EmployeeTraining,
    JobRole,
    PerformanceReview,
    SourceEmployee,
    Survey,
    SurveyResponse,
    TrainingProgram,
)

logger = logging.getLogger(__name__)


def month_start(day: date) -> date:
    return day.replace(day=1)


def _require(valid_ids: set, value, table: str, column: str) -> None:
    if value not in valid_ids:
        raise ReferentialViolation(table, column, value)


class HRStore:
    """Session-bound access to the HR tables."""

    def __init__(self, session: Session):
        self.session = session

    # ── Reads ──
    def employees(self) -> list[Employee]:
        return list(self.session.exec(select(Employee).order_by(Employee.employee_id)).all())

    def employee_ids(self) -> set[int]:
        return set(self.session.exec(select(Employee.employee_id)).all())

    def source_rows(self) -> list[SourceEmployee]:
        return list(
            self.session.exec(select(SourceEmployee).order_by(SourceEmployee.employee_number)).all()
        )

    def department_ids(self) -> set[int]:
        return set(self.session.exec(select(Department.department_id)).all())

    def job_ids(self) -> set[int]:
        return set(self.session.exec(select(JobRole.job_id)).all())

    def training_program_ids(self) -> list[int]:
        return sorted(self.session.exec(select(TrainingProgram.training_id)).all())

    def benefit_ids(self) -> list[int]:
        return sorted(self.session.exec(select(Benefit.benefit_id)).all())

    def survey_ids(self) -> set[int]:
        return set(self.session.exec(select(Survey.survey_id)).all())

    def trained_employee_ids(self) -> set[int]:
        return set(self.session.exec(select(EmployeeTraining.employee_id).distinct()).all())

    def enrolled_employee_ids(self) -> set[int]:
        return set(self.session.exec(select(EmployeeBenefit.employee_id).distinct()).all())

    def review_months(self) -> dict[int, set[date]]:
        """Calendar months (as first-of-month dates) already reviewed, per employee."""
        months = defaultdict(set)
        rows = self.session.exec(
            select(PerformanceReview.employee_id, PerformanceReview.review_date)
        ).all()
        for employee_id, review_date in rows:
            months[employee_id].add(month_start(review_date))
        return months

    # ── Guarded writes ──
    def add_reviews(self, reviews: Iterable[PerformanceReview], monthly: bool = True) -> int:
        """
        Insert reviews after checking every reference.
        With monthly=True, also refuse a second review for an employee in a month.
        """
        reviews = list(reviews)
        employee_ids = self.employee_ids()
        taken = self.review_months() if monthly else {}

        for review in reviews:
            _require(employee_ids, review.employee_id, "performance_reviews", "employee_id")
            if review.reviewer_id is not None:
                _require(employee_ids, review.reviewer_id, "performance_reviews", "reviewer_id")
                if review.reviewer_id == review.employee_id:
                    raise ReferentialViolation(
                        "performance_reviews", "reviewer_id", review.reviewer_id
                    )
            if monthly:
                key = month_start(review.review_date)
                seen = taken.setdefault(review.employee_id, set())
                if key in seen:
                    raise ConstraintViolation(review.employee_id, key.strftime("%Y-%m"))
                seen.add(key)

        self.session.add_all(reviews)
        self.session.flush()
        return len(reviews)

    def add_training(self, records: Iterable[EmployeeTraining]) -> int:
        records = list(records)
        employee_ids = self.employee_ids()
        program_ids = set(self.training_program_ids())
        for record in records:
            _require(employee_ids, record.employee_id, "employee_training", "employee_id")
            _require(program_ids, record.training_id, "employee_training", "training_id")
        self.session.add_all(records)
        self.session.flush()
        return len(records)

    def add_benefits(self, records: Iterable[EmployeeBenefit]) -> int:
        records = list(records)
        employee_ids = self.employee_ids()
        benefit_ids = set(self.benefit_ids())
        for record in records:
            _require(employee_ids, record.employee_id, "employee_benefits", "employee_id")
            _require(benefit_ids, record.benefit_id, "employee_benefits", "benefit_id")
        self.session.add_all(records)
        self.session.flush()
        return len(records)

    def add_survey_responses(self, responses: Iterable[SurveyResponse]) -> int:
        responses = list(responses)
        employee_ids = self.employee_ids()
        survey_ids = self.survey_ids()
        for response in responses:
            _require(employee_ids, response.employee_id, "survey_responses", "employee_id")
            _require(survey_ids, response.survey_id, "survey_responses", "survey_id")
        self.session.add_all(responses)
        self.session.flush()
        return len(responses)
