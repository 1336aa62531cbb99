# hr_insights/generation/pipeline.py
# Populates every generated table in one pass.
# Usage: python -m hr_insights.generation.pipeline [path/to/ibm_hr.csv] [--seed N] [--preset NAME]

import argparse
import logging
from typing import Callable, Iterable, Optional

import numpy as np
from sqlmodel import Session, select

from hr_insights.config import GenerationConfig, get_preset, settings
from hr_insights.generation.benefits import generate_benefits
from hr_insights.generation.identity import backfill_identities
from hr_insights.generation.reviewers import ReviewerPool, StaffMember
from hr_insights.generation.reviews import generate_baseline_review, generate_monthly_reviews
from hr_insights.generation.sampling import make_rng
from hr_insights.generation.seed import backfill_job_roles, seed_employees, seed_lookups
from hr_insights.generation.surveys import ensure_engagement_survey, generate_survey_response
from hr_insights.generation.training import generate_training
from hr_insights.models import SurveyResponse
from hr_insights.store import HRStore, month_start

logger = logging.getLogger(__name__)


def _per_employee(stage: str, staff: Iterable[StaffMember], build: Callable) -> tuple[list, list[int]]:
    """
    Run build(member) for every employee and collect the rows.
    A failure for one employee is logged and skipped; the others still run.
    """
    rows, failed = [], []
    for member in staff:
        try:
            rows.extend(build(member))
        except Exception as e:
            logger.warning("⚠️ %s: skipping employee %s: %s", stage, member.employee_id, e)
            failed.append(member.employee_id)
    return rows, failed


class GenerationPipeline:
    """Seeds reference data, then generates every fact table for all employees."""

    def __init__(self, session: Session, config: Optional[GenerationConfig] = None,
                 rng: Optional[np.random.Generator] = None):
        self.session = session
        self.config = config or GenerationConfig()
        self.rng = rng if rng is not None else make_rng(self.config.seed)
        self.store = HRStore(session)
        self.failures: dict[str, list[int]] = {}

    # ── Snapshot helpers ──
    def _staff(self) -> list[StaffMember]:
        return [StaffMember.from_employee(e) for e in self.store.employees()]

    def _source_by_id(self) -> dict:
        return {r.employee_number: r for r in self.store.source_rows()}

    # ── Stages ──
    def seed(self) -> dict:
        lookups = seed_lookups(self.session)
        employees = seed_employees(self.session)
        job_roles = backfill_job_roles(self.session)
        identities = backfill_identities(self.session)
        self.session.commit()
        return {
            "lookups":            lookups,
            "employees_seeded":   employees,
            "job_roles_fixed":    job_roles,
            "identities_assigned": identities,
        }

    def survey_responses(self) -> int:
        survey = ensure_engagement_survey(self.session, self.config.today)
        answered = set(self.session.exec(
            select(SurveyResponse.employee_id).where(SurveyResponse.survey_id == survey.survey_id)
        ).all())
        source = self._source_by_id()

        def build(member: StaffMember):
            row = source.get(member.employee_id)
            if row is None or member.employee_id in answered:
                return []
            return [generate_survey_response(
                member.employee_id, survey.survey_id,
                row.environment_satisfaction, row.job_satisfaction,
                self.rng, self.config,
            )]

        rows, self.failures["survey_responses"] = _per_employee("survey_responses", self._staff(), build)
        written = self.store.add_survey_responses(rows)
        self.session.commit()
        logger.info("📝 Survey responses: %d", written)
        return written

    def baseline_reviews(self) -> int:
        staff = self._staff()
        pool = ReviewerPool(staff)
        taken = self.store.review_months()
        current = month_start(self.config.today)
        source = self._source_by_id()

        def build(member: StaffMember):
            row = source.get(member.employee_id)
            if row is None or current in taken.get(member.employee_id, set()):
                return []
            return [generate_baseline_review(member, row.performance_rating, pool, self.rng, self.config)]

        rows, self.failures["baseline_reviews"] = _per_employee("baseline_reviews", staff, build)
        written = self.store.add_reviews(rows)
        self.session.commit()
        logger.info("⭐ Baseline reviews: %d", written)
        return written

    def monthly_reviews(self) -> int:
        staff = self._staff()
        pool = ReviewerPool(staff)
        taken = self.store.review_months()

        def build(member: StaffMember):
            months = taken.setdefault(member.employee_id, set())
            return generate_monthly_reviews(member, pool, months, self.rng, self.config)

        rows, self.failures["monthly_reviews"] = _per_employee("monthly_reviews", staff, build)
        written = self.store.add_reviews(rows)
        self.session.commit()
        logger.info("📅 Monthly reviews: %d", written)
        return written

    def training(self) -> int:
        program_ids = self.store.training_program_ids()
        trained = self.store.trained_employee_ids()
        source = self._source_by_id()

        def build(member: StaffMember):
            if member.employee_id in trained:
                return []
            row = source.get(member.employee_id)
            count = row.training_times_last_year if row is not None else 0
            return generate_training(member.employee_id, count, program_ids, self.rng, self.config)

        rows, self.failures["training"] = _per_employee("training", self._staff(), build)
        written = self.store.add_training(rows)
        self.session.commit()
        logger.info("🎓 Training enrolments: %d", written)
        return written

    def benefits(self) -> int:
        benefit_ids = self.store.benefit_ids()
        enrolled = self.store.enrolled_employee_ids()

        def build(member: StaffMember):
            if member.employee_id in enrolled:
                return []
            return generate_benefits(member.employee_id, benefit_ids, self.rng, self.config)

        rows, self.failures["benefits"] = _per_employee("benefits", self._staff(), build)
        written = self.store.add_benefits(rows)
        self.session.commit()
        logger.info("🩺 Benefit enrolments: %d", written)
        return written

    def run(self) -> dict:
        logger.info("🚀 Starting generation (as of %s)...", self.config.today)
        report = {"seed": self.seed()}
        report["survey_responses"] = self.survey_responses()
        report["baseline_reviews"] = self.baseline_reviews()
        report["monthly_reviews"] = self.monthly_reviews()
        report["training"] = self.training()
        report["benefits"] = self.benefits()
        report["failures"] = {stage: ids for stage, ids in self.failures.items() if ids}
        logger.info("✅ Generation complete.")
        return report


def run_generation(session: Session, config: Optional[GenerationConfig] = None,
                   rng: Optional[np.random.Generator] = None) -> dict:
    return GenerationPipeline(session, config=config, rng=rng).run()


def main(argv=None):
    from hr_insights.database import engine, init_db
    from hr_insights.logging_config import configure_logging
    from hr_insights.source import ingest_source, read_source_csv

    parser = argparse.ArgumentParser(description="Populate the HR tables with generated records.")
    parser.add_argument("csv", nargs="?", default=None, help="IBM HR export to load first")
    parser.add_argument("--seed", type=int, default=settings.seed)
    parser.add_argument("--preset", default="default")
    args = parser.parse_args(argv)

    configure_logging()
    init_db()
    config = get_preset(args.preset, seed=args.seed)

    with Session(engine) as session:
        if args.csv:
            ingest_source(session, read_source_csv(args.csv))
        report = run_generation(session, config)

    for key, value in report.items():
        logger.info("   %s: %s", key, value)
    return report


if __name__ == "__main__":
    main()
