# hr_insights/generation/reviews.py

from datetime import date
from typing import Optional

import numpy as np

from hr_insights.config import GenerationConfig
from hr_insights.generation.reviewers import ReviewerPool, StaffMember
from hr_insights.generation.sampling import (
    month_starts,
    randint_inclusive,
    sample_without_replacement,
)
from hr_insights.models import PerformanceReview

AUTO_REVIEW_COMMENT = "Auto-generated review"


def quarter_of(day: date) -> int:
    return (day.month - 1) // 3 + 1


def quarter_label(day: date) -> str:
    return f"{day.year}-Q{quarter_of(day)}"


def plan_monthly_reviews(subject: StaffMember,
                         reviewer_id: Optional[int],
                         candidate_months: list[date],
                         taken_months: set[date],
                         rng: np.random.Generator,
                         config: GenerationConfig) -> list[PerformanceReview]:
    """
    Reviews for one employee over sampled months.

    Months already holding a review for this employee are skipped, and each
    written month is added to taken_months so later batches see it too.
    """
    sampled = sample_without_replacement(
        candidate_months, rng, config.min_review_months, config.max_review_months
    )

    reviews = []
    for month in sampled:
        # Draws happen before the skip check so the stream is stable per employee
        day = randint_inclusive(rng, 1, config.review_day_max)
        score = randint_inclusive(rng, config.score_min, config.score_max)
        if month in taken_months:
            continue
        reviews.append(PerformanceReview(
            employee_id   = subject.employee_id,
            reviewer_id   = reviewer_id,
            review_date   = month.replace(day=day),
            review_period = month.strftime("%Y-%m"),
            score         = score,
            comments      = AUTO_REVIEW_COMMENT,
        ))
        taken_months.add(month)
    return reviews


def generate_monthly_reviews(subject: StaffMember,
                             pool: ReviewerPool,
                             taken_months: set[date],
                             rng: np.random.Generator,
                             config: GenerationConfig) -> list[PerformanceReview]:
    """One reviewer per employee per pass, shared by all of that pass's reviews."""
    reviewer_id = pool.pick(subject, rng)
    candidates = month_starts(config.today, config.review_window_months)
    return plan_monthly_reviews(subject, reviewer_id, candidates, taken_months, rng, config)


def generate_baseline_review(subject: StaffMember,
                             rating: Optional[int],
                             pool: ReviewerPool,
                             rng: np.random.Generator,
                             config: GenerationConfig) -> PerformanceReview:
    """The as-of quarter review carrying the source PerformanceRating."""
    today = config.today
    if rating is not None:
        rating = min(max(int(rating), config.score_min), config.score_max)
    return PerformanceReview(
        employee_id   = subject.employee_id,
        reviewer_id   = pool.pick(subject, rng),
        review_date   = today,
        review_period = quarter_label(today),
        score         = rating,
        comments      = None,
    )
