# hr_insights/generation/benefits.py

import numpy as np

from hr_insights.config import GenerationConfig
from hr_insights.generation.sampling import choose, days_before, randint_inclusive
from hr_insights.models import EmployeeBenefit

BENEFIT_CATALOGUE = [
    # (name, type, description)
    ("Health Insurance",       "Health",         "Medical coverage."),
    ("Dental & Vision",        "Health",         "Dental and vision coverage."),
    ("Retirement Plan (401k)", "Financial",      "401(k) with company match."),
    ("Commuter Stipend",       "Transportation", "Transit/parking stipend."),
    ("Gym Membership",         "Wellness",       "Subsidized gym access."),
]

ACTIVE = "Active"
CANCELLED = "Cancelled"


def generate_benefits(employee_id: int,
                      benefit_ids: list[int],
                      rng: np.random.Generator,
                      config: GenerationConfig) -> list[EmployeeBenefit]:
    # Same benefit may be drawn twice: re-enrolment after a cancellation
    count = randint_inclusive(rng, config.min_benefits, config.max_benefits)
    records = []
    for _ in range(count):
        benefit_id = choose(benefit_ids, rng)
        enrolled = days_before(rng, config.today, config.benefit_lookback_days)
        status = ACTIVE if rng.random() < config.benefit_active_probability else CANCELLED
        records.append(EmployeeBenefit(
            employee_id     = employee_id,
            benefit_id      = benefit_id,
            enrollment_date = enrolled,
            status          = status,
        ))
    return records
