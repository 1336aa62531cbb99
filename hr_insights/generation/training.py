# hr_insights/generation/training.py

from typing import Optional

import numpy as np

from hr_insights.config import GenerationConfig
from hr_insights.generation.sampling import choose, days_before
from hr_insights.models import EmployeeTraining

COMPLETION_STATUSES = ["Completed", "In Progress", "Not Started"]

TRAINING_CATALOGUE = [
    # (title, topic, duration_hours)
    ("Leadership Skills",       "Leadership",   16),
    ("Technical Certification", "Technical",    40),
    ("Time Management",         "Productivity",  8),
]


def training_count(trainings_last_year: Optional[int]) -> int:
    return max(int(trainings_last_year or 0), 0)


def generate_training(employee_id: int,
                      trainings_last_year: Optional[int],
                      program_ids: list[int],
                      rng: np.random.Generator,
                      config: GenerationConfig) -> list[EmployeeTraining]:
    """One enrolment per training the employee attended last year."""
    records = []
    for _ in range(training_count(trainings_last_year)):
        records.append(EmployeeTraining(
            employee_id       = employee_id,
            training_id       = choose(program_ids, rng),
            enrollment_date   = days_before(rng, config.today, config.training_lookback_days),
            completion_status = choose(COMPLETION_STATUSES, rng),
        ))
    return records
