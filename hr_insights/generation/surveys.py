# hr_insights/generation/surveys.py

from datetime import date
from typing import Optional

import numpy as np
from sqlmodel import Session, select

from hr_insights.config import GenerationConfig
from hr_insights.generation.reviews import quarter_of
from hr_insights.generation.sampling import days_before
from hr_insights.models import Survey, SurveyResponse

ENGAGEMENT = "Engagement"


def ensure_engagement_survey(session: Session, as_of: date) -> Survey:
    """Get or create the Engagement survey for the as-of quarter."""
    quarter, year = quarter_of(as_of), as_of.year
    survey = session.exec(
        select(Survey)
        .where(Survey.survey_type == ENGAGEMENT, Survey.quarter == quarter, Survey.year == year)
        .order_by(Survey.survey_id)
    ).first()
    if survey is None:
        survey = Survey(survey_type=ENGAGEMENT, quarter=quarter, year=year)
        session.add(survey)
        session.flush()
    return survey


def generate_survey_response(employee_id: int,
                             survey_id: int,
                             environment_satisfaction: Optional[int],
                             job_satisfaction: Optional[int],
                             rng: np.random.Generator,
                             config: GenerationConfig) -> SurveyResponse:
    return SurveyResponse(
        employee_id        = employee_id,
        survey_id          = survey_id,
        engagement_score   = environment_satisfaction,
        satisfaction_score = job_satisfaction,
        response_date      = days_before(rng, config.today, config.survey_lookback_days),
    )
