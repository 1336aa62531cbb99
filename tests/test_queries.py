from datetime import date

import pandas as pd
import pytest

from hr_insights.analytics import queries as q
from hr_insights.analytics.dataset import HRDataset, load_dataset
from hr_insights.exceptions import UnknownDimensionError
from hr_insights.generation.pipeline import run_generation
from tests.conftest import SOURCE_ROWS


def _employee(employee_id, first, last, department_id, job_id, years, attrition="No"):
    return {
        "employee_id": employee_id, "first_name": first, "last_name": last,
        "department_id": department_id, "job_id": job_id,
        "years_at_company": years, "attrition": attrition,
    }


def _review(review_id, employee_id, reviewer_id, day, score):
    return {
        "review_id": review_id, "employee_id": employee_id, "reviewer_id": reviewer_id,
        "review_date": day, "review_period": day.strftime("%Y-%m"), "score": score,
    }


def _response(response_id, employee_id, engagement, satisfaction, day, survey_id=1):
    return {
        "response_id": response_id, "employee_id": employee_id, "survey_id": survey_id,
        "engagement_score": engagement, "satisfaction_score": satisfaction, "response_date": day,
    }


def records(**overrides):
    tables = {
        "departments": [
            {"department_id": 1, "department_name": "Sales"},
            {"department_id": 2, "department_name": "Research & Development"},
            {"department_id": 3, "department_name": "Human Resources"},
        ],
        "job_roles": [
            {"job_id": 1, "job_title": "Manager"},
            {"job_id": 2, "job_title": "Sales Executive"},
        ],
        "employees": [
            _employee(1, "Ann", "Lee", 1, 2, 1, attrition="Yes"),
            _employee(2, "Bob", "Ray", 1, 2, 3),
            _employee(3, "Cy",  "Fox", 1, 1, 6),
            _employee(4, "Di",  "Kim", 2, 1, 0),
            _employee(5, "Ed",  "Orr", 3, 1, None),
        ],
        "reviews": [
            _review(1, 1, 3, date(2023, 1, 10), 3),
            _review(2, 1, 3, date(2023, 6, 1), 5),
            _review(3, 2, 3, date(2023, 6, 1), 2),
            _review(4, 3, None, date(2023, 6, 15), 4),
            _review(5, 4, 1, date(2023, 7, 2), 3),
        ],
        "surveys": [
            {"survey_id": 1, "survey_type": "Engagement", "quarter": 1, "year": 2024},
            {"survey_id": 2, "survey_type": "Engagement", "quarter": 2, "year": 2024},
        ],
        "responses": [
            _response(1, 1, 3, 2, date(2024, 1, 5)),
            _response(2, 2, 4, 4, date(2024, 1, 6)),
            _response(3, 3, 5, 3, date(2024, 1, 7)),
            _response(4, 4, 2, 5, date(2024, 1, 8)),
            _response(5, 5, 1, 1, date(2024, 1, 9)),
        ],
        "programs": [
            {"training_id": 1, "title": "Data Privacy Essentials"},
            {"training_id": 2, "title": "Leadership Fundamentals"},
            {"training_id": 3, "title": "Time Management"},
        ],
        "training": [
            {"record_id": 1, "employee_id": 1, "training_id": 1, "enrollment_date": date(2024, 3, 1)},
            {"record_id": 2, "employee_id": 2, "training_id": 1, "enrollment_date": date(2023, 1, 1)},
            {"record_id": 3, "employee_id": 3, "training_id": 2, "enrollment_date": date(2024, 5, 1)},
        ],
        "benefits": [
            {"benefit_id": 1, "benefit_name": "Health Insurance"},
            {"benefit_id": 2, "benefit_name": "Gym Membership"},
        ],
        "employee_benefits": [
            {"record_id": 1, "employee_id": 1, "benefit_id": 1, "enrollment_date": date(2022, 1, 1), "status": "Active"},
            {"record_id": 2, "employee_id": 2, "benefit_id": 1, "enrollment_date": date(2022, 1, 1), "status": "Cancelled"},
            {"record_id": 3, "employee_id": 3, "benefit_id": 1, "enrollment_date": date(2022, 1, 1), "status": "Active"},
            {"record_id": 4, "employee_id": 4, "benefit_id": 2, "enrollment_date": date(2022, 1, 1), "status": "Active"},
        ],
    }
    tables.update(overrides)
    return tables


@pytest.fixture
def ds():
    return HRDataset.from_records(**records())


# ── Dataset ──
def test_dataset_normalizes_types(ds):
    assert pd.api.types.is_datetime64_any_dtype(ds.reviews["review_date"])
    assert ds.reviews["reviewer_id"].isna().sum() == 1
    assert ds.employees["years_at_company"].dtype == float


def test_missing_tables_default_to_typed_empty_frames():
    empty = HRDataset()
    assert empty.reviews.empty
    assert "review_date" in empty.reviews.columns
    assert pd.api.types.is_datetime64_any_dtype(empty.training["enrollment_date"])


def test_dataset_rejects_unknown_tables():
    with pytest.raises(ValueError):
        HRDataset.from_records(salaries=[])


# ── Latest review ──
def test_latest_review_per_employee(ds):
    df = q.latest_review_per_employee(ds)

    assert list(df["employee_id"]) == [4, 1, 2, 3]
    ann = df[df["employee_id"] == 1].iloc[0]
    assert ann["review_date"] == pd.Timestamp("2023-06-01")
    assert ann["score"] == 5
    assert ann["full_name"] == "Ann Lee"


def test_latest_review_same_day_goes_to_highest_id():
    ds = HRDataset.from_records(**records(reviews=[
        _review(8, 1, 3, date(2023, 6, 1), 2),
        _review(7, 1, 3, date(2023, 6, 1), 1),
    ]))
    df = q.latest_review_per_employee(ds)
    assert list(df["review_id"]) == [8]
    assert list(df["score"]) == [2]


# ── Ranked averages ──
def test_department_engagement_rank(ds):
    df = q.department_engagement_rank(ds)

    assert list(df.columns) == ["department_name", "avg_engagement", "engagement_rank"]
    assert list(df["department_name"]) == ["Sales", "Research & Development", "Human Resources"]
    assert list(df["avg_engagement"]) == [4.0, 2.0, 1.0]
    assert list(df["engagement_rank"]) == [1, 2, 3]


def test_tied_groups_share_a_rank_and_skip_the_next():
    ds = HRDataset.from_records(**records(responses=[
        _response(1, 1, 4, 4, date(2024, 1, 5)),
        _response(2, 2, 4, 4, date(2024, 1, 5)),
        _response(3, 4, 4, 4, date(2024, 1, 5)),
        _response(4, 5, 3, 3, date(2024, 1, 5)),
    ]))
    df = q.ranked_group_average(ds, "engagement_score", "department")
    assert list(df["department_name"]) == ["Research & Development", "Sales", "Human Resources"]
    assert list(df["rank"]) == [1, 1, 3]


def test_ranked_average_by_job_role_on_review_scores(ds):
    df = q.ranked_group_average(ds, metric="score", by="job_role")
    assert list(df.columns) == ["job_title", "average", "rank"]
    assert list(df["job_title"]) == ["Manager", "Sales Executive"]
    assert list(df["average"]) == [3.5, 3.33]


def test_unrounded_average_when_precision_is_none(ds):
    df = q.ranked_group_average(ds, metric="score", by="job_role", precision=None)
    assert df.loc[1, "average"] == pytest.approx(10 / 3)


@pytest.mark.parametrize("kwargs", [
    {"by": "location"},
    {"metric": "salary"},
])
def test_unknown_dimension_or_metric(ds, kwargs):
    with pytest.raises(UnknownDimensionError):
        q.ranked_group_average(ds, **kwargs)


def test_dimension_without_rows_gives_empty_frame():
    empty = HRDataset.from_records(**records(responses=[]))
    df = q.ranked_group_average(empty)
    assert df.empty
    assert list(df.columns) == ["department_name", "average", "rank"]


# ── Tenure bands ──
def test_tenure_band_boundaries():
    assert [q.tenure_band(y) for y in (0, 1, 2, 4, 5, 30)] == ["0-1", "0-1", "2-4", "2-4", "5+", "5+"]
    assert q.tenure_band(None) is None


def test_engagement_by_tenure_band(ds):
    df = q.engagement_by_tenure_band(ds)

    # Employee 5 has no tenure and is left out
    assert list(zip(df["job_title"], df["tenure_band"])) == [
        ("Manager", "0-1"),
        ("Manager", "5+"),
        ("Sales Executive", "0-1"),
        ("Sales Executive", "2-4"),
    ]
    assert list(df["avg_engagement"]) == [2.0, 5.0, 3.0, 4.0]
    assert df["responses"].sum() == 4


# ── Below own-group average ──
def test_below_department_average_is_strict(ds):
    df = q.below_department_average(ds)

    # Sales mean is 3.5; the lone R&D review equals its own mean
    assert list(df["review_id"]) == [3, 1]
    assert set(df["department_avg"]) == {3.5}
    assert (df["score"] < df["department_avg"]).all()


# ── Coverage gap ──
def test_coverage_gap_is_a_set_difference(ds):
    assert list(q.coverage_gap(ds)["employee_id"]) == [5]
    assert list(q.coverage_gap(ds, "employees", "training")["employee_id"]) == [4, 5]


def test_coverage_gap_empty_when_covered(ds):
    assert q.coverage_gap(ds, "reviews", "responses").empty


def test_coverage_gap_unknown_table(ds):
    with pytest.raises(UnknownDimensionError):
        q.coverage_gap(ds, "payroll", "reviews")


# ── Running average ──
def test_running_average_is_a_prefix_mean():
    ds = HRDataset.from_records(**records(responses=[
        _response(1, 1, 2, 1, date(2024, 1, 1)),
        _response(2, 1, 5, 1, date(2024, 3, 1)),
        _response(3, 1, 4, 1, date(2024, 2, 1)),
        _response(4, 1, 3, 1, date(2024, 3, 1)),
        _response(5, 2, None, 1, date(2024, 1, 1)),
        _response(6, 2, 4, 1, date(2024, 2, 1)),
        _response(7, 99, 5, 1, date(2024, 1, 1)),
    ]))
    df = q.running_average(ds, precision=None)

    assert list(df["response_id"]) == [1, 3, 2, 4, 5, 6]
    first = df[df["employee_id"] == 1]
    assert list(first["running_avg"]) == pytest.approx([2, 3, 11 / 3, 3.5])
    second = df[df["employee_id"] == 2]["running_avg"].tolist()
    assert pd.isna(second[0])
    assert second[1] == 4.0


def test_running_engagement_rounds(ds):
    df = q.running_engagement(ds)
    assert "running_avg_engagement" in df.columns
    assert list(df["running_avg_engagement"]) == [3.0, 4.0, 5.0, 2.0, 1.0]


def test_running_average_rejects_review_scores(ds):
    with pytest.raises(UnknownDimensionError):
        q.running_average(ds, metric="score")


# ── Rollup ──
def test_rollup_total_row_is_last_and_adds_up(ds):
    df = q.rollup(ds.reviews, "reviewer_id", "score")

    assert list(df["label"]) == ["1", "3", "NULL", "ALL"]
    groups, total = df[~df["is_total"]], df.iloc[-1]
    assert total["is_total"]
    assert total["count"] == groups["count"].sum() == 5
    assert total["average"] == 3.4
    assert list(groups["average"]) == [3.0, 3.33, 4.0]


def test_rollup_of_empty_frame():
    df = q.rollup(HRDataset().reviews, "score", "score")
    assert len(df) == 1
    assert df.iloc[0]["label"] == "ALL"
    assert df.iloc[0]["count"] == 0


def test_score_distribution(ds):
    df = q.score_distribution(ds)
    assert list(df["score_bucket"]) == ["2", "3", "4", "5", "ALL"]
    assert list(df["cnt"]) == [1, 2, 1, 1, 5]
    assert pd.isna(df.iloc[-1]["score"])


# ── Trend and reviewer comparison ──
def test_monthly_review_trend(ds):
    df = q.monthly_review_trend(ds)
    assert list(df["month"]) == [pd.Timestamp("2023-01-01"), pd.Timestamp("2023-06-01"), pd.Timestamp("2023-07-01")]
    assert list(df["avg_score"]) == [3.0, 3.67, 3.0]
    assert list(df["reviews"]) == [1, 3, 1]


def test_reviewer_effectiveness(ds):
    df = q.reviewer_effectiveness(ds)
    assert list(df["reviewer_id"]) == [3, 1]
    assert list(df["team_avg_score"]) == [3.33, 3.0]
    assert list(df["reviews_given"]) == [3, 1]
    assert list(df["reviewer_latest_score"]) == [4.0, 5.0]


def test_reviewer_without_own_review_has_missing_score():
    base = records()
    ds = HRDataset.from_records(**records(reviews=base["reviews"] + [_review(6, 4, 5, date(2023, 8, 3), 5)]))
    df = q.reviewer_effectiveness(ds)
    row = df[df["reviewer_id"] == 5].iloc[0]
    assert pd.isna(row["reviewer_latest_score"])
    assert row["team_avg_score"] == 5.0


# ── Training recency ──
def test_no_recent_training(ds):
    df = q.no_recent_training(ds, as_of=date(2024, 6, 15))
    assert list(df["employee_id"]) == [2, 4, 5]


def test_enrolment_on_cutoff_day_counts_as_recent():
    ds = HRDataset.from_records(**records(training=[
        {"record_id": 1, "employee_id": 2, "training_id": 1, "enrollment_date": date(2023, 6, 16)},
    ]))
    df = q.no_recent_training(ds, as_of=date(2024, 6, 15), days=365)
    assert 2 not in set(df["employee_id"])


# ── Program, benefit and department reports ──
def test_training_vs_performance(ds):
    df = q.training_vs_performance(ds)
    assert list(df["employee_id"]) == [1, 3, 2]
    assert list(df["avg_score"]) == [4.0, 4.0, 2.0]


def test_top_training_programs(ds):
    df = q.top_training_programs(ds)
    assert list(df["title"]) == ["Data Privacy Essentials", "Leadership Fundamentals", "Time Management"]
    assert list(df["enrollments"]) == [2, 1, 0]
    assert len(q.top_training_programs(ds, limit=2)) == 2


def test_benefit_adoption(ds):
    df = q.benefit_adoption(ds)
    assert list(df["benefit_name"]) == ["Health Insurance", "Gym Membership"]
    assert list(df["total_enrollments"]) == [3, 1]
    assert list(df["active_enrollments"]) == [2, 1]
    assert list(df["active_pct"]) == [66.67, 100.0]


def test_attrition_by_department(ds):
    df = q.attrition_by_department(ds)
    assert df.iloc[0]["department_name"] == "Sales"
    assert df.iloc[0]["attrition_pct"] == 33.33
    assert df["headcount"].sum() == 5


def test_department_sentiment(ds):
    df = q.department_sentiment(ds)
    assert list(df["department_name"]) == ["Sales", "Research & Development", "Human Resources"]
    assert list(df["avg_satisfaction"]) == [3.0, 5.0, 1.0]


def test_quarterly_department_engagement(ds):
    df = q.quarterly_department_engagement(ds, year=2024, quarter=1)
    assert list(df["avg_engagement_qtr"]) == [4.0, 2.0, 1.0]

    empty = q.quarterly_department_engagement(ds, year=2024, quarter=2)
    assert empty.empty
    assert list(empty.columns) == ["department_name", "avg_engagement_qtr"]


# ── Empty store ──
@pytest.mark.parametrize("query", [
    q.latest_review_per_employee,
    q.department_engagement_rank,
    q.engagement_by_tenure_band,
    q.below_department_average,
    q.coverage_gap,
    q.running_engagement,
    q.monthly_review_trend,
    q.reviewer_effectiveness,
    q.no_recent_training,
    q.training_vs_performance,
    q.top_training_programs,
    q.benefit_adoption,
    q.attrition_by_department,
    q.department_sentiment,
])
def test_queries_on_an_empty_store(query):
    assert query(HRDataset()).empty


# ── Against generated data ──
def test_queries_over_generated_records(loaded_session, config):
    run_generation(loaded_session, config)
    ds = load_dataset(loaded_session)

    latest = q.latest_review_per_employee(ds)
    assert sorted(latest["employee_id"]) == sorted(row[0] for row in SOURCE_ROWS)
    assert q.score_distribution(ds).iloc[-1]["cnt"] == len(ds.reviews)
    assert q.coverage_gap(ds, "responses", "reviews").empty
    # Employee 4 had no training last year
    assert 4 in set(q.no_recent_training(ds, as_of=config.today)["employee_id"])
