# hr_insights/generation/identity.py
#
# Replaces placeholder identities (First<id> / Last<id>) with real-looking
# names. The mapping is a pure function of (employee_id, gender bucket), so
# re-running it always yields the same name for the same employee.

import logging
import re

from sqlmodel import Session, select

from hr_insights.models import Employee

logger = logging.getLogger(__name__)

FEMALE_FIRST_NAMES = [
    "Emma", "Olivia", "Sophia", "Ava", "Isabella", "Mia", "Amelia", "Harper", "Evelyn", "Abigail",
    "Ella", "Scarlett", "Chloe", "Grace", "Lily", "Victoria", "Hannah", "Zoe", "Nora", "Aria",
    "Layla", "Penelope", "Riley", "Zoey", "Nora", "Lillian", "Addison", "Aubrey", "Brooklyn", "Paisley",
]

MALE_FIRST_NAMES = [
    "Liam", "Noah", "Oliver", "Elijah", "James", "William", "Benjamin", "Lucas", "Henry", "Alexander",
    "Michael", "Daniel", "Matthew", "Jackson", "Samuel", "David", "Joseph", "Carter", "Owen", "Wyatt",
    "John", "Jack", "Luke", "Levi", "Gabriel", "Julian", "Dylan", "Isaac", "Anthony", "Andrew",
]

# Unisex fallback for anything not Female/Male
UNSPECIFIED_FIRST_NAMES = [
    "Alex", "Taylor", "Jordan", "Casey", "Riley", "Quinn", "Morgan", "Rowan", "Reese", "Dakota",
    "Parker", "Cameron", "Avery", "Charlie", "Elliot", "Jamie", "Skyler", "Emerson", "Hayden", "Sage",
]

LAST_NAMES = [
    "Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia", "Miller", "Davis", "Rodriguez", "Martinez",
    "Hernandez", "Lopez", "Gonzalez", "Wilson", "Anderson", "Thomas", "Taylor", "Moore", "Jackson", "Martin",
    "Lee", "Perez", "Thompson", "White", "Harris", "Sanchez", "Clark", "Ramirez", "Lewis", "Robinson",
    "Walker", "Young", "Allen", "King", "Wright", "Scott", "Torres", "Nguyen", "Hill", "Flores",
]

FIRST_NAMES_BY_BUCKET = {
    "F": FEMALE_FIRST_NAMES,
    "M": MALE_FIRST_NAMES,
    "U": UNSPECIFIED_FIRST_NAMES,
}

EMAIL_DOMAIN = "example.com"

_NON_LETTERS = re.compile(r"[^a-zA-Z]")


def gender_bucket(gender: str | None) -> str:
    g = (gender or "").strip().lower()
    if g == "female":
        return "F"
    if g == "male":
        return "M"
    return "U"


def pick_name(employee_id: int, names: list[str]) -> str:
    # 1-based index ((id - 1) mod n) + 1, expressed on a 0-based list
    return names[(employee_id - 1) % len(names)]


def build_email(first_name: str, last_name: str, employee_id: int) -> str:
    return (
        _NON_LETTERS.sub("", first_name) + "." + _NON_LETTERS.sub("", last_name)
        + str(employee_id) + "@" + EMAIL_DOMAIN
    ).lower()


def assign_identity(employee_id: int, gender: str | None) -> tuple[str, str, str]:
    """Return (first_name, last_name, email) for an employee id and gender."""
    first = pick_name(employee_id, FIRST_NAMES_BY_BUCKET[gender_bucket(gender)])
    last = pick_name(employee_id, LAST_NAMES)
    return first, last, build_email(first, last, employee_id)


def placeholder_identity(employee_id: int) -> tuple[str, str, str]:
    return f"First{employee_id}", f"Last{employee_id}", f"employee{employee_id}@{EMAIL_DOMAIN}"


def is_placeholder(first_name: str | None, last_name: str | None) -> bool:
    return (
        (first_name or "").lower().startswith("first")
        or (last_name or "").lower().startswith("last")
    )


def backfill_identities(session: Session) -> int:
    """
    Rewrite every placeholder employee with its deterministic identity.
    Already customised employees are left untouched. Returns rows changed.
    """
    employees = session.exec(select(Employee)).all()
    changed = 0
    for emp in employees:
        if not is_placeholder(emp.first_name, emp.last_name):
            continue
        emp.first_name, emp.last_name, emp.email = assign_identity(emp.employee_id, emp.gender)
        session.add(emp)
        changed += 1

    session.flush()
    logger.info("🪪 Identities assigned: %d (skipped %d customised)", changed, len(employees) - changed)
    return changed
