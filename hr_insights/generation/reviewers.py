# hr_insights/generation/reviewers.py

from dataclasses import dataclass
from typing import Optional

import numpy as np

from hr_insights.exceptions import EmptyPopulationError
from hr_insights.generation.sampling import choose


@dataclass(frozen=True)
class StaffMember:
    employee_id: int
    department_id: Optional[int]
    job_level:     Optional[int]

    @classmethod
    def from_employee(cls, db_employee) -> "StaffMember":
        return cls(
            employee_id=db_employee.employee_id,
            department_id=db_employee.department_id,
            job_level=db_employee.job_level,
        )


class ReviewerPool:
    """
    Two-tier reviewer choice within a department:
      1. a colleague with a strictly higher job level (manager-like)
      2. otherwise any other colleague
    No colleague at all → no reviewer.
    """

    def __init__(self, staff: list[StaffMember]):
        self.by_department: dict[int, list[StaffMember]] = {}
        for member in staff:
            if member.department_id is None:
                continue
            self.by_department.setdefault(member.department_id, []).append(member)

    def peers(self, subject: StaffMember) -> list[int]:
        return [
            m.employee_id
            for m in self.by_department.get(subject.department_id, [])
            if m.employee_id != subject.employee_id
        ]

    def seniors(self, subject: StaffMember) -> list[int]:
        if subject.job_level is None:
            return []
        return [
            m.employee_id
            for m in self.by_department.get(subject.department_id, [])
            if m.employee_id != subject.employee_id
            and m.job_level is not None
            and m.job_level > subject.job_level
        ]

    def pick(self, subject: StaffMember, rng: np.random.Generator) -> Optional[int]:
        seniors = self.seniors(subject)
        if seniors:
            return choose(seniors, rng)
        try:
            return choose(self.peers(subject), rng)
        except EmptyPopulationError:
            return None
