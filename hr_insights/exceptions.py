"""Error taxonomy for generation and analytics."""


class HRInsightsError(Exception):
    """Base class for all hr_insights errors."""


class ReferentialViolation(HRInsightsError):
    """A generated row references an entity that does not exist.

    This is a generator bug and aborts the run.
    """

    def __init__(self, table: str, column: str, value):
        self.table = table
        self.column = column
        self.value = value
        super().__init__(f"{table}.{column}={value!r} does not resolve to an existing row")


class ConstraintViolation(HRInsightsError):
    """A generated review would duplicate an (employee, month) pair."""

    def __init__(self, employee_id: int, period: str):
        self.employee_id = employee_id
        self.period = period
        super().__init__(f"Employee {employee_id} already has a review in {period}")


class EmptyPopulationError(HRInsightsError):
    """A random choice was requested over an empty candidate pool."""


class UnknownDimensionError(HRInsightsError, ValueError):
    """An analytic query was asked to group or score by an unsupported column."""


class SourceDataError(HRInsightsError, ValueError):
    """The external source table is missing columns the core depends on."""
