"""Date range value object."""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field, model_validator


class DateRange(BaseModel):
    """Inclusive calendar-date window the card portal can answer in one call."""

    from_date: date = Field(..., description="First day (inclusive)")
    until_date: date = Field(..., description="Last day (inclusive)")

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_order(self) -> "DateRange":
        if self.from_date > self.until_date:
            msg = (
                f"from_date {self.from_date} must not be after "
                f"until_date {self.until_date}"
            )
            raise ValueError(msg)
        return self

    @property
    def span_days(self) -> int:
        """Distance between the two boundary dates (0 for a single day)."""
        return (self.until_date - self.from_date).days

    def __str__(self) -> str:
        return f"{self.from_date.isoformat()} to {self.until_date.isoformat()}"
