import re
from datetime import date
from typing import Annotated, Any, List

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

# PostgreSQL INTEGER
INT32_MAX = 2**31 - 1

_ISO_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")


def _not_bool(value: Any) -> Any:
    # bool is an int subclass; a checkbox value is never a count
    if isinstance(value, bool):
        raise ValueError("boolean is not an integer")
    return value


def _iso_date_string(value: Any) -> Any:
    # pydantic would also read numbers and digit strings as unix timestamps
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not _ISO_DATE.fullmatch(value.strip()):
        raise ValueError("expected a YYYY-MM-DD date")
    return value.strip()


RowId = Annotated[int, BeforeValidator(_not_bool), Field(ge=1, le=INT32_MAX)]
Count = Annotated[int, BeforeValidator(_not_bool), Field(ge=0, le=INT32_MAX)]
WeekEnding = Annotated[date, BeforeValidator(_iso_date_string)]


class RecordCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type_id: RowId = Field(alias="typeId")
    week_ending: WeekEnding = Field(alias="weekEnding")
    full_count: Count = Field(alias="fullCount")
    empty_count: Count = Field(alias="emptyCount")


class SubmissionCreate(BaseModel):
    """A submission that already passed the ordered payload checks."""
    model_config = ConfigDict(populate_by_name=True)

    branch_id: RowId = Field(alias="branchId")
    access_code: str = Field(alias="accessCode", min_length=1)
    records: List[RecordCreate] = Field(min_length=1)

    def tuples(self) -> list[tuple[int, int, date]]:
        return [(self.branch_id, r.type_id, r.week_ending) for r in self.records]


def duplicate_to_schema(branch_id: int, type_id: int, week_ending: date) -> dict:
    return {"branchId": branch_id, "typeId": type_id, "weekEnding": week_ending.isoformat()}
