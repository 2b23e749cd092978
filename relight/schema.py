from datetime import date as calendar_date
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Bearing(str, Enum):
    N = "N"
    NE = "NE"
    E = "E"
    SE = "SE"
    S = "S"
    SW = "SW"
    W = "W"
    NW = "NW"


class GenerateRequest(BaseModel):
    address: str = Field(min_length=5, max_length=200)
    date: str = Field(pattern=r"^\d{4}-\d{2}-\d{2}$")  # YYYY-MM-DD
    bearing: Bearing

    @field_validator("date")
    @classmethod
    def date_must_exist(cls, value: str) -> str:
        # the pattern alone lets through dates like 2024-02-30
        calendar_date.fromisoformat(value)
        return value


class GenerateResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    job_id: str = Field(alias="jobId")
    original_url: str = Field(alias="originalUrl")
    result_url: str = Field(alias="resultUrl")


class ErrorDetail(BaseModel):
    field: str
    message: str


class ErrorResponse(BaseModel):
    error: str
    details: Optional[List[ErrorDetail]] = None
