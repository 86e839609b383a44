from typing import Any, Dict, Optional

from pydantic import BaseModel, field_validator


class TornErrorDetail(BaseModel):
    code: Optional[int] = None
    error: str = "Unknown API Error"


class TornRawCompany(BaseModel):
    name: Optional[str] = None
    company_type: Optional[int] = None
    rating: Optional[float] = None
    days_old: Optional[int] = None
    employees_hired: Optional[int] = None
    employees_capacity: Optional[int] = None
    daily_income: Optional[float] = None
    weekly_income: Optional[float] = None
    daily_customers: Optional[int] = None
    weekly_customers: Optional[int] = None


class TornCompaniesResponse(BaseModel):
    company: Optional[Dict[str, TornRawCompany]] = None
    error: Optional[TornErrorDetail] = None

    @field_validator("company", mode="before")
    @classmethod
    def empty_list_means_no_companies(cls, value: Any) -> Any:
        # Torn encodes an empty object as []
        if isinstance(value, list) and not value:
            return None
        return value
