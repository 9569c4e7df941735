import datetime as dt
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from app.models.enums import TransactionType


class TransactionCreate(BaseModel):
    date: dt.date
    type: TransactionType
    amount: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    category: str | None = Field(default=None, max_length=64)
    description: str = Field(min_length=1, max_length=255)

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("description")
    @classmethod
    def validate_description(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("Description must not be empty")
        return normalized

    @model_validator(mode="after")
    def require_expenditure_category(self) -> "TransactionCreate":
        if self.type == TransactionType.EXPENDITURE and (self.category is None or not self.category.strip()):
            raise ValueError("Expenditure requires a category")
        return self


class TransactionRead(BaseModel):
    id: int
    date: dt.date
    type: TransactionType
    amount: Decimal
    category: str | None
    description: str
    created_at: dt.datetime | None
    user_email: str | None = None
    user_name: str | None = None


class TransactionImportRequest(BaseModel):
    records: list[dict[str, Any]] = Field(min_length=1, max_length=1000)


class TransactionImportResponse(BaseModel):
    inserted: int
    errors: list[str] = Field(default_factory=list)
