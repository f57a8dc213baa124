"""
Pydantic schemas for chart-of-accounts operations.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from general_ledger.models.enums import AccountType


class AccountCreate(BaseModel):
    """Request to add an account to the chart."""
    code: str = Field(min_length=1, max_length=20)
    name: str = Field(min_length=1, max_length=100)
    account_type: AccountType = Field(alias="type")
    sub_type: str | None = Field(default=None, max_length=100)
    description: str | None = None
    is_active: bool = True

    model_config = {"populate_by_name": True}


class AccountUpdate(BaseModel):
    """Partial update; only the fields that were sent are applied."""
    code: str | None = Field(default=None, min_length=1, max_length=20)
    name: str | None = Field(default=None, min_length=1, max_length=100)
    account_type: AccountType | None = Field(default=None, alias="type")
    sub_type: str | None = Field(default=None, max_length=100)
    description: str | None = None
    is_active: bool | None = None

    model_config = {"populate_by_name": True}


class AccountResponse(BaseModel):
    id: int
    code: str
    name: str
    account_type: AccountType = Field(serialization_alias="type")
    sub_type: str | None
    description: str | None
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class Pagination(BaseModel):
    current_page: int
    per_page: int
    total_items: int
    total_pages: int

    @classmethod
    def build(cls, page: int, per_page: int, total_items: int) -> "Pagination":
        total_pages = max((total_items + per_page - 1) // per_page, 1)
        return cls(
            current_page=page,
            per_page=per_page,
            total_items=total_items,
            total_pages=total_pages,
        )


class AccountPage(BaseModel):
    data: list[AccountResponse]
    pagination: Pagination
