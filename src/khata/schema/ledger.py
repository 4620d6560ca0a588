"""
Ledger records consumed by the aggregation views.

Remote payloads are loosely shaped JSON. These models accept the fields the
views need and ignore everything else.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime
from enum import Enum
from typing import Any, TypeVar

from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)


class TransactionType(str, Enum):
    """Direction of a khata entry."""

    CREDIT = "credit"  # Goods given on credit, customer owes more
    PAYMENT = "payment"  # Customer paid back


class Transaction(BaseModel):
    """
    A single khata entry.

    Types other than credit and payment are kept as plain strings so the
    entry still counts towards period totals.
    """

    id: str | None = Field(default=None, validation_alias=AliasChoices("id", "$id"))
    customer_id: str | None = None
    transaction_type: TransactionType | str = Field(
        validation_alias=AliasChoices("transaction_type", "type"),
        union_mode="left_to_right",
    )
    amount: float = 0.0
    created_at: datetime = Field(validation_alias=AliasChoices("created_at", "$createdAt"))
    notes: str | None = None

    model_config = {"extra": "ignore", "populate_by_name": True}

    @field_validator("amount", mode="before")
    @classmethod
    def _none_amount_is_zero(cls, value: Any) -> Any:
        return 0.0 if value is None else value

    @property
    def local_created_at(self) -> datetime:
        """Creation time as a naive local datetime."""
        if self.created_at.tzinfo is not None:
            return self.created_at.astimezone().replace(tzinfo=None)
        return self.created_at


class Customer(BaseModel):
    """A khata customer and their running balance."""

    id: str | None = Field(default=None, validation_alias=AliasChoices("id", "$id"))
    name: str = ""
    phone_number: str | None = None
    balance: float = 0.0

    model_config = {"extra": "ignore", "populate_by_name": True}

    @field_validator("balance", mode="before")
    @classmethod
    def _none_balance_is_zero(cls, value: Any) -> Any:
        return 0.0 if value is None else value

    @field_validator("name", mode="before")
    @classmethod
    def _none_name_is_blank(cls, value: Any) -> Any:
        return "" if value is None else value


class Product(BaseModel):
    """An inventory product."""

    id: str | None = Field(default=None, validation_alias=AliasChoices("id", "$id"))
    name: str = ""
    category: str = ""
    price: float = 0.0
    unit: str | None = None
    stock_quantity: float = 0.0
    low_stock_threshold: float | None = None

    model_config = {"extra": "ignore", "populate_by_name": True}


ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_records(model: type[ModelT], raw: Iterable[Any] | None) -> list[ModelT]:
    """
    Validate a list of raw payload items, skipping malformed ones.

    Items that are already model instances are passed through.
    """
    records: list[ModelT] = []
    for item in raw or []:
        if isinstance(item, model):
            records.append(item)
            continue
        try:
            records.append(model.model_validate(item))
        except ValidationError as e:
            logger.debug("Skipping malformed %s record: %s", model.__name__, e)
    return records
