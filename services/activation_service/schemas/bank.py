import re
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_serializer, field_validator

IFSC_PATTERN = re.compile(r"^[A-Z]{4}0[A-Z0-9]{6}$")
UPI_PATTERN = re.compile(r"^[\w.-]+@[\w]+$")


def mask_account_number(value: str) -> str:
    """Show only the last four digits."""
    if len(value) <= 4:
        return value
    return "X" * (len(value) - 4) + value[-4:]


class BankDetailsCreate(BaseModel):
    """Bank form submitted by a doer during activation."""

    account_holder_name: str
    account_number: str
    ifsc_code: str
    bank_name: Optional[str] = None
    upi_id: Optional[str] = None

    @field_validator("account_holder_name")
    @classmethod
    def check_holder_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Account holder name is required")
        return value

    @field_validator("account_number")
    @classmethod
    def check_account_number(cls, value: str) -> str:
        cleaned = re.sub(r"\s", "", value)
        if not cleaned:
            raise ValueError("Account number is required")
        if len(cleaned) < 9 or len(cleaned) > 18:
            raise ValueError("Enter a valid account number (9-18 digits)")
        if not cleaned.isdigit():
            raise ValueError("Account number must contain only digits")
        return cleaned

    @field_validator("ifsc_code")
    @classmethod
    def check_ifsc_code(cls, value: str) -> str:
        value = value.strip().upper()
        if not value:
            raise ValueError("IFSC code is required")
        if not IFSC_PATTERN.match(value):
            raise ValueError("Enter a valid IFSC code")
        return value

    @field_validator("upi_id")
    @classmethod
    def check_upi_id(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None  # UPI is optional
        value = value.strip()
        if not UPI_PATTERN.match(value):
            raise ValueError("Enter a valid UPI ID")
        return value


class BankDetailsResponse(BaseModel):
    id: UUID
    doer_id: UUID
    account_holder_name: str
    account_number: str
    ifsc_code: str
    bank_name: Optional[str] = None
    upi_id: Optional[str] = None
    is_verified: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("account_number")
    def serialize_account_number(self, value: str) -> str:
        return mask_account_number(value)
