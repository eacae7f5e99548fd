from pydantic import BaseModel, Field, EmailStr, field_validator
from typing import Optional
from enum import Enum
import re


class AddressTypeEnum(str, Enum):
    SHIPPING = "SHIPPING"
    BILLING = "BILLING"
    BOTH = "BOTH"


def _clean_phone(v):
    if v is None:
        return v
    cleaned = re.sub(r"[\s\-\(\)]", "", v)
    if not cleaned.replace("+", "").isdigit():
        raise ValueError("Invalid phone number format")
    return cleaned


class CreateCustomerRequest(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(None, min_length=7, max_length=20)
    notes: Optional[str] = Field(None, max_length=1000)
    is_active: bool = True

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return _clean_phone(v)


class UpdateCustomerRequest(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, min_length=7, max_length=20)
    notes: Optional[str] = Field(None, max_length=1000)
    is_active: Optional[bool] = None

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return _clean_phone(v)


class AddressRequest(BaseModel):
    type: AddressTypeEnum = AddressTypeEnum.SHIPPING
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    company: Optional[str] = None
    address_line1: str = Field(..., min_length=1, max_length=200)
    address_line2: Optional[str] = None
    city: str = Field(..., min_length=1, max_length=100)
    province: str = Field(..., min_length=1, max_length=100)
    postal_code: str = Field(..., min_length=1, max_length=20)
    country: str = Field(..., min_length=2, max_length=100)
    phone: Optional[str] = None
    is_default: bool = False


class UpdateAddressRequest(BaseModel):
    type: Optional[AddressTypeEnum] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    company: Optional[str] = None
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    phone: Optional[str] = None
    is_default: Optional[bool] = None
