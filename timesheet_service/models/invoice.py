"""Invoice settings, template and invoice model definitions."""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class ContractorSettingsBase(BaseModel):
    """Contractor details printed on every invoice."""

    contractor_name: str
    abn: str
    bank_bsb: str
    bank_account: str
    address_line1: str
    address_line2: Optional[str] = None
    city: str
    state: str
    postcode: str


class ContractorSettingsUpdate(ContractorSettingsBase):
    """Contractor settings upsert model."""

    pass


class ContractorSettings(ContractorSettingsBase):
    """Full contractor settings model with database fields."""

    id: str = Field(alias="_id", serialization_alias="id")
    user_id: str
    created_at: datetime
    updated_at: datetime

    model_config = {"populate_by_name": True}


class InvoiceTemplateBase(BaseModel):
    """Base invoice template fields."""

    template_name: str
    client_name: str
    day_rate: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    gst_percentage: Decimal = Field(
        default=Decimal("0.10"), ge=0, le=1, max_digits=5, decimal_places=4
    )
    custom_contractor_name: Optional[str] = None
    custom_abn: Optional[str] = None
    custom_bank_bsb: Optional[str] = None
    custom_bank_account: Optional[str] = None
    custom_address: Optional[str] = None
    is_default: bool = False
    is_active: bool = True


class InvoiceTemplateCreate(InvoiceTemplateBase):
    """Invoice template creation model."""

    pass


class InvoiceTemplateUpdate(BaseModel):
    """Invoice template update model - all fields optional."""

    template_name: Optional[str] = None
    client_name: Optional[str] = None
    day_rate: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    gst_percentage: Optional[Decimal] = Field(
        default=None, ge=0, le=1, max_digits=5, decimal_places=4
    )
    custom_contractor_name: Optional[str] = None
    custom_abn: Optional[str] = None
    custom_bank_bsb: Optional[str] = None
    custom_bank_account: Optional[str] = None
    custom_address: Optional[str] = None
    is_default: Optional[bool] = None
    is_active: Optional[bool] = None


class InvoiceTemplate(InvoiceTemplateBase):
    """Full invoice template model with database fields."""

    id: str = Field(alias="_id", serialization_alias="id")
    user_id: str
    created_at: datetime
    updated_at: datetime

    model_config = {"populate_by_name": True}


class ContractorDetails(BaseModel):
    """Contractor details after applying template overrides."""

    name: str
    abn: str
    bank_bsb: str
    bank_account: str
    address: str


class InvoiceView(BaseModel):
    """A computed invoice for one week. Never persisted."""

    invoice_number: str
    template_id: str
    template_name: str
    client_name: str
    week_start: date
    week_ending: date
    week_ending_display: str
    weekly_total: str
    days_worked: float
    days_worked_display: str
    day_rate: Decimal
    gst_percentage: Decimal
    gst_label: str
    subtotal: Decimal
    gst_amount: Decimal
    total: Decimal
    day_rate_display: str
    subtotal_display: str
    gst_amount_display: str
    total_display: str
    contractor: ContractorDetails
