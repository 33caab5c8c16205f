from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts camelCase (wire) and snake_case names. Required-ness is checked by the services."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AvailabilityRequest(CamelModel):
    operation_day_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("operationDayId", "poolId", "operation_day_id")
    )
    timeframe_id: Optional[str] = None


class BookingCreateRequest(CamelModel):
    operation_day_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("operationDayId", "poolId", "operation_day_id")
    )
    timeframe_id: Optional[str] = None
    ticket_type_id: Optional[str] = None
    voucher_type_id: Optional[str] = None
    purchaser_name: Optional[str] = None
    purchaser_email: Optional[str] = None
    purchaser_phone: Optional[str] = None
    price_paid: Optional[Decimal] = None
    payment_intent_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("paymentIntentId", "paymentReference", "payment_intent_id")
    )


class VoucherCreateRequest(CamelModel):
    voucher_type_id: Optional[str] = None
    purchaser_name: Optional[str] = None
    purchaser_email: Optional[str] = None
    purchaser_phone: Optional[str] = None
    price_paid: Optional[Decimal] = None
    payment_intent_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("paymentIntentId", "paymentReference", "payment_intent_id")
    )


class ManualVoucherRequest(VoucherCreateRequest):
    valid_until: Optional[datetime] = None
    notes: Optional[str] = None


class VoucherCodeRequest(CamelModel):
    voucher_code: Optional[str] = None
