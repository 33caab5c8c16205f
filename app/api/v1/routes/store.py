from datetime import date, datetime
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.api.deps import require_api_key
from app.core.errors import ValidationError
from app.models.api_key import ApiKey
from app.schemas.store import AvailabilityRequest, BookingCreateRequest, VoucherCodeRequest, VoucherCreateRequest
from app.services.availability_service import check_availability, list_open_operation_days
from app.services.booking_service import create_booking
from app.services.settings_service import load_store_settings
from app.services.store_payload_service import voucher_type_payload
from app.services.voucher_service import issue_voucher, list_active_voucher_types, validate_voucher

router = APIRouter(tags=["store"])


@router.get("/store/settings")
def get_store_settings(db: Session = Depends(get_db)):
    """Public store configuration (non-sensitive values only)."""
    s = load_store_settings(db)
    return {
        "redirectUrl": s.redirect_url,
        "allowVoucherSales": s.allow_voucher_sales,
        "allowTicketSales": s.allow_ticket_sales,
    }


@router.get("/store/voucher-types")
def get_voucher_types(db: Session = Depends(get_db)):
    return {"voucherTypes": [voucher_type_payload(t) for t in list_active_voucher_types(db)]}


@router.get("/store/operation-days")
def get_operation_days(from_: Optional[str] = Query(default=None, alias="from"), limit: int = 30, db: Session = Depends(get_db)):
    """Operation days from `from` (YYYY-MM-DD, default today) that still have bookable timeframes."""
    try:
        from_date = datetime.strptime(from_, "%Y-%m-%d").date() if from_ else date.today()
    except ValueError:
        raise HTTPException(status_code=400, detail="from must be YYYY-MM-DD")
    days = list_open_operation_days(db, from_date, limit=max(1, min(limit, 365)))
    return {"operationDays": days, "count": len(days)}


@router.post("/store/bookings/availability")
def post_availability(body: AvailabilityRequest, db: Session = Depends(get_db)):
    if not body.operation_day_id or not body.timeframe_id:
        raise ValidationError("Operation day ID and timeframe ID are required")
    return check_availability(db, body.timeframe_id, body.operation_day_id)


@router.post("/store/bookings/create")
def post_create_booking(body: BookingCreateRequest, db: Session = Depends(get_db),
                        api_key: ApiKey = Depends(require_api_key)):
    booking = create_booking(
        db,
        load_store_settings(db),
        operation_day_id=body.operation_day_id,
        timeframe_id=body.timeframe_id,
        ticket_type_id=body.ticket_type_id,
        voucher_type_id=body.voucher_type_id,
        purchaser_name=body.purchaser_name,
        purchaser_email=body.purchaser_email,
        purchaser_phone=body.purchaser_phone,
        price_paid=body.price_paid,
        payment_intent_id=body.payment_intent_id,
    )
    return {"success": True, "booking": booking}


@router.post("/store/vouchers/create")
def post_create_voucher(body: VoucherCreateRequest, db: Session = Depends(get_db),
                        api_key: ApiKey = Depends(require_api_key)):
    if not load_store_settings(db).allow_voucher_sales:
        raise ValidationError("Voucher sales are currently disabled")
    voucher = issue_voucher(
        db,
        voucher_type_id=body.voucher_type_id,
        purchaser_name=body.purchaser_name,
        purchaser_email=body.purchaser_email,
        purchaser_phone=body.purchaser_phone,
        price_paid=body.price_paid,
        payment_intent_id=body.payment_intent_id,
    )
    return {"success": True, "voucher": voucher}


@router.post("/store/vouchers/validate")
def post_validate_voucher(body: VoucherCodeRequest, db: Session = Depends(get_db)):
    result = validate_voucher(db, body.voucher_code)
    if result.valid:
        return {"valid": True, "voucher": result.voucher}
    content = {"valid": False, "error": result.error}
    if result.voucher:
        content["voucher"] = result.voucher
    return JSONResponse(content, status_code=404 if result.status is None else 400)
