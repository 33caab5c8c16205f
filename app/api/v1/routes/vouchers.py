from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.schemas.store import VoucherCodeRequest
from app.services.voucher_service import check_voucher_for_booking

router = APIRouter(tags=["vouchers"])


@router.post("/vouchers/validate")
def validate_for_booking(body: VoucherCodeRequest, db: Session = Depends(get_db)):
    """Booking widget check. Read-only: does not expire vouchers."""
    return check_voucher_for_booking(db, body.voucher_code)
