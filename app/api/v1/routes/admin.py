from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.api.deps import require_roles
from app.models.user import User
from app.schemas.registration import MembershipAssignRequest
from app.schemas.store import ManualVoucherRequest
from app.services.membership_service import assign_membership
from app.services.voucher_service import issue_voucher

router = APIRouter(tags=["admin"])


@router.post("/admin/vouchers")
def create_manual_voucher(body: ManualVoucherRequest, db: Session = Depends(get_db),
                          me: User = Depends(require_roles("board"))):
    """Issue a voucher outside the web store (e.g. sold at the counter)."""
    extra = {"valid_until": body.valid_until} if body.valid_until is not None else {}
    voucher = issue_voucher(
        db,
        voucher_type_id=body.voucher_type_id,
        purchaser_name=body.purchaser_name,
        purchaser_email=body.purchaser_email,
        purchaser_phone=body.purchaser_phone,
        price_paid=body.price_paid,
        payment_intent_id=body.payment_intent_id,
        notes=body.notes,
        **extra,
    )
    return {"success": True, "voucher": voucher}


@router.post("/admin/memberships")
def create_membership_for_user(body: MembershipAssignRequest, db: Session = Depends(get_db),
                               me: User = Depends(require_roles("board", "manifest"))):
    m = assign_membership(
        db,
        user_id=body.user_id,
        membership_type_id=body.membership_type_id,
        start_date=body.start_date,
        created_by=me.id,
        payment_status=body.payment_status,
        auto_renew=body.auto_renew,
        notes=body.notes,
    )
    return {
        "success": True,
        "membership": {
            "id": m.id,
            "memberNumber": m.member_number,
            "startDate": m.start_date.isoformat(),
            "endDate": m.end_date.isoformat(),
            "status": m.status,
            "paymentStatus": m.payment_status,
        },
    }
