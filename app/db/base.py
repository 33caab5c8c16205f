# Import all models so Base.metadata is complete for Alembic and create_all.
from app.db.session import Base  # noqa: F401
from app.models.user import User  # noqa: F401
from app.models.profile import Profile  # noqa: F401
from app.models.operation_day import OperationDay  # noqa: F401
from app.models.timeframe import Timeframe  # noqa: F401
from app.models.product import TicketType, VoucherType  # noqa: F401
from app.models.booking import Booking  # noqa: F401
from app.models.voucher import Voucher  # noqa: F401
from app.models.membership import MembershipType, UserMembership, PaymentStatusHistory  # noqa: F401
from app.models.api_key import ApiKey  # noqa: F401
from app.models.setting import Setting  # noqa: F401
