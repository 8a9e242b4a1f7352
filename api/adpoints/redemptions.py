import logging
from sqlalchemy.orm import Session
from .errors import InvalidAction, RedemptionClosed, RedemptionNotFound
from .models import Redemption, STATUS_PENDING, STATUS_APPROVED, STATUS_REJECTED

logger = logging.getLogger(__name__)

ACTIONS = {"approve": STATUS_APPROVED, "reject": STATUS_REJECTED}


def request_redemption(db: Session, user_id: int, reward: str) -> int:
    # no balance check and no deduction: points stay with the user
    r = Redemption(user_id=user_id, reward=reward, status=STATUS_PENDING)
    db.add(r)
    db.commit()
    logger.info("User %s requested redemption %s: %r", user_id, r.id, reward)
    return r.id


def list_redemptions(db: Session) -> list[Redemption]:
    return db.query(Redemption).order_by(Redemption.id.asc()).all()


def set_status(db: Session, redemption_id: int, action: str) -> Redemption:
    """Apply approve/reject to a pending redemption. Terminal states never change."""
    new_status = ACTIONS.get(action)
    if new_status is None:
        raise InvalidAction()

    # the pending guard in the WHERE clause keeps concurrent admin calls one-way
    updated = (
        db.query(Redemption)
          .filter(Redemption.id == redemption_id, Redemption.status == STATUS_PENDING)
          .update({Redemption.status: new_status}, synchronize_session=False)
    )
    db.commit()

    r = db.get(Redemption, redemption_id, populate_existing=True)
    if not r:
        raise RedemptionNotFound()
    if not updated:
        raise RedemptionClosed(r.status)

    logger.info("Redemption %s %s", redemption_id, new_status)
    return r
