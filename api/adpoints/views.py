import logging
import threading
import time
import weakref
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from .ads import get_ad
from .errors import CooldownActive
from .models import User, View
from .users import get_user

logger = logging.getLogger(__name__)


def now_millis() -> int:
    return int(time.time() * 1000)


def last_view(db: Session, user_id: int) -> View | None:
    """Newest view for the user, or None."""
    return (
        db.query(View)
          .filter(View.user_id == user_id)
          .order_by(View.timestamp.desc(), View.id.desc())
          .first()
    )


class ViewLedger:
    """
    Records ad views and credits their reward.

    The cooldown check, the View insert and the points increment for one user
    run under that user's lock and commit together, so two requests from the
    same user can never both pass the same cooldown window. Different users
    never wait on each other. A user's lock lives only while some request
    holds it.
    """

    def __init__(self, cooldown_ms: int = 30000):
        self.cooldown_ms = cooldown_ms
        self._locks: weakref.WeakValueDictionary[int, threading.Lock] = weakref.WeakValueDictionary()
        self._guard = threading.Lock()

    def _lock_for(self, user_id: int) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(user_id)
            if lock is None:
                lock = self._locks[user_id] = threading.Lock()
            return lock

    def remaining_ms(self, db: Session, user_id: int, now_ms: int | None = None) -> int:
        last = last_view(db, user_id)
        if not last:
            return 0
        now_ms = now_millis() if now_ms is None else now_ms
        return max(0, self.cooldown_ms - (now_ms - last.timestamp))

    def record_view(self, db: Session, user_id: int, ad_id: int, now_ms: int | None = None) -> int:
        with self._lock_for(user_id):
            get_user(db, user_id)
            now_ms = now_millis() if now_ms is None else now_ms

            wait = self.remaining_ms(db, user_id, now_ms)
            if wait > 0:
                logger.info("Cooldown active for user %s (%s ms left)", user_id, wait)
                raise CooldownActive(retry_after_ms=wait)

            ad = get_ad(db, ad_id)
            reward = ad.reward_points
            try:
                db.add(View(user_id=user_id, ad_id=ad.id, timestamp=now_ms))
                (
                    db.query(User)
                      .filter(User.id == user_id)
                      .update({User.points: User.points + reward}, synchronize_session=False)
                )
                db.commit()
            except SQLAlchemyError:
                db.rollback()
                raise

        logger.info("User %s viewed ad %s: +%s points", user_id, ad_id, reward)
        return reward
