import logging
from sqlalchemy.orm import Session
from .errors import AdNotFound
from .models import Ad

logger = logging.getLogger(__name__)


def list_ads(db: Session) -> list[Ad]:
    return db.query(Ad).order_by(Ad.id.asc()).all()


def get_ad(db: Session, ad_id: int) -> Ad:
    ad = db.get(Ad, ad_id)
    if not ad:
        raise AdNotFound()
    return ad


def create_ad(db: Session, title: str, url: str, duration: int, reward_points: int) -> int:
    ad = Ad(title=title, url=url, duration=duration, reward_points=reward_points)
    db.add(ad)
    db.commit()
    logger.info("Created ad %s %r (%s points)", ad.id, title, reward_points)
    return ad.id
