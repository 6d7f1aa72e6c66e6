"""Representative roster queries and the one-time seed."""

from __future__ import annotations

import logging

from models import db
from models.representative import Representative

from .errors import AlreadySeeded

logger = logging.getLogger(__name__)

DEFAULT_REPRESENTATIVES = (
    {"name": "Josh Levine", "phone": "516-555-1234", "email": "josh@fakesacco.com"},
    {"name": "Guido Van Rossum", "phone": "516-555-5678", "email": "guido@fakesacco.com"},
    {"name": "Linus Torvalds", "phone": "516-555-9012", "email": "linus@fakesacco.com"},
    {"name": "Mickey Mouse", "phone": "516-555-3456", "email": "mickey@fakesacco.com"},
    {"name": "Anders Hejlsberg", "phone": "516-555-7890", "email": "anders@fakesacco.com"},
)


def list_active_representatives() -> list[Representative]:
    return (
        Representative.query.filter_by(is_active=True)
        .order_by(Representative.name.asc())
        .all()
    )


def seed_representatives(roster=DEFAULT_REPRESENTATIVES) -> list[Representative]:
    """Insert the default roster; refuses once any representative exists."""

    if Representative.query.count() > 0:
        raise AlreadySeeded()

    created = [Representative(**entry) for entry in roster]
    db.session.add_all(created)
    db.session.commit()
    logger.info("Seeded %d representatives", len(created))
    return created
