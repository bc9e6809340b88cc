"""Read-only access to reader profiles."""

import logging
import uuid
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session

from feed_db.models import Profile
from retrieve_articles.models import ProfileDto

logger = logging.getLogger(__name__)


class ProfileReader(Protocol):
    def get_profile(self, user_id: uuid.UUID) -> ProfileDto | None: ...


class SqlProfileReader:
    """Loads profiles from the profiles table. Never writes."""

    def __init__(self, session: Session):
        self.session = session

    def get_profile(self, user_id: uuid.UUID) -> ProfileDto | None:
        profile = self.session.scalars(select(Profile).where(Profile.user_id == user_id)).first()
        if profile is None:
            return None
        return ProfileDto(
            user_id=profile.user_id,
            mood=profile.mood,
            blocklist=list(profile.blocklist or []),
            personalization_enabled=profile.personalization_enabled,
        )
