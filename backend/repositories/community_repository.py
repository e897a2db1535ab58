"""
Community repository. There is only ever one community row.
"""

from typing import Optional

from sqlalchemy.orm import Session

import repositories.db_models as db_models
from .base import BaseRepository


class CommunityRepository(BaseRepository[db_models.Community]):
    def __init__(self, db: Session):
        super().__init__(db_models.Community, db)

    def get_singleton(self) -> Optional[db_models.Community]:
        """Return the community with the lowest id, or None before seeding."""
        return (
            self.db.query(db_models.Community)
            .order_by(db_models.Community.id)
            .first()
        )
