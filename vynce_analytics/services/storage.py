"""Database storage service for the persisted gamification state"""
import logging
import datetime
from typing import Any, Dict, Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from vynce_analytics.models.db import GamificationStateRecord

logger = logging.getLogger(__name__)

class StorageService:
    """Reads and overwrites the serialized state object stored under a key"""

    def __init__(self, session: Session):
        self.session = session

    def load_state(self, key: str) -> Optional[Dict[str, Any]]:
        """Return the stored state for `key`, or None if nothing was saved yet"""
        try:
            record: Optional[GamificationStateRecord] = self.session.get(GamificationStateRecord, key)
            if record is None:
                return None
            return dict(record.state) if isinstance(record.state, dict) else None
        except SQLAlchemyError as e:
            logger.error(f"Database error loading state for key {key}: {e}")
            self.session.rollback()
            raise

    def save_state(self, key: str, state: Dict[str, Any]) -> None:
        """Overwrite the whole state object stored under `key`"""
        try:
            record = self.session.get(GamificationStateRecord, key)
            if record:
                record.state = state
                record.updated_at = datetime.datetime.now(datetime.UTC)
            else:
                self.session.add(GamificationStateRecord(key=key, state=state))
            self.session.commit()
            logger.debug(f"Persisted state under key {key}")
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Database error saving state for key {key}: {e}")
            raise
