import logging
from sqlalchemy.orm import Session


class BaseService:
    """Shared plumbing for services bound to one open session (one transaction)."""

    def __init__(self, db: Session):
        self.db = db
        self._logger = logging.getLogger(self.__class__.__module__)
