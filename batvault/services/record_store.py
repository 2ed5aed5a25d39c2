"""Record store su SQLAlchemy: query per uguaglianza, create e update parziale.

Ogni errore del database viene convertito in `StoreUnavailable` dopo il
rollback della sessione.
"""
import logging

from sqlalchemy.exc import SQLAlchemyError

from batvault import db
from batvault.errors import StoreUnavailable

logger = logging.getLogger(__name__)


class RecordStore:
    """Accesso ai record per collezione (modello SQLAlchemy)"""

    def __init__(self, session=None):
        self._session = session

    @property
    def session(self):
        return self._session if self._session is not None else db.session

    def query(self, model, order_by=None, **filters):
        """Return every record of `model` matching all equality filters."""
        try:
            q = self.session.query(model).filter_by(**filters)
            if order_by is not None:
                q = q.order_by(order_by)
            return q.all()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception('query on %s failed', model.__tablename__)
            raise StoreUnavailable(f'Query on {model.__tablename__} failed: {e}') from e

    def create(self, model, **fields):
        """Insert a record and return its new id."""
        try:
            record = model(**fields)
            self.session.add(record)
            self.session.commit()
            return record.id
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception('create on %s failed', model.__tablename__)
            raise StoreUnavailable(f'Create on {model.__tablename__} failed: {e}') from e

    def update(self, model, record_id, **fields):
        """Apply a partial update; False when the record no longer exists."""
        try:
            record = self.session.get(model, record_id)
            if record is None:
                return False
            for key, value in fields.items():
                setattr(record, key, value)
            self.session.commit()
            return True
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception('update of %s %s failed', model.__tablename__, record_id)
            raise StoreUnavailable(f'Update of {model.__tablename__} {record_id} failed: {e}') from e
