"""
Service per le transazioni inserite direttamente dall'utente
"""
import logging
from typing import List, Optional, Tuple

from batvault.models.category import Category
from batvault.models.transaction_record import TransactionRecord
from batvault.services import BaseService
from batvault.utils.validation import parse_amount, parse_date

logger = logging.getLogger(__name__)


class TransactionService(BaseService):
    """Service per gestire spese ed entrate"""

    def get_by_id(self, owner_id: str, transaction_id) -> Optional[TransactionRecord]:
        return self.get_owned(TransactionRecord, owner_id, transaction_id)

    def create(self, owner_id: str, amount, kind: str, on_date, description: str = '',
               category_id=None) -> Tuple[bool, str, Optional[TransactionRecord]]:
        """
        Registra una spesa o un'entrata

        Returns:
            Tuple (success, message, transaction)
        """
        try:
            amount = parse_amount(amount)
            on_date = parse_date(on_date)
        except ValueError as e:
            return False, str(e), None

        if kind not in ('expense', 'income'):
            return False, "Type must be 'expense' or 'income'", None

        if category_id not in (None, ''):
            category = self.get_owned(Category, owner_id, category_id)
            if not category:
                return False, f"Category {category_id} not found", None
            category_id = category.id
        else:
            category_id = None

        record = TransactionRecord(
            user_id=owner_id,
            amount=amount,
            description=(description or '').strip(),
            category_id=category_id,
            type=kind,
            date=on_date,
        )
        success, message = self.save(record)
        if not success:
            logger.error('Transaction creation failed for %s: %s', owner_id, message)
            return False, f"Error while creating: {message}", None
        return True, f"Added {kind} of {amount}", record

    def list_for_owner(self, owner_id: str, from_date=None, to_date=None, kind=None) -> List[TransactionRecord]:
        query = TransactionRecord.query.filter(TransactionRecord.user_id == owner_id)
        if from_date:
            query = query.filter(TransactionRecord.date >= parse_date(from_date, 'from_date'))
        if to_date:
            query = query.filter(TransactionRecord.date <= parse_date(to_date, 'to_date'))
        if kind:
            query = query.filter(TransactionRecord.type == kind)
        return query.order_by(TransactionRecord.date.desc(), TransactionRecord.id.desc()).all()

    def delete_transaction(self, owner_id: str, transaction_id) -> Tuple[bool, str]:
        record = self.get_by_id(owner_id, transaction_id)
        if not record:
            return False, "Transaction not found"
        success, message = self.delete(record)
        if not success:
            return False, f"Failed to delete transaction: {message}"
        return True, "Transaction deleted"
