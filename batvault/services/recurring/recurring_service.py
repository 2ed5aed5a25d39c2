"""
Service per la gestione delle transazioni ricorrenti.
Creazione (con calcolo della prima scadenza), elenco, pausa/ripresa ed eliminazione.
"""
import logging
from datetime import date, datetime, timedelta
from typing import List, Optional, Tuple

from flask import current_app

from batvault.errors import InvalidSchedule
from batvault.models.category import Category
from batvault.models.recurring_definition import RecurringDefinition
from batvault.services import BaseService
from batvault.services.recurring.schedule import (
    as_date, as_due_datetime, compute_next_due, describe_schedule,
    preview_occurrences,
)
from batvault.utils.validation import parse_amount

logger = logging.getLogger(__name__)

KINDS = ('expense', 'income')


class RecurringDefinitionService(BaseService):
    """Service per gestire le transazioni ricorrenti"""

    def get_by_id(self, owner_id: str, definition_id) -> Optional[RecurringDefinition]:
        return self.get_owned(RecurringDefinition, owner_id, definition_id)

    def create(self, owner_id: str, amount, description: str, category_id, kind: str,
               frequency: str, start_date, end_date=None, day_of_month=None,
               day_of_week=None, today=None) -> Tuple[bool, str, Optional[RecurringDefinition]]:
        """
        Crea una nuova transazione ricorrente

        Args:
            owner_id: utente proprietario
            amount: importo positivo
            kind: 'expense' o 'income'
            frequency: 'weekly', 'monthly', 'quarterly' o 'yearly'
            day_of_week: 0-6 (domenica=0), solo per 'weekly'
            day_of_month: 1-31 per le altre frequenze
            today: data di riferimento per la prima scadenza (default: oggi)

        Returns:
            Tuple (success, message, definition)
        """
        try:
            try:
                amount = parse_amount(amount)
            except ValueError as e:
                return False, str(e), None

            if kind not in KINDS:
                return False, "Type must be 'expense' or 'income'", None

            try:
                start = as_date(start_date)
                end = as_date(end_date) if end_date else None
            except InvalidSchedule as e:
                return False, e.message, None
            if end and end < start:
                return False, "End date cannot be before the start date", None

            if category_id not in (None, ''):
                category = self.get_owned(Category, owner_id, category_id)
                if not category:
                    return False, f"Category {category_id} not found", None
                category_id = category.id
            else:
                category_id = None

            # Solo l'ancora pertinente alla frequenza viene memorizzata
            definition = RecurringDefinition(
                user_id=owner_id,
                amount=amount,
                description=(description or '').strip(),
                category_id=category_id,
                type=kind,
                frequency=frequency,
                day_of_week=day_of_week if frequency == 'weekly' else None,
                day_of_month=day_of_month if frequency != 'weekly' else None,
                start_date=start,
                end_date=end,
                active=True,
            )

            try:
                reference = max(start, as_date(today or date.today()))
                definition.next_due = as_due_datetime(compute_next_due(definition, reference))
            except InvalidSchedule as e:
                return False, e.message, None

            success, message = self.save(definition)
            if not success:
                logger.error('Recurring definition creation failed for %s: %s', owner_id, message)
                return False, f"Error while creating: {message}", None

            return True, f"Recurring {kind} scheduled successfully", definition

        except Exception as e:
            self.db.session.rollback()
            logger.exception('Recurring definition creation failed for %s', owner_id)
            return False, f"Error while creating: {str(e)}", None

    def list_for_owner(self, owner_id: str) -> List[dict]:
        """Ricorrenze dell'utente per prossima scadenza, con categoria e testo della pianificazione"""
        definitions = RecurringDefinition.query.filter_by(user_id=owner_id).order_by(
            RecurringDefinition.next_due.asc(),
            RecurringDefinition.id.asc()
        ).all()
        return [self.serialize(d) for d in definitions]

    def upcoming(self, owner_id: str, now: datetime = None) -> List[dict]:
        """Ricorrenze attive in scadenza entro la finestra configurata"""
        now = now or datetime.now()
        window = current_app.config.get('UPCOMING_WINDOW_DAYS', 14)
        limit = current_app.config.get('UPCOMING_LIMIT', 5)
        definitions = RecurringDefinition.query.filter(
            RecurringDefinition.user_id == owner_id,
            RecurringDefinition.active.is_(True),
            RecurringDefinition.next_due <= now + timedelta(days=window)
        ).order_by(RecurringDefinition.next_due.asc()).limit(limit).all()
        return [self.serialize(d) for d in definitions]

    def preview(self, owner_id: str, definition_id, count: int = 3, reference=None):
        """
        Prossime occorrenze di una ricorrenza

        Returns:
            Tuple (success, message, list of dates)
        """
        definition = self.get_by_id(owner_id, definition_id)
        if not definition:
            return False, "Recurring transaction not found", []
        reference = reference or definition.next_due
        try:
            return True, "OK", preview_occurrences(definition, count, reference)
        except InvalidSchedule as e:
            return False, e.message, []

    def set_active(self, owner_id: str, definition_id, active: bool) -> Tuple[bool, str]:
        """Pausa o ripresa; la ripresa non ricalcola next_due"""
        try:
            definition = self.get_by_id(owner_id, definition_id)
            if not definition:
                return False, "Recurring transaction not found"
            definition.active = bool(active)
            self.db.session.commit()
            return True, f"Recurring transaction {'activated' if active else 'paused'}"
        except Exception as e:
            self.db.session.rollback()
            logger.exception('Failed to update status of recurring definition %s', definition_id)
            return False, f"Failed to update transaction status: {str(e)}"

    def toggle_active(self, owner_id: str, definition_id) -> Tuple[bool, str]:
        definition = self.get_by_id(owner_id, definition_id)
        if not definition:
            return False, "Recurring transaction not found"
        return self.set_active(owner_id, definition_id, not definition.active)

    def delete_definition(self, owner_id: str, definition_id) -> Tuple[bool, str]:
        """Elimina la ricorrenza; le transazioni già registrate restano"""
        definition = self.get_by_id(owner_id, definition_id)
        if not definition:
            return False, "Recurring transaction not found"
        success, message = self.delete(definition)
        if not success:
            return False, f"Failed to delete transaction: {message}"
        return True, "Recurring transaction deleted"

    def serialize(self, definition):
        """Ricorrenza come dict, con nome/colore categoria e testo della pianificazione"""
        data = definition.to_dict()
        category = definition.category
        data['category_name'] = category.name if category else 'Unknown'
        data['category_color'] = category.color if category else '#CCCCCC'
        data['schedule'] = describe_schedule(definition)
        return data
