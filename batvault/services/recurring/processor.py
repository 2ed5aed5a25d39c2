"""Elaborazione delle transazioni ricorrenti scadute di un utente.

Per ogni ricorrenza attiva con `next_due <= now`:
1. calcola la scadenza successiva (strettamente dopo la precedente)
2. registra una transazione datata `now` (nessun recupero delle occorrenze perse)
3. aggiorna next_due, last_run e active (disattiva se la nuova scadenza supera end_date)

Un errore su una ricorrenza non interrompe il batch; solo il fallimento della
lettura iniziale fa fallire l'intera elaborazione.
"""
import logging
from datetime import datetime
from types import SimpleNamespace

from flask import current_app

from batvault.errors import InvalidSchedule, PartialPersistence, StoreUnavailable
from batvault.models.recurring_definition import RecurringDefinition
from batvault.models.transaction_record import TransactionRecord
from batvault.services.record_store import RecordStore
from batvault.services.recurring.schedule import as_date, as_due_datetime, next_due_after

logger = logging.getLogger(__name__)

DEFAULT_DESCRIPTION = 'Recurring Transaction'


def snapshot(definition):
    """Copia dei valori di colonna di una ricorrenza, staccata dalla sessione"""
    columns = RecurringDefinition.__table__.columns.keys()
    return SimpleNamespace(**{name: getattr(definition, name) for name in columns})


class DueTransactionProcessor:
    """Materializza le ricorrenze scadute; nessuno stato tra un'invocazione e l'altra."""

    def __init__(self, store=None, default_description=None):
        self.store = store or RecordStore()
        self.default_description = default_description

    def _description_fallback(self):
        if self.default_description:
            return self.default_description
        try:
            return current_app.config.get('DEFAULT_RECURRING_DESCRIPTION', DEFAULT_DESCRIPTION)
        except RuntimeError:
            return DEFAULT_DESCRIPTION

    def fetch_due(self, owner_id, now):
        """Active definitions of the owner whose stored next_due is at or before now.

        Each one is returned as a plain snapshot of its columns, so the batch
        never reloads a row after a commit or rollback of the session.
        Raises StoreUnavailable when the definitions cannot be read.
        """
        definitions = self.store.query(RecurringDefinition, user_id=owner_id, active=True)
        return [snapshot(d) for d in definitions if d.next_due is not None and d.next_due <= now]

    def process_due(self, owner_id, now=None):
        """Process every due definition of `owner_id`.

        Returns {'success': True, 'processed': n, 'results': [{'id', 'status', ...}]}
        where `processed` counts the definitions that succeeded.
        """
        if now is None:
            now = datetime.now()

        due = self.fetch_due(owner_id, now)
        result = {
            'success': True,
            'processed': 0,
            'results': [],
        }
        if not due:
            return result

        for definition in due:
            outcome = self._process_one(definition, owner_id, now)
            result['results'].append(outcome)
            if outcome['status'] == 'success':
                result['processed'] += 1

        logger.info('Recurring processing for %s: %d/%d due definitions processed',
                    owner_id, result['processed'], len(due))
        return result

    def _process_one(self, definition, owner_id, now):
        definition_id = str(definition.id)
        previous_due = definition.next_due
        end_date = definition.end_date
        try:
            # Validate and advance first: a malformed schedule posts nothing
            new_next_due = next_due_after(definition, previous_due)
            active = not (end_date is not None and new_next_due > as_date(end_date))

            transaction_id = self.store.create(
                TransactionRecord,
                user_id=owner_id,
                amount=definition.amount,
                description=definition.description or self._description_fallback(),
                category_id=definition.category_id,
                type=definition.type,
                date=now.date(),
            )

            try:
                updated = self.store.update(
                    RecurringDefinition,
                    definition.id,
                    next_due=as_due_datetime(new_next_due),
                    last_run=now,
                    active=active,
                )
            except StoreUnavailable as e:
                raise PartialPersistence(str(e), transaction_id=transaction_id) from e
            if not updated:
                raise PartialPersistence(
                    f'Recurring definition {definition_id} disappeared after posting',
                    transaction_id=transaction_id,
                )
        except InvalidSchedule as e:
            logger.warning('Skipping recurring definition %s: %s', definition_id, e)
            return {'id': definition_id, 'status': 'error', 'error': e.code, 'message': e.message}
        except PartialPersistence as e:
            # Next run sees the unadvanced next_due and posts again: duplicate over loss
            logger.error('Transaction %s posted for recurring definition %s but the schedule '
                         'was not advanced: %s', e.transaction_id, definition_id, e.message)
            return {'id': definition_id, 'status': 'error', 'error': e.code, 'message': e.message}
        except StoreUnavailable as e:
            logger.warning('Store error on recurring definition %s: %s', definition_id, e)
            return {'id': definition_id, 'status': 'error', 'error': e.code, 'message': e.message}

        if not active:
            logger.info('Recurring definition %s deactivated: next occurrence %s is after end date %s',
                        definition_id, new_next_due, end_date)
        return {
            'id': definition_id,
            'status': 'success',
            'transaction_id': str(transaction_id),
            'next_run_date': as_due_datetime(new_next_due).isoformat(),
            'active': active,
        }
