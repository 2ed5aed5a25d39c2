import unittest
from collections import Counter
from datetime import date, datetime
from decimal import Decimal
from unittest import mock

from sqlalchemy import event
from sqlalchemy.exc import OperationalError

from batvault import db
from batvault.errors import StoreUnavailable
from batvault.models.recurring_definition import RecurringDefinition
from batvault.services.record_store import RecordStore
from batvault.services.recurring.processor import DueTransactionProcessor
from tests.base import AppTestCase


class FailingCreateStore(RecordStore):

    def create(self, model, **fields):
        raise StoreUnavailable('write refused')


class FailingUpdateStore(RecordStore):

    def update(self, model, record_id, **fields):
        raise StoreUnavailable('write refused')


def refuse_statements(conn, cursor, statement, parameters, context, executemany):
    raise OperationalError(statement, parameters, Exception('database is locked'))


class OutageAfterFetch(DueTransactionProcessor):
    """Il database smette di rispondere subito dopo la lettura iniziale"""

    def fetch_due(self, owner_id, now):
        due = super().fetch_due(owner_id, now)
        event.listen(db.engine, 'before_cursor_execute', refuse_statements)
        return due


class TestDueTransactionProcessor(AppTestCase):

    def setUp(self):
        super().setUp()
        self.processor = DueTransactionProcessor()

    def test_batch_continues_past_malformed_definition(self):
        good_a = self.make_definition(next_due=datetime(2024, 2, 15))
        broken = self.make_definition(frequency='fortnightly', next_due=datetime(2024, 2, 10))
        good_b = self.make_definition(frequency='weekly', day_of_month=None, day_of_week=1,
                                      next_due=datetime(2024, 2, 12))

        result = self.processor.process_due('user-1', datetime(2024, 2, 15, 9, 0))

        self.assertTrue(result['success'])
        self.assertEqual(result['processed'], 2)
        self.assertEqual(Counter(r['status'] for r in result['results']), {'success': 2, 'error': 1})
        errors = [r for r in result['results'] if r['status'] == 'error']
        self.assertEqual(errors[0]['id'], str(broken.id))
        self.assertEqual(errors[0]['error'], 'invalid_schedule')
        self.assertEqual(len(self.transactions_for()), 2)
        self.assertEqual(db.session.get(RecurringDefinition, broken.id).next_due, datetime(2024, 2, 10))
        self.assertEqual(db.session.get(RecurringDefinition, good_a.id).next_due, datetime(2024, 3, 15))
        self.assertEqual(db.session.get(RecurringDefinition, good_b.id).next_due, datetime(2024, 2, 19))

    def test_missed_occurrences_post_a_single_record_dated_now(self):
        definition = self.make_definition(next_due=datetime(2024, 1, 15))
        now = datetime(2024, 6, 20, 8, 30)

        result = self.processor.process_due('user-1', now)

        self.assertEqual(result['processed'], 1)
        records = self.transactions_for()
        self.assertEqual(len(records), 1)
        self.assertEqual(records[0].date, date(2024, 6, 20))
        self.assertEqual(records[0].amount, Decimal('25.00'))
        self.assertEqual(records[0].description, 'Gym membership')
        self.assertEqual(records[0].type, 'expense')
        refreshed = db.session.get(RecurringDefinition, definition.id)
        # one step per run, not caught up to now
        self.assertEqual(refreshed.next_due, datetime(2024, 2, 15))
        self.assertEqual(refreshed.last_run, now)

    def test_success_outcome_shape(self):
        definition = self.make_definition()
        result = self.processor.process_due('user-1', datetime(2024, 2, 15, 12, 0))
        outcome = result['results'][0]
        self.assertEqual(outcome['id'], str(definition.id))
        self.assertEqual(outcome['status'], 'success')
        self.assertEqual(outcome['next_run_date'], '2024-03-15T00:00:00')
        self.assertTrue(outcome['active'])
        self.assertEqual(outcome['transaction_id'], str(self.transactions_for()[0].id))

    def test_rerun_with_same_now_posts_nothing(self):
        self.make_definition()
        now = datetime(2024, 2, 15, 12, 0)
        self.processor.process_due('user-1', now)

        result = self.processor.process_due('user-1', now)

        self.assertEqual(result, {'success': True, 'processed': 0, 'results': []})
        self.assertEqual(len(self.transactions_for()), 1)

    def test_deactivates_when_next_occurrence_passes_end_date(self):
        definition = self.make_definition(end_date=date(2024, 3, 1))

        result = self.processor.process_due('user-1', datetime(2024, 2, 15, 10, 0))

        self.assertFalse(result['results'][0]['active'])
        refreshed = db.session.get(RecurringDefinition, definition.id)
        self.assertFalse(refreshed.active)
        self.assertEqual(refreshed.next_due, datetime(2024, 3, 15))
        self.assertEqual(len(self.transactions_for()), 1)

        later = self.processor.process_due('user-1', datetime(2024, 4, 1))
        self.assertEqual(later['processed'], 0)

    def test_end_date_on_next_occurrence_stays_active(self):
        definition = self.make_definition(end_date=date(2024, 3, 15))
        self.processor.process_due('user-1', datetime(2024, 2, 15, 10, 0))
        self.assertTrue(db.session.get(RecurringDefinition, definition.id).active)

    def test_ignores_inactive_foreign_and_future_definitions(self):
        self.make_definition(active=False)
        self.make_definition(user_id='user-2')
        self.make_definition(next_due=datetime(2024, 2, 16))

        result = self.processor.process_due('user-1', datetime(2024, 2, 15, 23, 59))

        self.assertEqual(result['processed'], 0)
        self.assertEqual(self.transactions_for('user-1'), [])
        self.assertEqual(self.transactions_for('user-2'), [])

    def test_due_at_midnight_of_due_day(self):
        self.make_definition()
        result = self.processor.process_due('user-1', datetime(2024, 2, 15))
        self.assertEqual(result['processed'], 1)

    def test_missing_description_uses_default(self):
        self.make_definition(description='')
        self.processor.process_due('user-1', datetime(2024, 2, 15, 9, 0))
        self.assertEqual(self.transactions_for()[0].description, 'Recurring Transaction')

    def test_posted_records_survive_definition_deletion(self):
        definition = self.make_definition()
        self.processor.process_due('user-1', datetime(2024, 2, 15, 9, 0))
        db.session.delete(db.session.get(RecurringDefinition, definition.id))
        db.session.commit()
        self.assertEqual(len(self.transactions_for()), 1)

    def test_failed_post_leaves_definition_unadvanced(self):
        definition = self.make_definition()
        processor = DueTransactionProcessor(store=FailingCreateStore())

        result = processor.process_due('user-1', datetime(2024, 2, 15, 9, 0))

        self.assertEqual(result['processed'], 0)
        self.assertEqual(result['results'][0]['error'], 'store_unavailable')
        self.assertEqual(self.transactions_for(), [])
        self.assertEqual(db.session.get(RecurringDefinition, definition.id).next_due, datetime(2024, 2, 15))

    def test_failed_advance_reports_partial_persistence(self):
        definition = self.make_definition()
        now = datetime(2024, 2, 15, 9, 0)

        result = DueTransactionProcessor(store=FailingUpdateStore()).process_due('user-1', now)

        self.assertEqual(result['processed'], 0)
        self.assertEqual(result['results'][0]['status'], 'error')
        self.assertEqual(result['results'][0]['error'], 'partial_persistence')
        self.assertEqual(len(self.transactions_for()), 1)
        self.assertEqual(db.session.get(RecurringDefinition, definition.id).next_due, datetime(2024, 2, 15))

        # the next run posts again rather than losing the occurrence
        self.processor.process_due('user-1', now)
        self.assertEqual(len(self.transactions_for()), 2)

    def test_store_outage_mid_batch_fails_each_definition_on_its_own(self):
        first = self.make_definition()
        second = self.make_definition(description='Rent', day_of_month=1, next_due=datetime(2024, 2, 1))

        try:
            result = OutageAfterFetch().process_due('user-1', datetime(2024, 2, 15, 9, 0))
        finally:
            event.remove(db.engine, 'before_cursor_execute', refuse_statements)

        self.assertTrue(result['success'])
        self.assertEqual(result['processed'], 0)
        self.assertEqual(sorted(r['id'] for r in result['results']), sorted([str(first.id), str(second.id)]))
        for outcome in result['results']:
            self.assertEqual(outcome['status'], 'error')
            self.assertEqual(outcome['error'], 'store_unavailable')
        self.assertEqual(self.transactions_for(), [])
        self.assertEqual(db.session.get(RecurringDefinition, first.id).next_due, datetime(2024, 2, 15))

    def test_yearly_definition_deactivates_past_end_date(self):
        definition = self.make_definition(frequency='yearly', day_of_month=10, start_date=date(2024, 3, 10),
                                          end_date=date(2025, 3, 9), next_due=datetime(2025, 3, 10))

        result = self.processor.process_due('user-1', datetime(2025, 3, 10, 8, 0))

        outcome = result['results'][0]
        self.assertEqual(outcome['status'], 'success')
        self.assertEqual(outcome['next_run_date'], '2026-03-10T00:00:00')
        self.assertFalse(outcome['active'])
        refreshed = db.session.get(RecurringDefinition, definition.id)
        self.assertEqual(refreshed.next_due, datetime(2026, 3, 10))
        self.assertFalse(refreshed.active)
        self.assertEqual(self.transactions_for()[0].date, date(2025, 3, 10))

    def test_quarterly_definition_advances_to_clamped_day(self):
        definition = self.make_definition(frequency='quarterly', day_of_month=31, next_due=datetime(2024, 1, 31))

        result = self.processor.process_due('user-1', datetime(2024, 2, 1, 8, 0))

        self.assertEqual(result['results'][0]['next_run_date'], '2024-04-30T00:00:00')
        self.assertEqual(db.session.get(RecurringDefinition, definition.id).next_due, datetime(2024, 4, 30))

        self.processor.process_due('user-1', datetime(2024, 4, 30, 8, 0))
        self.assertEqual(db.session.get(RecurringDefinition, definition.id).next_due, datetime(2024, 7, 31))
        self.assertEqual(len(self.transactions_for()), 2)

    def test_unreadable_definitions_fail_the_whole_run(self):
        with mock.patch.object(RecordStore, 'query', side_effect=StoreUnavailable('down')):
            with self.assertRaises(StoreUnavailable):
                self.processor.process_due('user-1', datetime(2024, 2, 15))


class TestRecordStore(unittest.TestCase):

    def test_database_error_becomes_store_unavailable(self):
        session = mock.Mock()
        session.query.side_effect = OperationalError('SELECT', {}, Exception('disk I/O error'))
        store = RecordStore(session=session)

        with self.assertRaises(StoreUnavailable):
            store.query(RecurringDefinition, user_id='user-1')
        session.rollback.assert_called_once_with()


if __name__ == '__main__':
    unittest.main()
