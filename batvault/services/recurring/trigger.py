"""Orchestrazione lato chiamante dell'elaborazione delle ricorrenze.

Tiene traccia degli utenti con un'elaborazione in corso: una richiesta
concorrente per lo stesso utente viene scartata invece di essere eseguita
una seconda volta (due esecuzioni parallele potrebbero registrare la stessa
occorrenza due volte).
"""
import logging
import threading

from batvault.services.recurring.processor import DueTransactionProcessor

logger = logging.getLogger(__name__)


class ProcessingTrigger:

    def __init__(self, processor_factory=None):
        self._processor_factory = processor_factory or DueTransactionProcessor
        self._lock = threading.Lock()
        self._in_flight = set()

    def is_running(self, owner_id):
        with self._lock:
            return owner_id in self._in_flight

    def _acquire(self, owner_id):
        with self._lock:
            if owner_id in self._in_flight:
                return False
            self._in_flight.add(owner_id)
            return True

    def _release(self, owner_id):
        with self._lock:
            self._in_flight.discard(owner_id)

    def run(self, owner_id, now=None):
        """Run the processor for `owner_id`; None if a run is already in flight."""
        if not self._acquire(owner_id):
            logger.info('Recurring processing already in flight for %s, request discarded', owner_id)
            return None
        try:
            return self._processor_factory().process_due(owner_id, now)
        finally:
            self._release(owner_id)
