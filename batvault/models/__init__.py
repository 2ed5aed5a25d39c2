"""
Modelli del database
"""
# Import esplicito dei modelli per assicurare che siano registrati quando l'app importa
from batvault.models.category import Category  # noqa: F401
from batvault.models.recurring_definition import RecurringDefinition  # noqa: F401
from batvault.models.transaction_record import TransactionRecord  # noqa: F401
