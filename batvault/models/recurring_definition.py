"""
Modello per le transazioni ricorrenti (spese/entrate)

Ogni riga è un modello di pianificazione di un singolo utente:
- frequency: 'weekly', 'monthly', 'quarterly' o 'yearly'
- day_of_week: giorno della settimana (0=domenica..6=sabato), solo per 'weekly'
- day_of_month: giorno del mese (1-31) per le altre frequenze
- next_due: prossima scadenza (mezzanotte del giorno dovuto)
- last_run: ultima elaborazione
- active: se False la ricorrenza non viene mai elaborata
"""
from datetime import datetime

from batvault import db


class RecurringDefinition(db.Model):
    __tablename__ = 'recurring_transactions'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(128), nullable=False, index=True)
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    description = db.Column(db.String(200), nullable=False, default='')
    category_id = db.Column(db.Integer, db.ForeignKey('categories.id', ondelete='SET NULL'), nullable=True)
    type = db.Column(db.String(10), nullable=False)  # 'expense' o 'income'
    frequency = db.Column(db.String(20), nullable=False, default='monthly')
    day_of_week = db.Column(db.Integer, nullable=True)
    day_of_month = db.Column(db.Integer, nullable=True)
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=True)
    next_due = db.Column(db.DateTime, nullable=False, index=True)
    last_run = db.Column(db.DateTime, nullable=True)
    active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    category = db.relationship('Category', backref=db.backref('recurring_transactions', lazy=True))

    def to_dict(self):
        return {
            'id': str(self.id),
            'user_id': self.user_id,
            'amount': float(self.amount),
            'description': self.description,
            'category_id': str(self.category_id) if self.category_id is not None else None,
            'type': self.type,
            'frequency': self.frequency,
            'day_of_week': self.day_of_week,
            'day_of_month': self.day_of_month,
            'start_date': self.start_date.isoformat(),
            'end_date': self.end_date.isoformat() if self.end_date else None,
            'next_run_date': self.next_due.isoformat(),
            'last_run_date': self.last_run.isoformat() if self.last_run else None,
            'active': bool(self.active),
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<RecurringDefinition {self.description} ({self.type}) {self.amount} {self.frequency}>"
