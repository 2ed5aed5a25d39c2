"""Modello per le transazioni registrate (spese/entrate)"""
from datetime import datetime

from batvault import db


class TransactionRecord(db.Model):
    """Movimento registrato dall'utente o generato da una ricorrenza.

    Nessun riferimento alla ricorrenza di origine: eliminare una ricorrenza
    non tocca lo storico.
    """
    __tablename__ = 'expenses'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(128), nullable=False, index=True)
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    description = db.Column(db.String(200), nullable=False, default='')
    category_id = db.Column(db.Integer, db.ForeignKey('categories.id', ondelete='SET NULL'), nullable=True)
    type = db.Column(db.String(10), nullable=False)  # 'expense' o 'income'
    date = db.Column(db.Date, nullable=False, index=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    category = db.relationship('Category', backref=db.backref('expenses', lazy=True))

    def to_dict(self):
        return {
            'id': str(self.id),
            'user_id': self.user_id,
            'amount': float(self.amount),
            'description': self.description,
            'category_id': str(self.category_id) if self.category_id is not None else None,
            'type': self.type,
            'date': self.date.isoformat(),
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<TransactionRecord {self.description}: {self.amount} ({self.type})>'
