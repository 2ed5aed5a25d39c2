"""Modello per le categorie di spese/entrate"""
from datetime import datetime

from batvault import db


class Category(db.Model):
    """Categoria definita da un utente"""
    __tablename__ = 'categories'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(128), nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)
    color = db.Column(db.String(7), nullable=False, default='#CCCCCC')
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': str(self.id),
            'user_id': self.user_id,
            'name': self.name,
            'color': self.color,
        }

    def __repr__(self):
        return f'<Category {self.name} ({self.user_id})>'
