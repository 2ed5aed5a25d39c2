"""
Servizio base per la gestione della business logic
"""
from batvault import db

__all__ = ['BaseService']


class BaseService:
    """Classe base per i servizi con metodi comuni"""

    def __init__(self):
        self.db = db

    def save(self, obj):
        """Salva un oggetto nel database"""
        try:
            self.db.session.add(obj)
            self.db.session.commit()
            return True, "Operation completed"
        except Exception as e:
            self.db.session.rollback()
            return False, str(e)

    def delete(self, obj):
        """Elimina un oggetto dal database"""
        try:
            self.db.session.delete(obj)
            self.db.session.commit()
            return True, "Deleted"
        except Exception as e:
            self.db.session.rollback()
            return False, str(e)

    def get_owned(self, model, owner_id, record_id):
        """Recupera un record solo se appartiene all'utente indicato"""
        try:
            record_id = int(record_id)
        except (TypeError, ValueError):
            return None
        return model.query.filter_by(id=record_id, user_id=owner_id).first()
