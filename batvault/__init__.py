"""Applicazione Flask batvault: spese, entrate e transazioni ricorrenti"""

import logging
import os

from flask import Flask, jsonify, request
from flask_sqlalchemy import SQLAlchemy

from batvault.config import config

# Istanze globali
db = SQLAlchemy()


def create_app(config_name='default'):
    """Factory pattern per creare l'applicazione Flask"""
    app = Flask(__name__)

    # Carica la configurazione richiesta
    app.config.from_object(config[config_name])

    app.logger.setLevel(getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO))

    # Inizializza le estensioni
    db.init_app(app)

    # Per-owner in-flight guard for recurring processing: one per application
    from batvault.services.recurring.trigger import ProcessingTrigger
    app.extensions['batvault.trigger'] = ProcessingTrigger()

    # Importa e registra i blueprint
    from batvault.views.main import main_bp
    from batvault.views.recurring import recurring_bp
    from batvault.views.transactions import transactions_bp
    from batvault.views.categories import categories_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(recurring_bp, url_prefix='/api/recurring')
    app.register_blueprint(transactions_bp, url_prefix='/api/transactions')
    app.register_blueprint(categories_bp, url_prefix='/api/categories')

    @app.after_request
    def add_cors_headers(response):
        response.headers['Access-Control-Allow-Origin'] = app.config.get('CORS_ALLOW_ORIGIN', '*')
        response.headers['Access-Control-Allow-Headers'] = 'Content-Type, Authorization'
        response.headers['Access-Control-Allow-Methods'] = 'OPTIONS, GET, POST, DELETE'
        return response

    from batvault.errors import BatvaultError

    @app.errorhandler(BatvaultError)
    def handle_batvault_error(error):
        if error.status_code >= 500:
            app.logger.error('%s on %s: %s', error.code, request.path, error.message)
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(404)
    def handle_not_found(error):
        return jsonify({'error': 'not_found', 'message': 'Resource not found'}), 404

    @app.errorhandler(405)
    def handle_method_not_allowed(error):
        return jsonify({'error': 'method_not_allowed', 'message': 'Method Not Allowed'}), 405

    # Se il database configurato è SQLite, crea le tabelle all'avvio
    # (file locale o database in memoria per i test).
    db_uri = app.config.get('SQLALCHEMY_DATABASE_URI', '')
    if db_uri.startswith('sqlite:'):
        if db_uri.startswith('sqlite:///'):
            os.makedirs(os.path.dirname(db_uri[len('sqlite:///'):]) or '.', exist_ok=True)
        with app.app_context():
            import batvault.models  # noqa: F401 - registers the model tables
            db.create_all()

    return app
