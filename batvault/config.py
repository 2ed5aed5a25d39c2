"""Configurazione per l'applicazione batvault (spese, entrate e ricorrenze)"""
import os


class Config:
    """Configurazione principale dell'applicazione"""

    # Database
    # Fallback su un file SQLite nella cartella `db/` alla root del repository
    # quando DATABASE_URL non è impostata.
    BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        'DATABASE_URL',
        f'sqlite:///{os.path.join(BASE_DIR, "db", "batvault.db")}'
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Flask
    SECRET_KEY = os.environ.get('SECRET_KEY', 'batvault-dev-secret-key')

    # Server
    HOST = os.environ.get('HOST', '0.0.0.0')
    PORT = int(os.environ.get('PORT', 5001))

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Bearer token: durata in secondi e verificatore opzionale (token -> owner id)
    TOKEN_MAX_AGE = int(os.environ.get('TOKEN_MAX_AGE', 60 * 60 * 24 * 7))
    TOKEN_VERIFIER = None

    CORS_ALLOW_ORIGIN = os.environ.get('CORS_ALLOW_ORIGIN', '*')

    # Ricorrenze
    UPCOMING_WINDOW_DAYS = 14
    UPCOMING_LIMIT = 5
    DEFAULT_RECURRING_DESCRIPTION = 'Recurring Transaction'


class DevelopmentConfig(Config):
    DEBUG = True
    LOG_LEVEL = 'DEBUG'


class TestingConfig(Config):
    """Database in memoria, usato dalla suite di test"""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SECRET_KEY = 'batvault-testing-secret'
    LOG_LEVEL = 'WARNING'


config = {
    'default': Config,
    'development': DevelopmentConfig,
    'testing': TestingConfig,
}
