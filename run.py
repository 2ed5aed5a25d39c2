"""Entry point per l'applicazione.

Questo script avvia l'app Flask. Con la variabile d'ambiente `INIT_DB=1`
crea le tabelle anche su database diversi da SQLite.
"""

import logging
import os

from batvault import create_app, db


def init_database():
    """Crea le tabelle mancanti (solo in fase di provisioning)"""
    import batvault.models  # noqa: F401 - registers the model tables
    db.create_all()


def main():
    logging.basicConfig(level=os.environ.get('LOG_LEVEL', 'INFO'),
                        format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    app = create_app(os.environ.get('BATVAULT_CONFIG', 'default'))

    # Optional DB init (usare solo in fase di provisioning)
    if os.environ.get('INIT_DB') == '1':
        with app.app_context():
            init_database()

    app.run(host=app.config.get('HOST', '0.0.0.0'), port=app.config.get('PORT', 5001),
            debug=app.config.get('DEBUG', False))


if __name__ == '__main__':
    main()
