"""Stampa un token Bearer firmato per un utente (uso locale/sviluppo)."""
import argparse

from batvault import create_app


def main(argv=None):
    parser = argparse.ArgumentParser(description='Genera un token Bearer per le API')
    parser.add_argument('--owner', required=True, help="Id dell'utente")
    parser.add_argument('--config', default='default')
    args = parser.parse_args(argv)

    app = create_app(args.config)
    with app.app_context():
        from batvault.auth import issue_token
        print(issue_token(args.owner))


if __name__ == '__main__':
    main()
