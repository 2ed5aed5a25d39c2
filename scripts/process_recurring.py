"""Script per elaborare le transazioni ricorrenti scadute di un utente.

Uso: eseguire nello stesso ambiente dell'app Flask (usa create_app()).
Opzioni:
  --owner ID : utente di cui elaborare le ricorrenze (obbligatorio)
  --now TS   : istante di riferimento ISO (default: adesso)
"""
import argparse
import json
import logging
import sys

from batvault import create_app


def main(argv=None):
    parser = argparse.ArgumentParser(description='Elabora le transazioni ricorrenti scadute di un utente')
    parser.add_argument('--owner', required=True, help="Id dell'utente")
    parser.add_argument('--now', default=None, help='Istante di riferimento ISO (default: adesso)')
    parser.add_argument('--config', default='default', help='Nome della configurazione (default, development, testing)')
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s %(name)s: %(message)s')

    app = create_app(args.config)
    with app.app_context():
        from batvault.errors import StoreUnavailable
        from batvault.services.recurring.processor import DueTransactionProcessor
        from batvault.utils.validation import parse_datetime

        try:
            now = parse_datetime(args.now) if args.now else None
        except ValueError as e:
            parser.error(str(e))
        try:
            result = DueTransactionProcessor().process_due(args.owner, now)
        except StoreUnavailable as e:
            print(f"Recurring processing failed: {e}", file=sys.stderr)
            return 1

        print(json.dumps(result, indent=2))
        failed = [r for r in result['results'] if r['status'] != 'success']
        return 1 if failed else 0


if __name__ == '__main__':
    sys.exit(main())
