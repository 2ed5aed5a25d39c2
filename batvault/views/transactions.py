"""Blueprint per spese ed entrate registrate."""
from flask import Blueprint, current_app, g, jsonify, request

from batvault.auth import require_owner
from batvault.errors import BatvaultError, InvalidRequest, NotFound
from batvault.services.transactions.transaction_service import TransactionService

transactions_bp = Blueprint('transactions', __name__)
service = TransactionService()


@transactions_bp.route('', methods=['GET'])
@require_owner
def lista():
    """Movimenti dell'utente, filtrabili per intervallo di date e tipo"""
    kind = request.args.get('type')
    if kind and kind not in ('expense', 'income'):
        raise InvalidRequest("Type must be 'expense' or 'income'")
    try:
        records = service.list_for_owner(
            g.owner_id,
            from_date=request.args.get('from_date'),
            to_date=request.args.get('to_date'),
            kind=kind,
        )
    except ValueError as e:
        raise InvalidRequest(str(e)) from e
    return jsonify({'data': [r.to_dict() for r in records]})


@transactions_bp.route('', methods=['POST'])
@require_owner
def aggiungi():
    payload = request.get_json(silent=True) or {}
    success, message, record = service.create(
        owner_id=g.owner_id,
        amount=payload.get('amount'),
        kind=payload.get('type', 'expense'),
        on_date=payload.get('date'),
        description=payload.get('description', ''),
        category_id=payload.get('category_id'),
    )
    if not success:
        raise InvalidRequest(message)
    current_app.logger.info('Transaction %s created for %s', record.id, g.owner_id)
    return jsonify({'message': message, 'data': record.to_dict()}), 201


@transactions_bp.route('/<transaction_id>', methods=['DELETE'])
@require_owner
def elimina(transaction_id):
    if not service.get_by_id(g.owner_id, transaction_id):
        raise NotFound("Transaction not found")
    success, message = service.delete_transaction(g.owner_id, transaction_id)
    if not success:
        raise BatvaultError(message)
    return jsonify({'message': message})
