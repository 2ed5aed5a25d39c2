"""Blueprint per le transazioni ricorrenti e la loro elaborazione."""
from datetime import datetime

from flask import Blueprint, current_app, g, jsonify, request

from batvault.auth import require_owner
from batvault.errors import (
    BatvaultError, InvalidRequest, InvalidSchedule, NotFound, ProcessingInProgress, StoreUnavailable,
)
from batvault.services.recurring.recurring_service import RecurringDefinitionService
from batvault.utils.validation import parse_optional_int

recurring_bp = Blueprint('recurring', __name__)
service = RecurringDefinitionService()

MAX_PREVIEW = 24
NOT_FOUND = 'Recurring transaction not found'


def _now():
    return datetime.now()


def _owned_definition(definition_id):
    definition = service.get_by_id(g.owner_id, definition_id)
    if not definition:
        raise NotFound(NOT_FOUND)
    return definition


@recurring_bp.route('/process', methods=['POST', 'OPTIONS'])
@require_owner
def process():
    """Registra le ricorrenze scadute dell'utente e fa avanzare le scadenze"""
    trigger = current_app.extensions['batvault.trigger']
    try:
        result = trigger.run(g.owner_id, _now())
    except StoreUnavailable as e:
        current_app.logger.exception('Recurring processing failed for %s', g.owner_id)
        raise BatvaultError(e.message) from e

    if result is None:
        raise ProcessingInProgress('Recurring processing already running')
    return jsonify({'data': result})


@recurring_bp.route('', methods=['GET'])
@require_owner
def lista():
    """Elenco delle ricorrenze per prossima scadenza"""
    return jsonify({'data': service.list_for_owner(g.owner_id)})


@recurring_bp.route('/upcoming', methods=['GET'])
@require_owner
def upcoming():
    return jsonify({'data': service.upcoming(g.owner_id, _now())})


@recurring_bp.route('', methods=['POST'])
@require_owner
def aggiungi():
    """Crea una ricorrenza a partire dal body JSON"""
    payload = request.get_json(silent=True) or {}
    try:
        day_of_month = parse_optional_int(payload.get('day_of_month'), 'day_of_month')
        day_of_week = parse_optional_int(payload.get('day_of_week'), 'day_of_week')
    except ValueError as e:
        raise InvalidRequest(str(e)) from e

    success, message, definition = service.create(
        owner_id=g.owner_id,
        amount=payload.get('amount'),
        description=payload.get('description', ''),
        category_id=payload.get('category_id'),
        kind=payload.get('type', 'expense'),
        frequency=payload.get('frequency', 'monthly'),
        start_date=payload.get('start_date') or _now().date(),
        end_date=payload.get('end_date'),
        day_of_month=day_of_month,
        day_of_week=day_of_week,
        today=_now().date(),
    )
    if not success:
        raise InvalidRequest(message)

    current_app.logger.info('Recurring definition %s created for %s', definition.id, g.owner_id)
    return jsonify({'message': message, 'data': service.serialize(definition)}), 201


@recurring_bp.route('/<definition_id>/preview', methods=['GET'])
@require_owner
def preview(definition_id):
    """Prossime N occorrenze (default 3)"""
    try:
        count = parse_optional_int(request.args.get('count'), 'count') or 3
    except ValueError as e:
        raise InvalidRequest(str(e)) from e
    count = max(1, min(count, MAX_PREVIEW))

    _owned_definition(definition_id)
    success, message, dates = service.preview(g.owner_id, definition_id, count)
    if not success:
        raise InvalidSchedule(message)
    return jsonify({'data': [d.isoformat() for d in dates]})


@recurring_bp.route('/<definition_id>/toggle', methods=['POST'])
@require_owner
def toggle(definition_id):
    """Mette in pausa o riattiva una ricorrenza"""
    _owned_definition(definition_id)
    success, message = service.toggle_active(g.owner_id, definition_id)
    if not success:
        raise BatvaultError(message)
    return jsonify({'message': message, 'data': service.serialize(_owned_definition(definition_id))})


@recurring_bp.route('/<definition_id>', methods=['DELETE'])
@require_owner
def elimina(definition_id):
    """Elimina la ricorrenza; le transazioni già create restano"""
    _owned_definition(definition_id)
    success, message = service.delete_definition(g.owner_id, definition_id)
    if not success:
        raise BatvaultError(message)
    return jsonify({'message': message})
