"""Blueprint per le categorie"""
from flask import Blueprint, g, jsonify, request

from batvault.auth import require_owner
from batvault.errors import InvalidRequest
from batvault.services.categories.category_service import CategoryService

categories_bp = Blueprint('categories', __name__)
service = CategoryService()


@categories_bp.route('', methods=['GET'])
@require_owner
def lista():
    return jsonify({'data': [c.to_dict() for c in service.list_for_owner(g.owner_id)]})


@categories_bp.route('', methods=['POST'])
@require_owner
def aggiungi():
    payload = request.get_json(silent=True) or {}
    success, message, category = service.create(g.owner_id, payload.get('name', ''), payload.get('color'))
    if not success:
        raise InvalidRequest(message)
    return jsonify({'message': message, 'data': category.to_dict()}), 201
