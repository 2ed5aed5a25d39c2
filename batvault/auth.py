"""Verifica dell'identità per le API: token Bearer -> id utente.

Il verificatore è configurabile (`TOKEN_VERIFIER`: callable che riceve il
token e restituisce l'id utente, sollevando un'eccezione se il token non è
valido). In sua assenza si usano token firmati con `SECRET_KEY`.
"""
from functools import wraps

from flask import current_app, g, request
from itsdangerous import BadData, URLSafeTimedSerializer

from batvault.errors import AuthenticationError, AuthorizationError

TOKEN_SALT = 'batvault-auth'


def _serializer():
    return URLSafeTimedSerializer(current_app.config['SECRET_KEY'], salt=TOKEN_SALT)


def issue_token(owner_id):
    """Crea un token firmato per l'utente (script e test)"""
    return _serializer().dumps({'uid': str(owner_id)})


def verify_signed_token(token):
    try:
        payload = _serializer().loads(token, max_age=current_app.config.get('TOKEN_MAX_AGE'))
    except BadData as e:
        raise AuthorizationError('Invalid token') from e
    uid = payload.get('uid') if isinstance(payload, dict) else None
    if not uid:
        raise AuthorizationError('Token did not resolve to a user')
    return uid


def verify_token(token):
    verifier = current_app.config.get('TOKEN_VERIFIER') or verify_signed_token
    try:
        owner_id = verifier(token)
    except AuthorizationError:
        raise
    except Exception as e:
        raise AuthorizationError(str(e) or 'Invalid token') from e
    if not owner_id:
        raise AuthorizationError('Token did not resolve to a user')
    return str(owner_id)


def current_owner_id():
    """Id dell'utente autenticato nella richiesta corrente"""
    header = request.headers.get('Authorization', '')
    if not header.startswith('Bearer ') or not header[7:].strip():
        raise AuthenticationError('Missing bearer token')
    return verify_token(header[7:].strip())


def require_owner(view):
    """Decorator: risolve l'utente dal token e lo espone in `g.owner_id`"""
    @wraps(view)
    def wrapper(*args, **kwargs):
        if request.method == 'OPTIONS':
            return current_app.response_class(status=204)
        g.owner_id = current_owner_id()
        return view(*args, **kwargs)
    return wrapper
