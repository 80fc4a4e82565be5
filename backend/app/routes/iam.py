from flask import Blueprint, request, abort
from flask_jwt_extended import create_access_token, jwt_required, get_jwt_identity
from sqlalchemy import select
from app import get_db
from app.constants.roles import ROLE_TEACHER, ROLE_LABELS, is_admin_role
from app.decorators.audit import audit_log
from app.errors import ValidationError
from app.models.authz import User
from app.utils.validation import optional_str, require_json_fields, require_json_object

iam_bp = Blueprint('iam', __name__)


def _user_json(u: User):
    return {
        'id': u.id,
        'name': u.name,
        'email': u.email,
        'role': u.role,
        'role_label': ROLE_LABELS.get(u.role, u.role),
        'department': u.department,
        'is_admin': is_admin_role(u.role),
    }


def issue_token(u: User) -> str:
    # JWT identity must be a string (flask-jwt-extended v4 requirement)
    return create_access_token(identity=str(u.id), additional_claims={
        'role': u.role,
        'department': u.department,
    })


@iam_bp.post('/auth/signup')
@audit_log('USER.SIGNUP', entity='User', entity_id_key='id', meta_keys=['role', 'department'])
def signup():
    """Self-registration; the account is always a teacher. Other roles are seeded."""
    data = require_json_fields(request.get_json(silent=True) or {}, 'name', 'email', 'password')
    session = get_db()
    email = optional_str(data, 'email').lower()
    if session.execute(select(User).where(User.email == email)).scalar_one_or_none():
        abort(400, description='email already registered')
    u = User(name=optional_str(data, 'name'), email=email, password_hash='', role=ROLE_TEACHER,
             department=optional_str(data, 'department') or None)
    if not isinstance(data['password'], str):
        raise ValidationError({'password': 'must be a string'})
    u.set_password(data['password'])
    session.add(u)
    session.commit()
    return {**_user_json(u), 'access_token': issue_token(u)}, 201


@iam_bp.post('/auth/login')
def login():
    data = require_json_object(request.get_json(silent=True) or {})
    email = optional_str(data, 'email').lower(); password = data.get('password')
    if not email or not isinstance(password, str) or not password:
        abort(400, description='email & password required')
    session = get_db()
    user = session.execute(select(User).where(User.email == email)).scalar_one_or_none()
    if not user or not user.is_active or not user.verify_password(password):
        abort(401, description='invalid credentials')
    return {'access_token': issue_token(user)}


@iam_bp.get('/auth/me')
@jwt_required()
def me():
    session = get_db()
    user = session.get(User, int(get_jwt_identity()))
    if not user:
        abort(404)
    return _user_json(user)
