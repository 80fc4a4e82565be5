from flask import Flask
from werkzeug.exceptions import HTTPException
from flask_jwt_extended import JWTManager
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from sqlalchemy.orm import sessionmaker, scoped_session
from dotenv import load_dotenv
from typing import Optional, Dict, Any
import os

load_dotenv()

db_engine = None
SessionLocal = None
jwt = JWTManager()

# name -> default; every key can come from the environment or the create_app config dict
CONFIG_DEFAULTS: Dict[str, Any] = {
    'JWT_SECRET_KEY': 'dev-secret',
    'DATABASE_URL': 'sqlite:///dev.db',
    'UPLOAD_FOLDER': os.path.join(os.getcwd(), 'var'),
    'MAX_ATTACHMENT_BYTES': 10 * 1024 * 1024,
    'NOTIFY_WEBHOOK_URL': None,
    'NOTIFY_FROM_EMAIL': 'no-reply@school.local',
}


def _load_config(app: Flask, overrides: Optional[Dict[str, Any]]):
    for key, default in CONFIG_DEFAULTS.items():
        raw = os.getenv(key)
        if raw is None:
            app.config[key] = default
        elif isinstance(default, int):
            app.config[key] = int(raw)
        else:
            app.config[key] = raw
    if overrides:
        app.config.update(overrides)


def _make_engine(db_url: str):
    if db_url.endswith(':memory:'):
        # one shared connection, otherwise each session sees an empty database
        return create_engine(
            db_url,
            echo=False,
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(db_url, echo=False, future=True)


def _error_payload(status: int, title: str, detail: str, **extra) -> Dict[str, Any]:
    return {'error': {'status': status, 'title': title, 'detail': detail, **extra}}


def create_app(config: Optional[Dict[str, Any]] = None):
    global db_engine, SessionLocal
    app = Flask(__name__)
    _load_config(app, config)

    db_engine = _make_engine(app.config['DATABASE_URL'])
    SessionLocal = scoped_session(sessionmaker(bind=db_engine, expire_on_commit=False, autoflush=False))

    jwt.init_app(app)

    from .models import authz, audit, fund, budget_request, approval, item_category  # noqa: F401

    from .routes.iam import iam_bp
    from .routes.requests import req_bp
    from .routes.office import office_bp
    from .routes.reference import ref_bp
    app.register_blueprint(iam_bp, url_prefix='/iam')
    app.register_blueprint(req_bp, url_prefix='/requests')
    app.register_blueprint(office_bp, url_prefix='/office')
    app.register_blueprint(ref_bp)

    @app.route('/healthz')
    def health():
        return {'status': 'ok'}

    @app.teardown_appcontext
    def remove_session(exc=None):
        SessionLocal.remove()

    @app.errorhandler(Exception)
    def handle_errors(e):  # type: ignore
        if isinstance(e, HTTPException):
            return _error_payload(e.code, e.name, e.description, **getattr(e, 'extra', {})), e.code
        app.logger.exception('Unhandled exception')
        return _error_payload(500, 'Internal Server Error', 'Unexpected error'), 500

    from .openapi import build_openapi_spec

    @app.route('/openapi.json')
    def openapi_spec():
        return build_openapi_spec()

    @app.route('/docs')
    def docs_index():
        return (
            "<!DOCTYPE html><html><head><title>Budget Workflow API</title>"
            "<link rel=\"stylesheet\" href=\"https://cdn.jsdelivr.net/npm/redoc@next/bundles/redoc.standalone.css\" />"
            "</head><body><redoc spec-url='/openapi.json'></redoc>"
            "<script src='https://cdn.jsdelivr.net/npm/redoc@next/bundles/redoc.standalone.js'></script>"
            "</body></html>"
        )

    return app


def get_db():
    return SessionLocal()
