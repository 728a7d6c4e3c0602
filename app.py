import atexit
import logging
import os

import click
from dotenv import load_dotenv
from flask import (
    Blueprint, Flask, Response, current_app, redirect, request, jsonify
)
from flask_login import login_required, logout_user

import actions
from auth import login_manager
from cache import PageCache
from database import InvoiceClient, PersistenceError, make_db_uri
from models import db, migrate, Customer, User

logger = logging.getLogger(__name__)

# -------------------------
# Config & helpers
# -------------------------

def make_secret_key() -> str:
    return os.environ.get("SECRET_KEY", "dev-secret-key")

def make_log_level() -> str:
    return os.environ.get("LOG_LEVEL", "INFO").upper()

def invoice_client() -> InvoiceClient:
    return current_app.extensions["invoice_client"]

def page_cache() -> PageCache:
    return current_app.extensions["page_cache"]

def state_response(state: actions.ActionState):
    status = 400 if state.errors else 500
    return jsonify(state.model_dump()), status

# -------------------------
# Auth routes
# -------------------------

bp = Blueprint("dashboard", __name__)

@bp.route("/login", methods=["GET", "POST"])
def login():
    if request.method == "POST":
        result = actions.authenticate(request.form)
        if isinstance(result, actions.Redirect):
            return redirect(result.location)
        return jsonify({"message": result}), 401
    return jsonify({"message": None})

@bp.route("/logout")
@login_required
def logout():
    logout_user()
    return redirect("/login")

# -------------------------
# Invoices
# -------------------------

@bp.route("/dashboard")
@login_required
def index():
    return redirect(actions.INVOICES_PATH)

@bp.route("/dashboard/invoices")
@login_required
def invoices():
    cache = page_cache()
    body = cache.get(request.path)
    if body is None:
        try:
            rows = invoice_client().fetch_invoices()
        except PersistenceError:
            return jsonify({"message": "Database Error: failed to fetch invoices"}), 500
        body = jsonify({"invoices": rows}).get_data()
        cache.set(request.path, body)
    return Response(body, mimetype="application/json")

@bp.route("/dashboard/invoices/create", methods=["POST"])
@login_required
def create_invoice():
    result = actions.create_invoice(invoice_client(), page_cache(), request.form)
    if isinstance(result, actions.Redirect):
        return redirect(result.location)
    return state_response(result)

@bp.route("/dashboard/invoices/<int:invoice_id>/edit", methods=["POST"])
@login_required
def update_invoice(invoice_id):
    result = actions.update_invoice(invoice_client(), page_cache(), invoice_id, request.form)
    if isinstance(result, actions.Redirect):
        return redirect(result.location)
    return state_response(result)

@bp.route("/dashboard/invoices/<int:invoice_id>/delete", methods=["POST"])
@login_required
def delete_invoice(invoice_id):
    result = actions.delete_invoice(invoice_client(), page_cache(), invoice_id)
    if result is not None:
        return state_response(result)
    return "", 204

# -------------------------
# Health
# -------------------------

@bp.route("/healthz")
def healthz():
    if invoice_client().ping():
        return jsonify({"status": "ok", "database": "connected"}), 200
    return jsonify({"status": "ok", "database": "unavailable"}), 200

# -------------------------
# CLI helpers
# -------------------------

@bp.cli.command("create-user")
def create_user():
    """Create a dashboard user from env ADMIN_EMAIL / ADMIN_PASSWORD."""
    email = os.environ.get("ADMIN_EMAIL", "").strip().lower()
    password = os.environ.get("ADMIN_PASSWORD")
    if not email or not password:
        print("Set ADMIN_EMAIL and ADMIN_PASSWORD env vars before running this command.")
        return
    if User.query.filter_by(email=email).first():
        print("User already exists.")
        return
    u = User(email=email, name=os.environ.get("ADMIN_NAME", ""))
    u.set_password(password)
    db.session.add(u)
    db.session.commit()
    print(f"User created: {email}")

@bp.cli.command("create-customer")
@click.argument("customer_id")
@click.argument("name")
@click.argument("email")
def create_customer(customer_id, name, email):
    """Add a customer invoices can be billed to."""
    if db.session.get(Customer, customer_id):
        print("Customer already exists.")
        return
    db.session.add(Customer(id=customer_id, name=name, email=email))
    db.session.commit()
    print(f"Customer created: {customer_id}")

# -------------------------
# App / DB init
# -------------------------

def create_app(test_config=None) -> Flask:
    load_dotenv()

    app = Flask(__name__)
    app.config["SQLALCHEMY_DATABASE_URI"] = make_db_uri()
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
    app.config["SQLALCHEMY_ENGINE_OPTIONS"] = {"pool_pre_ping": True}
    if not app.config["SQLALCHEMY_DATABASE_URI"].startswith("sqlite"):
        app.config["SQLALCHEMY_ENGINE_OPTIONS"].update({
            "pool_size": int(os.environ.get("DB_POOL_SIZE", "5")),
            "max_overflow": int(os.environ.get("DB_MAX_OVERFLOW", "5")),
        })
    app.config["LOG_LEVEL"] = make_log_level()
    app.secret_key = make_secret_key()
    if test_config:
        app.config.update(test_config)

    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    app.register_blueprint(bp, cli_group=None)

    with app.app_context():
        client = InvoiceClient(db.engine)
    client.connect()
    atexit.register(client.close)
    app.extensions["invoice_client"] = client
    app.extensions["page_cache"] = PageCache()
    return app

# -------------------------
# App entry (dev)
# -------------------------
if __name__ == "__main__":
    port = int(os.environ.get("PORT", "8000"))
    create_app().run(host="0.0.0.0", port=port, debug=True)
