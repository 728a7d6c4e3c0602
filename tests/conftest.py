import pytest

from app import create_app
from models import db, Customer, User


@pytest.fixture
def app(tmp_path):
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'dashboard.db'}",
        "SQLALCHEMY_ENGINE_OPTIONS": {},
        "SECRET_KEY": "test-secret",
    })
    with app.app_context():
        db.create_all()
        db.session.add(Customer(id="c1", name="Evil Rabbit", email="evil@rabbit.com"))
        db.session.add(Customer(id="c2", name="Delba de Oliveira", email="delba@oliveira.com"))
        user = User(email="user@nextmail.com", name="User")
        user.set_password("123456")
        db.session.add(user)
        db.session.commit()
    yield app
    with app.app_context():
        db.session.remove()
    app.extensions["invoice_client"].close()


@pytest.fixture
def invoice_client(app):
    return app.extensions["invoice_client"]


@pytest.fixture
def page_cache(app):
    return app.extensions["page_cache"]


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def logged_in(client):
    response = client.post("/login", data={"email": "user@nextmail.com", "password": "123456"})
    assert response.status_code == 302
    return client
