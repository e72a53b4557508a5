import pytest
from flask_jwt_extended import create_access_token

from pagebuilder import create_app
from pagebuilder.extensions import db
from pagebuilder.application.pages.create_page import create_page
from pagebuilder.application.pages.create_translation import create_translation

from helpers import EDITOR


@pytest.fixture
def app():
    app = create_app("testing")
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(app):
    def make(user_id=EDITOR, role="editor"):
        token = create_access_token(identity=user_id, additional_claims={"role": role})
        return {"Authorization": f"Bearer {token}"}
    return make


@pytest.fixture
def page_factory(app):
    def make(name="Test Page", language="cs", **kwargs):
        page, translation = create_page(actor_id=EDITOR, name=name, language=language, **kwargs)
        return page, translation
    return make


@pytest.fixture
def bilingual_page(page_factory):
    """A page with a cs and an en translation, both on the shared layout."""
    page, cs = page_factory(name="Test Page", language="cs")
    en = create_translation(actor_id=EDITOR, page_id=page.id, language="en", title="Test Page", slug="/test-page")
    return page, cs, en
