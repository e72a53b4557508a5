import pytest

from pagebuilder.extensions import db
from pagebuilder.application.render.visibility import render_modules
from pagebuilder.models.module import Module
from pagebuilder.models.module_translation import ModuleTranslation


@pytest.fixture
def translation(page_factory):
    _page, translation = page_factory()
    return translation


def add_module(translation, type, sort=0, parent=None, status=None, settings=None, content=None):
    module = Module(page_id=translation.page_id)
    module.type = type
    module.sort = sort
    module.settings = settings or {}
    module.parent_id = parent.id if parent else None
    db.session.add(module)
    db.session.flush()
    if status is not None:
        mt = ModuleTranslation()
        mt.module_id = module.id
        mt.language = translation.language
        mt.status = status
        mt.settings = content or {}
        db.session.add(mt)
    db.session.commit()
    return module


def types(nodes):
    return [node["type"] for node in nodes]


@pytest.mark.parametrize("status", ["hidden", "pending"])
def test_excluded_statuses_are_invisible_to_the_public(translation, status):
    add_module(translation, "text", status=status)

    assert render_modules(translation, for_public=True) == []
    assert types(render_modules(translation, for_public=False)) == ["text"]


def test_module_without_translation_is_visible(translation):
    add_module(translation, "text")

    assert types(render_modules(translation, for_public=True)) == ["text"]


def test_hidden_container_hides_its_subtree(translation):
    container = add_module(translation, "container", status="hidden")
    add_module(translation, "text", parent=container, status="translated")
    add_module(translation, "footer", sort=1, status="translated")

    public = render_modules(translation, for_public=True)
    assert types(public) == ["footer"]

    editor = render_modules(translation, for_public=False)
    assert types(editor) == ["container", "footer"]
    assert types(editor[0]["children"]) == ["text"]


def test_nested_pending_module_is_dropped_alone(translation):
    row = add_module(translation, "row", status="translated")
    add_module(translation, "text", parent=row, status="pending")
    add_module(translation, "link", sort=1, parent=row)

    public = render_modules(translation, for_public=True)
    assert types(public) == ["row"]
    assert types(public[0]["children"]) == ["link"]


def test_translation_settings_override_base_settings(translation):
    add_module(
        translation, "text",
        status="translated",
        settings={"size": 1, "text": "base"},
        content={"text": "Ahoj"},
    )

    node = render_modules(translation, for_public=True)[0]
    assert node["settings"] == {"size": 1, "text": "Ahoj"}
    assert node["status"] == "translated"


def test_siblings_are_ordered_by_sort(translation):
    add_module(translation, "b", sort=1)
    add_module(translation, "a", sort=0)
    add_module(translation, "c", sort=2)

    assert types(render_modules(translation, for_public=False)) == ["a", "b", "c"]


def test_tombstoned_modules_are_not_rendered(translation):
    module = add_module(translation, "text")
    module.soft_delete()
    db.session.commit()

    assert render_modules(translation, for_public=False) == []
