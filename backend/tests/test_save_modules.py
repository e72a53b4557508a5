import pytest

from pagebuilder.application.drafts.get_or_create import draft_status, get_or_create_draft
from pagebuilder.application.drafts.quick_create import clone_module, quick_create_module
from pagebuilder.application.drafts.save_modules import save_modules
from pagebuilder.application.publish.publish_draft import publish_draft
from pagebuilder.domain.exceptions import Forbidden, InvariantViolation, NotFound, ValidationError
from pagebuilder.models.module_draft import DraftModuleStatus
from pagebuilder.models.module_translation_draft import ModuleTranslationDraft
from pagebuilder.extensions import db
from pagebuilder.models.page_draft import PageDraft

from helpers import EDITOR, OTHER_EDITOR, by_type, draft_rows, module


@pytest.fixture
def translation(page_factory):
    _page, translation = page_factory()
    return translation


@pytest.fixture
def draft(translation):
    return get_or_create_draft(user_id=EDITOR, translation_id=translation.id)


def test_get_or_create_is_idempotent(translation):
    first = get_or_create_draft(user_id=EDITOR, translation_id=translation.id)
    second = get_or_create_draft(user_id=EDITOR, translation_id=translation.id)

    assert first.id == second.id
    assert first.base_version == translation.version == 1
    assert PageDraft.query.count() == 1


def test_drafts_are_per_user(translation):
    mine = get_or_create_draft(user_id=EDITOR, translation_id=translation.id)
    theirs = get_or_create_draft(user_id=OTHER_EDITOR, translation_id=translation.id)

    assert mine.id != theirs.id


def test_draft_of_another_user_is_denied(draft):
    with pytest.raises(Forbidden) as exc:
        save_modules(user_id=OTHER_EDITOR, draft_id=draft.id, modules=[])
    assert exc.value.code == "ACCESS_DENIED"


def test_unknown_draft_is_not_found(app):
    with pytest.raises(NotFound) as exc:
        save_modules(user_id=EDITOR, draft_id="missing", modules=[])
    assert exc.value.code == "DRAFT_NOT_FOUND"


def test_temp_keys_are_mapped_to_new_rows(draft):
    result = save_modules(user_id=EDITOR, draft_id=draft.id, modules=[
        module(("temp", "a"), "container", 0),
        module(("temp", "b"), "text", 0, parent=("temp", "a"), translation={"text": "Ahoj"}),
    ])

    mapping = result["tempKeyMapping"]
    assert set(mapping) == {"a", "b"}

    rows = {row.id: row for row in draft_rows(draft.id)}
    assert rows[mapping["b"]].parent_id == mapping["a"]
    assert all(row.status == DraftModuleStatus.CREATED.value for row in rows.values())

    text = next(m for m in result["modules"] if m["draftId"] == mapping["b"])
    assert text["translationStatus"] == "translated"
    assert text["translationSettings"] == {"text": "Ahoj"}


def test_resubmitting_by_temp_key_updates_the_same_row(draft):
    first = save_modules(user_id=EDITOR, draft_id=draft.id, modules=[
        module(("temp", "a"), "text", 0, settings={"size": 1}),
    ])
    second = save_modules(user_id=EDITOR, draft_id=draft.id, modules=[
        module(("temp", "a"), "text", 0, settings={"size": 2}),
    ])

    rows = draft_rows(draft.id)
    assert len(rows) == 1
    assert rows[0].id == first["tempKeyMapping"]["a"]
    assert rows[0].settings == {"size": 2}
    assert second["tempKeyMapping"] == {}


def test_resubmitting_by_draft_id_never_duplicates(draft):
    result = save_modules(user_id=EDITOR, draft_id=draft.id, modules=[module(("temp", "a"), "text", 0)])
    draft_id = result["tempKeyMapping"]["a"]

    for size in range(3):
        save_modules(user_id=EDITOR, draft_id=draft.id, modules=[
            module(("draft", draft_id), "text", 0, settings={"size": size}),
        ])

    rows = draft_rows(draft.id)
    assert len(rows) == 1
    assert rows[0].settings == {"size": 2}


def test_scratch_row_is_converted_by_original_module_id(translation, draft):
    scratch = quick_create_module(user_id=EDITOR, translation_id=translation.id, type="text")
    assert scratch.sort == -1

    result = save_modules(user_id=EDITOR, draft_id=draft.id, modules=[
        module(("original", scratch.id), "text", 0),
    ])

    rows = draft_rows(draft.id)
    assert len(rows) == 1
    assert rows[0].id == scratch.id
    assert rows[0].sort == 0
    assert rows[0].original_module_id is None
    assert result["originalIdMapping"] == {scratch.id: scratch.id}


def test_published_modules_are_matched_by_original_module_id(translation, draft):
    save_modules(user_id=EDITOR, draft_id=draft.id, modules=[module(("temp", "a"), "text", 0)])
    published = publish_draft(user_id=EDITOR, draft_id=draft.id)
    master_id = list(published["createdModuleIds"].values())[0]

    second = get_or_create_draft(user_id=EDITOR, translation_id=translation.id)
    rows = draft_rows(second.id)
    assert [row.original_module_id for row in rows] == [master_id]
    assert rows[0].status == DraftModuleStatus.UNCHANGED.value

    result = save_modules(user_id=EDITOR, draft_id=second.id, modules=[
        module(("original", master_id), "text", 0, settings={"changed": True}),
    ])

    rows = draft_rows(second.id)
    assert len(rows) == 1
    assert rows[0].status == DraftModuleStatus.MODIFIED.value
    assert result["originalIdMapping"] == {master_id: rows[0].id}


def test_unchanged_resubmission_keeps_status(translation, draft):
    save_modules(user_id=EDITOR, draft_id=draft.id, modules=[module(("temp", "a"), "text", 0)])
    publish_draft(user_id=EDITOR, draft_id=draft.id)

    second = get_or_create_draft(user_id=EDITOR, translation_id=translation.id)
    row = draft_rows(second.id)[0]
    save_modules(user_id=EDITOR, draft_id=second.id, modules=[
        module(("draft", row.id), row.type, row.sort, settings=row.settings),
    ])

    assert draft_rows(second.id)[0].status == DraftModuleStatus.UNCHANGED.value


def test_rows_missing_from_the_batch_are_removed(translation, draft):
    save_modules(user_id=EDITOR, draft_id=draft.id, modules=[
        module(("temp", "a"), "text", 0),
        module(("temp", "b"), "link", 1),
    ])
    publish_draft(user_id=EDITOR, draft_id=draft.id)

    second = get_or_create_draft(user_id=EDITOR, translation_id=translation.id)
    rows = by_type(draft_rows(second.id))
    save_modules(user_id=EDITOR, draft_id=second.id, modules=[
        module(("draft", rows["text"].id), "text", 0),
    ])

    remaining = draft_rows(second.id)
    assert [row.type for row in remaining] == ["text"]
    refreshed = db.session.get(PageDraft, second.id)
    assert refreshed.deleted_module_ids == [rows["link"].original_module_id]


def test_unknown_draft_reference_is_rejected(draft):
    with pytest.raises(NotFound) as exc:
        save_modules(user_id=EDITOR, draft_id=draft.id, modules=[module(("draft", "nope"), "text", 0)])
    assert exc.value.code == "MODULE_NOT_FOUND"


def test_unresolved_parent_is_rejected_before_any_write(draft):
    with pytest.raises(ValidationError) as exc:
        save_modules(user_id=EDITOR, draft_id=draft.id, modules=[
            module(("temp", "a"), "text", 0, parent=("temp", "ghost")),
        ])
    assert exc.value.code == "UNRESOLVED_PARENT"
    assert draft_rows(draft.id) == []


def test_duplicate_sibling_sort_is_rejected(draft):
    with pytest.raises(InvariantViolation) as exc:
        save_modules(user_id=EDITOR, draft_id=draft.id, modules=[
            module(("temp", "a"), "text", 0),
            module(("temp", "b"), "text", 0),
        ])
    assert exc.value.code == "DUPLICATE_SORT"
    assert draft_rows(draft.id) == []


def test_same_sort_under_different_parents_is_fine(draft):
    save_modules(user_id=EDITOR, draft_id=draft.id, modules=[
        module(("temp", "a"), "row", 0),
        module(("temp", "b"), "row", 1),
        module(("temp", "c"), "text", 0, parent=("temp", "a")),
        module(("temp", "d"), "text", 0, parent=("temp", "b")),
    ])
    assert len(draft_rows(draft.id)) == 4


def test_negative_sort_is_rejected(draft):
    with pytest.raises(ValidationError) as exc:
        save_modules(user_id=EDITOR, draft_id=draft.id, modules=[module(("temp", "a"), "text", -1)])
    assert exc.value.code == "INVALID_SORT"


def test_parent_cycle_is_rejected(draft):
    with pytest.raises(InvariantViolation) as exc:
        save_modules(user_id=EDITOR, draft_id=draft.id, modules=[
            module(("temp", "a"), "row", 0, parent=("temp", "b")),
            module(("temp", "b"), "row", 0, parent=("temp", "a")),
        ])
    assert exc.value.code == "PARENT_CYCLE"


def test_descriptor_without_identity_is_rejected(draft):
    with pytest.raises(ValidationError) as exc:
        save_modules(user_id=EDITOR, draft_id=draft.id, modules=[{"type": "text", "sort": 0}])
    assert exc.value.code == "INVALID_MODULE"


def test_scratch_rows_are_purged_by_get_or_create(translation, draft):
    quick_create_module(user_id=EDITOR, translation_id=translation.id, type="text")
    assert len(draft_rows(draft.id)) == 1

    get_or_create_draft(user_id=EDITOR, translation_id=translation.id)

    assert draft_rows(draft.id) == []


def test_scratch_rows_are_purged_by_draft_status(translation, draft):
    quick_create_module(user_id=EDITOR, translation_id=translation.id, type="text")

    status = draft_status(user_id=EDITOR, translation_id=translation.id)

    assert status["hasDraft"] is True
    assert status["hasConflict"] is False
    assert draft_rows(draft.id) == []


def test_incorporated_scratch_row_survives_cleanup(translation, draft):
    scratch = quick_create_module(user_id=EDITOR, translation_id=translation.id, type="text")
    save_modules(user_id=EDITOR, draft_id=draft.id, modules=[module(("original", scratch.id), "text", 0)])

    get_or_create_draft(user_id=EDITOR, translation_id=translation.id)

    assert [row.id for row in draft_rows(draft.id)] == [scratch.id]


def test_scratch_parent_outside_the_batch_is_rejected(translation, draft):
    scratch = quick_create_module(user_id=EDITOR, translation_id=translation.id, type="container")

    with pytest.raises(ValidationError) as exc:
        save_modules(user_id=EDITOR, draft_id=draft.id, modules=[
            module(("temp", "c"), "text", 0, parent=("draft", scratch.id)),
        ])
    assert exc.value.code == "UNRESOLVED_PARENT"
    assert [row.id for row in draft_rows(draft.id)] == [scratch.id]


def test_scratch_parent_saved_in_the_same_batch_keeps_its_child(translation, draft):
    scratch = quick_create_module(user_id=EDITOR, translation_id=translation.id, type="container")
    save_modules(user_id=EDITOR, draft_id=draft.id, modules=[
        module(("original", scratch.id), "container", 0),
        module(("temp", "c"), "text", 0, parent=("draft", scratch.id)),
    ])

    get_or_create_draft(user_id=EDITOR, translation_id=translation.id)

    rows = by_type(draft_rows(draft.id))
    assert set(rows) == {"container", "text"}
    assert rows["text"].parent_id == scratch.id


def test_scratch_rows_survive_a_structural_save(translation, draft):
    scratch = quick_create_module(user_id=EDITOR, translation_id=translation.id, type="text")
    save_modules(user_id=EDITOR, draft_id=draft.id, modules=[module(("temp", "a"), "link", 0)])

    assert scratch.id in {row.id for row in draft_rows(draft.id)}


def test_clone_module_copies_the_subtree_as_scratch(draft):
    result = save_modules(user_id=EDITOR, draft_id=draft.id, modules=[
        module(("temp", "row"), "row", 0),
        module(("temp", "text"), "text", 0, parent=("temp", "row"), translation={"text": "Hi"}),
    ])
    row_id = result["tempKeyMapping"]["row"]

    clone = clone_module(user_id=EDITOR, draft_id=draft.id, module_draft_id=row_id)

    rows = draft_rows(draft.id)
    assert len(rows) == 4
    assert clone.sort == -1
    children = [row for row in rows if row.parent_id == clone.id]
    assert [child.type for child in children] == ["text"]
    assert children[0].translation_for("cs").settings == {"text": "Hi"}


def test_draft_content_is_looked_up_per_language(draft):
    result = save_modules(user_id=EDITOR, draft_id=draft.id, modules=[
        module(("temp", "a"), "text", 0, translation={"text": "Ahoj"}),
    ])
    row_id = result["tempKeyMapping"]["a"]

    content = ModuleTranslationDraft.find_by_module_draft_and_language(row_id, "cs")
    assert content.settings == {"text": "Ahoj"}
    assert ModuleTranslationDraft.find_by_module_draft_and_language(row_id, "en") is None
