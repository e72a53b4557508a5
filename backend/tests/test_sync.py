from pagebuilder.extensions import db
from pagebuilder.application.drafts.get_or_create import get_or_create_draft
from pagebuilder.application.drafts.save_modules import save_modules
from pagebuilder.application.layout.switch_mode import switch_mode
from pagebuilder.application.pages.create_translation import create_translation
from pagebuilder.application.publish.publish_draft import publish_draft
from pagebuilder.models.module_translation import ModuleTranslation
from pagebuilder.models.page_draft import PageDraft

from helpers import EDITOR, OTHER_EDITOR, active_masters, by_type, draft_rows, module


def test_save_mirrors_structure_into_sibling_draft(bilingual_page):
    _page, cs, en = bilingual_page
    cs_draft = get_or_create_draft(user_id=EDITOR, translation_id=cs.id)

    save_modules(user_id=EDITOR, draft_id=cs_draft.id, modules=[
        module(("temp", "row"), "row", 0),
        module(("temp", "text"), "text", 0, parent=("temp", "row"), translation={"text": "Ahoj"}),
    ])

    en_draft = PageDraft.find_by_user_and_page_translation(EDITOR, en.id)
    assert en_draft is not None

    rows = by_type(draft_rows(en_draft.id))
    assert set(rows) == {"row", "text"}
    assert rows["text"].parent_id == rows["row"].id

    content = rows["text"].translation_for("en")
    assert content.status == "pending"
    assert content.settings == {"text": "Ahoj"}

    cs_rows = by_type(draft_rows(cs_draft.id))
    assert rows["text"].lineage_key == cs_rows["text"].lineage_key


def test_sibling_drafts_of_other_users_are_untouched(bilingual_page):
    _page, cs, en = bilingual_page
    theirs = get_or_create_draft(user_id=OTHER_EDITOR, translation_id=en.id)

    cs_draft = get_or_create_draft(user_id=EDITOR, translation_id=cs.id)
    save_modules(user_id=EDITOR, draft_id=cs_draft.id, modules=[module(("temp", "a"), "text", 0)])

    assert draft_rows(theirs.id) == []


def test_mirror_updates_moves_and_deletes(bilingual_page):
    _page, cs, en = bilingual_page
    cs_draft = get_or_create_draft(user_id=EDITOR, translation_id=cs.id)
    result = save_modules(user_id=EDITOR, draft_id=cs_draft.id, modules=[
        module(("temp", "a"), "text", 0),
        module(("temp", "b"), "link", 1),
        module(("temp", "c"), "tabs", 2),
    ])
    ids = result["tempKeyMapping"]

    en_draft = PageDraft.find_by_user_and_page_translation(EDITOR, en.id)
    en_rows_before = by_type(draft_rows(en_draft.id))

    save_modules(user_id=EDITOR, draft_id=cs_draft.id, modules=[
        module(("draft", ids["c"]), "tabs", 0),
        module(("draft", ids["a"]), "text", 0, parent=("draft", ids["c"])),
    ])

    en_rows = by_type(draft_rows(en_draft.id))
    assert set(en_rows) == {"tabs", "text"}
    assert en_rows["tabs"].id == en_rows_before["tabs"].id
    assert en_rows["text"].id == en_rows_before["text"].id
    assert en_rows["text"].parent_id == en_rows["tabs"].id
    assert en_rows["tabs"].sort == 0


def test_new_draft_is_cloned_from_sibling_draft(bilingual_page):
    _page, cs, en = bilingual_page
    cs_draft = get_or_create_draft(user_id=EDITOR, translation_id=cs.id)
    save_modules(user_id=EDITOR, draft_id=cs_draft.id, modules=[module(("temp", "a"), "text", 0)])

    # the mirror created it already; drop it and let get-or-create clone
    en_draft = PageDraft.find_by_user_and_page_translation(EDITOR, en.id)
    db.session.delete(en_draft)
    db.session.commit()

    cloned = get_or_create_draft(user_id=EDITOR, translation_id=en.id)
    assert [row.type for row in draft_rows(cloned.id)] == ["text"]


def test_custom_drafts_are_never_a_clone_source(bilingual_page):
    _page, cs, en = bilingual_page
    switch_mode(translation_id=cs.id, mode="custom", version=1)

    cs_draft = get_or_create_draft(user_id=EDITOR, translation_id=cs.id)
    save_modules(user_id=EDITOR, draft_id=cs_draft.id, modules=[module(("temp", "a"), "text", 0)])

    assert PageDraft.find_by_user_and_page_translation(EDITOR, en.id) is None
    en_draft = get_or_create_draft(user_id=EDITOR, translation_id=en.id)
    assert draft_rows(en_draft.id) == []


def test_new_translation_gets_drafts_for_active_editors(bilingual_page):
    page, cs, _en = bilingual_page
    cs_draft = get_or_create_draft(user_id=EDITOR, translation_id=cs.id)
    save_modules(user_id=EDITOR, draft_id=cs_draft.id, modules=[module(("temp", "a"), "text", 0)])

    de = create_translation(actor_id=EDITOR, page_id=page.id, language="de", title="Seite", slug="/seite")

    de_draft = PageDraft.find_by_user_and_page_translation(EDITOR, de.id)
    assert de_draft is not None
    rows = draft_rows(de_draft.id)
    assert [row.type for row in rows] == ["text"]
    assert rows[0].translation_for("de").status == "pending"


def test_publish_backfills_sibling_draft_ids(bilingual_page):
    _page, cs, en = bilingual_page
    cs_draft = get_or_create_draft(user_id=EDITOR, translation_id=cs.id)
    save_modules(user_id=EDITOR, draft_id=cs_draft.id, modules=[module(("temp", "a"), "text", 0)])
    en_draft = PageDraft.find_by_user_and_page_translation(EDITOR, en.id)
    assert draft_rows(en_draft.id)[0].original_module_id is None

    published = publish_draft(user_id=EDITOR, draft_id=cs_draft.id)

    master_id = list(published["createdModuleIds"].values())[0]
    assert draft_rows(en_draft.id)[0].original_module_id == master_id


def test_publish_seeds_pending_translations_for_siblings(bilingual_page):
    _page, cs, en = bilingual_page
    cs_draft = get_or_create_draft(user_id=EDITOR, translation_id=cs.id)
    save_modules(user_id=EDITOR, draft_id=cs_draft.id, modules=[
        module(("temp", "a"), "text", 0, translation={"text": "Ahoj"}),
    ])
    en_draft = PageDraft.find_by_user_and_page_translation(EDITOR, en.id)
    db.session.delete(en_draft)
    db.session.commit()

    publish_draft(user_id=EDITOR, draft_id=cs_draft.id)

    master = active_masters(cs)[0]
    en_content = ModuleTranslation.find_by_module(master.id, "en")
    assert en_content.status == "pending"
    assert en_content.settings == {"text": "Ahoj"}
    assert ModuleTranslation.find_by_module(master.id, "cs").status == "translated"


def test_identical_pending_content_stays_pending(bilingual_page):
    _page, cs, en = bilingual_page
    cs_draft = get_or_create_draft(user_id=EDITOR, translation_id=cs.id)
    save_modules(user_id=EDITOR, draft_id=cs_draft.id, modules=[
        module(("temp", "a"), "text", 0, translation={"text": "Ahoj"}),
    ])
    en_draft = PageDraft.find_by_user_and_page_translation(EDITOR, en.id)
    row = draft_rows(en_draft.id)[0]

    # saved unchanged from the en editor: still a fallback
    result = save_modules(user_id=EDITOR, draft_id=en_draft.id, modules=[
        module(("draft", row.id), "text", 0, translation={"text": "Ahoj"}),
    ])
    assert result["modules"][0]["translationStatus"] == "pending"

    # real translation
    result = save_modules(user_id=EDITOR, draft_id=en_draft.id, modules=[
        module(("draft", row.id), "text", 0, translation={"text": "Hello"}),
    ])
    assert result["modules"][0]["translationStatus"] == "translated"


def test_published_pending_status_is_kept(bilingual_page):
    _page, cs, en = bilingual_page
    cs_draft = get_or_create_draft(user_id=EDITOR, translation_id=cs.id)
    save_modules(user_id=EDITOR, draft_id=cs_draft.id, modules=[
        module(("temp", "a"), "text", 0, translation={"text": "Ahoj"}),
    ])
    en_draft = PageDraft.find_by_user_and_page_translation(EDITOR, en.id)

    publish_draft(user_id=EDITOR, draft_id=cs_draft.id)
    publish_draft(user_id=EDITOR, draft_id=en_draft.id)

    masters = active_masters(en)
    assert len(masters) == 1
    assert ModuleTranslation.find_by_module(masters[0].id, "en").status == "pending"
