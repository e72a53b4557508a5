from typing import Any, Dict, List, Optional
from flask import current_app

from pagebuilder.extensions import db
from pagebuilder.models.module_draft import DraftModuleStatus, ModuleDraft
from pagebuilder.models.module_translation import TranslationStatus
from pagebuilder.models.module_translation_draft import ModuleTranslationDraft
from pagebuilder.domain.exceptions import NotFound, ValidationError
from pagebuilder.domain.invariants.module_tree import assert_acyclic, assert_sorts
from pagebuilder.domain.refs import DraftRef, MasterRef, TempRef, describe_ref, parse_module_input
from pagebuilder.utils.audit import log_action
from pagebuilder.utils.transaction import transactional
from pagebuilder.application.sync.events import ModuleTreeChanged
from pagebuilder.application.sync.structure import propagate_structure
from pagebuilder.normalizers.module import normalize_module_draft
from .access import load_draft
from .seed import copy_settings, delete_module_drafts, new_lineage_key


class _DraftIndex:
    """Lookup tables over the current rows of one draft."""

    def __init__(self, rows):
        self.rows = rows
        self.by_id = {r.id: r for r in rows}
        self.by_original = {r.original_module_id: r for r in rows if r.original_module_id}
        self.by_temp = {r.temp_key: r for r in rows if r.temp_key}

    def resolve(self, ref) -> Optional[ModuleDraft]:
        if isinstance(ref, DraftRef):
            return self.by_id.get(ref.draft_id)
        if isinstance(ref, MasterRef):
            row = self.by_original.get(ref.original_module_id)
            if row is None:
                # quick-created rows are addressed by their own id
                scratch = self.by_id.get(ref.original_module_id)
                if scratch is not None and scratch.is_scratch:
                    row = scratch
            return row
        return self.by_temp.get(ref.temp_key)


def _plan(draft, items):
    """
    Resolves every item to an existing row (or None for a new one) and
    every parent to a node key, then validates the resulting tree.
    Nothing is written here.
    """
    index = _DraftIndex(ModuleDraft.find_all_by_page_draft(draft.id))

    rows: List[Optional[ModuleDraft]] = []
    batch_keys = {}
    claimed = {}

    for position, item in enumerate(items):
        if item.ref in batch_keys:
            raise ValidationError(
                "INVALID_MODULE",
                f"Module {describe_ref(item.ref)} submitted twice",
            )
        row = index.resolve(item.ref)
        if row is None and isinstance(item.ref, DraftRef):
            raise NotFound(
                "MODULE_NOT_FOUND",
                f"Module {item.ref.draft_id} not found in draft",
                draftId=item.ref.draft_id,
            )
        if row is not None:
            if row.id in claimed:
                raise ValidationError(
                    "INVALID_MODULE",
                    f"Module {row.id} referenced by two descriptors",
                )
            claimed[row.id] = position
        batch_keys[item.ref] = position
        rows.append(row)

    def node_of_row(row_id):
        if row_id is None:
            return None
        if row_id in claimed:
            return ("batch", claimed[row_id])
        if row_id in index.by_id:
            return ("row", row_id)
        return None

    parent_nodes = []
    for item in items:
        if item.parent is None:
            parent_nodes.append(None)
            continue
        if item.parent in batch_keys:
            parent_nodes.append(("batch", batch_keys[item.parent]))
            continue
        parent_row = index.resolve(item.parent)
        if parent_row is None:
            raise ValidationError(
                "UNRESOLVED_PARENT",
                f"Parent {describe_ref(item.parent)} not found",
                parent=describe_ref(item.parent),
            )
        if parent_row.is_scratch and parent_row.id not in claimed:
            # scratch rows only join the tree through the batch
            raise ValidationError(
                "UNRESOLVED_PARENT",
                f"Parent {describe_ref(item.parent)} is not part of the saved tree",
                parent=describe_ref(item.parent),
            )
        parent_nodes.append(node_of_row(parent_row.id))

    # Out-of-batch rows used as parents survive the save, with their ancestors
    kept = set()
    for node in parent_nodes:
        while node is not None and node[0] == "row" and node[1] not in kept:
            kept.add(node[1])
            node = node_of_row(index.by_id[node[1]].parent_id)

    parents = {("batch", i): parent_nodes[i] for i in range(len(items))}
    for row in index.rows:
        if row.id not in claimed:
            parents[("row", row.id)] = node_of_row(row.parent_id)
    assert_acyclic(parents)

    sort_nodes = [(("batch", i), parent_nodes[i], item.sort) for i, item in enumerate(items)]
    sort_nodes.extend(
        (("row", row_id), node_of_row(index.by_id[row_id].parent_id), index.by_id[row_id].sort)
        for row_id in kept
        if not index.by_id[row_id].is_scratch
    )
    assert_sorts(sort_nodes)

    removed = [
        row for row in index.rows
        if not row.is_scratch and row.id not in claimed and row.id not in kept
    ]
    return rows, parent_nodes, removed


def _write_translation(row, language, incoming, created):
    """
    Identical content on a PENDING (or HIDDEN) row keeps its status,
    anything else is a fresh translation.
    """
    td = row.translation_for(language)
    if td is None:
        row.translations.append(ModuleTranslationDraft(
            language=language,
            settings=copy_settings(incoming),
            status=TranslationStatus.TRANSLATED.value,
        ))
        return not created

    if td.settings == incoming:
        return False

    td.settings = copy_settings(incoming)
    td.status = TranslationStatus.TRANSLATED.value
    return True


def apply_modules(draft, language, items) -> Dict[str, Any]:
    """
    Reconciles the draft with a complete module tree. Flush only.
    """
    rows, parent_nodes, removed = _plan(draft, items)

    temp_mapping = {}
    original_mapping = {}
    created_rows = set()
    changed_rows = set()

    # 1️⃣ Create / update rows, parents come later
    for position, item in enumerate(items):
        row = rows[position]
        if row is None:
            row = ModuleDraft()
            row.page_draft_id = draft.id
            row.status = DraftModuleStatus.CREATED.value
            row.lineage_key = new_lineage_key()
            if isinstance(item.ref, MasterRef):
                row.original_module_id = item.ref.original_module_id
            if isinstance(item.ref, TempRef):
                row.temp_key = item.ref.temp_key
            row.type = item.type
            row.settings = copy_settings(item.settings)
            row.sort = item.sort
            db.session.add(row)
            rows[position] = row
            created_rows.add(position)
            continue

        if row.type != item.type or row.settings != item.settings or row.sort != item.sort:
            row.type = item.type
            row.settings = copy_settings(item.settings)
            row.sort = item.sort
            changed_rows.add(position)

    db.session.flush()

    # 2️⃣ Link parents now that every row has an id
    for position, node in enumerate(parent_nodes):
        row = rows[position]
        if node is None:
            parent_id = None
        elif node[0] == "batch":
            parent_id = rows[node[1]].id
        else:
            parent_id = node[1]
        if row.parent_id != parent_id:
            row.parent_id = parent_id
            changed_rows.add(position)

    # 3️⃣ Content in the edited language
    for position, item in enumerate(items):
        if item.translation_settings is None:
            continue
        if _write_translation(rows[position], language, item.translation_settings, position in created_rows):
            changed_rows.add(position)

    for position in changed_rows - created_rows:
        rows[position].mark_modified()

    # 4️⃣ The batch is the whole tree
    if removed:
        draft.record_deleted_modules(row.original_module_id for row in removed)
        delete_module_drafts(removed)

    for position, item in enumerate(items):
        row = rows[position]
        if isinstance(item.ref, TempRef) and position in created_rows:
            temp_mapping[item.ref.temp_key] = row.id
        if isinstance(item.ref, MasterRef):
            original_mapping[item.ref.original_module_id] = row.id

    db.session.flush()

    current_app.logger.debug(
        "Draft %s saved: %s created, %s changed, %s removed",
        draft.id, len(created_rows), len(changed_rows - created_rows), len(removed),
    )

    return {
        "modules": [normalize_module_draft(row, language) for row in rows],
        "tempKeyMapping": temp_mapping,
        "originalIdMapping": original_mapping,
        "removedCount": len(removed),
    }


def save_modules(
    *,
    user_id: str,
    draft_id: str,
    modules: List[Dict[str, Any]],
    language: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Saves the complete module tree of a draft.

    Responsibilities:
    - descriptor parsing and identity resolution
    - tree validation before any write
    - transactional boundary
    - structural sync to sibling shared-layout drafts
    - audit logging
    """
    draft = load_draft(draft_id, user_id)
    translation = draft.translation
    language = language or translation.language

    if not isinstance(modules, list):
        raise ValidationError("INVALID_MODULE", "modules must be a list")
    items = [parse_module_input(item) for item in modules]

    with transactional():
        result = apply_modules(draft, language, items)

        synced = 0
        if not translation.custom:
            synced = propagate_structure(ModuleTreeChanged(
                draft_id=draft.id,
                user_id=draft.user_id,
                page_id=draft.page_id,
                page_translation_id=translation.id,
                deleted_module_ids=list(draft.deleted_module_ids or []),
            ))

        log_action(
            action="draft.save_modules",
            entity_type="page_draft",
            entity_id=draft.id,
            payload={
                "modules": len(items),
                "created": len(result["tempKeyMapping"]),
                "removed": result["removedCount"],
                "synced_drafts": synced,
            },
            actor_id=str(user_id),
        )

    result.pop("removedCount")
    return result
