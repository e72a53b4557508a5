from enum import Enum
from pagebuilder.extensions import db
from .base import BaseModel

# Sort value of a module created outside an ordered save
SCRATCH_SORT = -1


class DraftModuleStatus(str, Enum):
    CREATED = "created"
    MODIFIED = "modified"
    UNCHANGED = "unchanged"


class ModuleDraft(BaseModel):
    __tablename__ = "module_drafts"

    page_draft_id = db.Column(db.String(36), db.ForeignKey("page_drafts.id"), nullable=False, index=True)

    # Master Module this row supersedes; NULL until the module is first published
    original_module_id = db.Column(db.String(36), nullable=True, index=True)

    parent_id = db.Column(db.String(36), db.ForeignKey("module_drafts.id"), nullable=True, index=True)
    type = db.Column(db.String(100), nullable=False)
    settings = db.Column(db.JSON, nullable=False, default=dict)
    sort = db.Column(db.Integer, nullable=False, default=SCRATCH_SORT)
    status = db.Column(db.String(20), nullable=False, default=DraftModuleStatus.CREATED.value)

    # Client key the row was created for, so re-submissions hit the same row
    temp_key = db.Column(db.String(100), nullable=True)

    # Shared by the copies of one module across sibling-language drafts
    lineage_key = db.Column(db.String(36), nullable=True, index=True)

    page_draft = db.relationship("PageDraft", back_populates="modules")
    translations = db.relationship(
        "ModuleTranslationDraft",
        back_populates="module_draft",
        cascade="all, delete-orphan",
    )

    def translation_for(self, language):
        for td in self.translations:
            if td.language == language:
                return td
        return None

    @property
    def is_scratch(self):
        return self.sort == SCRATCH_SORT

    @classmethod
    def find_all_by_page_draft(cls, page_draft_id):
        return (
            cls.query
            .filter_by(page_draft_id=page_draft_id)
            .order_by(cls.sort.asc(), cls.created_at.asc())
            .all()
        )

    @classmethod
    def find_all_saved_by_page_draft(cls, page_draft_id):
        return (
            cls.query
            .filter(cls.page_draft_id == page_draft_id, cls.sort >= 0)
            .order_by(cls.sort.asc(), cls.created_at.asc())
            .all()
        )

    @classmethod
    def find_in_draft(cls, page_draft_id, module_draft_id):
        return cls.query.filter_by(page_draft_id=page_draft_id, id=module_draft_id).first()

    def mark_modified(self):
        if self.status == DraftModuleStatus.UNCHANGED.value:
            self.status = DraftModuleStatus.MODIFIED.value
