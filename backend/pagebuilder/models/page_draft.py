from pagebuilder.extensions import db
from .base import BaseModel


class PageDraft(BaseModel):
    """
    Per-user working copy of one page translation.

    base_version is the PageTranslation.version the draft was created
    (or last rebased) against.
    """
    __tablename__ = "page_drafts"

    user_id = db.Column(db.String(36), nullable=False, index=True)
    page_translation_id = db.Column(
        db.String(36), db.ForeignKey("page_translations.id"), nullable=False, index=True
    )
    page_id = db.Column(db.String(36), db.ForeignKey("pages.id"), nullable=False, index=True)
    base_version = db.Column(db.Integer, nullable=False)

    # Draft copy of the translation meta, written to master on publish
    title = db.Column(db.String(255), nullable=False)
    slug = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False, default="")
    keywords = db.Column(db.String(500), nullable=False, default="")

    # Master module ids removed from the tree in this draft
    deleted_module_ids = db.Column(db.JSON, nullable=False, default=list)

    translation = db.relationship("PageTranslation")
    modules = db.relationship(
        "ModuleDraft",
        back_populates="page_draft",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        db.UniqueConstraint("user_id", "page_translation_id", name="uq_page_draft_user_translation"),
    )

    @classmethod
    def find_by_user_and_page_translation(cls, user_id, page_translation_id):
        return cls.query.filter_by(user_id=user_id, page_translation_id=page_translation_id).first()

    @classmethod
    def find_all_by_page(cls, page_id):
        return cls.query.filter_by(page_id=page_id).all()

    @property
    def language(self):
        return self.translation.language

    @property
    def has_conflict(self):
        return self.base_version != self.translation.version

    def record_deleted_modules(self, module_ids):
        merged = list(self.deleted_module_ids or [])
        for module_id in module_ids:
            if module_id and module_id not in merged:
                merged.append(module_id)
        # reassign so the JSON column is flagged dirty
        self.deleted_module_ids = merged
