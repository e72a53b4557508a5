from pagebuilder.extensions import db
from .base import BaseModel
from .module_translation import TranslationStatus


class ModuleTranslationDraft(BaseModel):
    __tablename__ = "module_translation_drafts"

    module_draft_id = db.Column(db.String(36), db.ForeignKey("module_drafts.id"), nullable=False, index=True)
    language = db.Column(db.String(10), nullable=False)
    settings = db.Column(db.JSON, nullable=False, default=dict)
    status = db.Column(db.String(20), nullable=False, default=TranslationStatus.TRANSLATED.value)

    module_draft = db.relationship("ModuleDraft", back_populates="translations")

    __table_args__ = (
        db.UniqueConstraint("module_draft_id", "language", name="uq_module_translation_draft_language"),
    )

    @classmethod
    def find_by_module_draft_and_language(cls, module_draft_id, language):
        return cls.query.filter_by(module_draft_id=module_draft_id, language=language).first()
