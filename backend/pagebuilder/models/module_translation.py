from enum import Enum
from pagebuilder.extensions import db
from .base import BaseModel


class TranslationStatus(str, Enum):
    TRANSLATED = "translated"
    PENDING = "pending"
    HIDDEN = "hidden"


class ModuleTranslation(BaseModel):
    __tablename__ = "module_translations"

    module_id = db.Column(db.String(36), db.ForeignKey("modules.id"), nullable=False, index=True)
    language = db.Column(db.String(10), nullable=False)
    settings = db.Column(db.JSON, nullable=False, default=dict)
    status = db.Column(db.String(20), nullable=False, default=TranslationStatus.TRANSLATED.value)

    __table_args__ = (
        db.UniqueConstraint("module_id", "language", name="uq_module_translation_language"),
    )

    @classmethod
    def find_by_module(cls, module_id, language):
        return cls.query.filter_by(module_id=module_id, language=language).first()

    @classmethod
    def find_all_by_modules(cls, module_ids, language):
        if not module_ids:
            return []
        return cls.query.filter(cls.module_id.in_(module_ids), cls.language == language).all()
