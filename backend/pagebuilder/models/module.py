from pagebuilder.extensions import db
from .base import BaseModel
from .soft_delete_mixin import SoftDeleteMixin


class Module(BaseModel, SoftDeleteMixin):
    """
    A published (master) content module.

    Exactly one owner is set:
    - page_id             -> inherited layout, shared by every non-custom translation
    - page_translation_id -> custom layout, private to one translation
    """
    __tablename__ = "modules"

    page_id = db.Column(db.String(36), db.ForeignKey("pages.id"), nullable=True, index=True)
    page_translation_id = db.Column(
        db.String(36), db.ForeignKey("page_translations.id"), nullable=True, index=True
    )
    parent_id = db.Column(db.String(36), db.ForeignKey("modules.id"), nullable=True, index=True)

    type = db.Column(db.String(100), nullable=False)  # text, link, container, row, tabs
    settings = db.Column(db.JSON, nullable=False, default=dict)
    sort = db.Column(db.Integer, nullable=False, default=0)

    __table_args__ = (
        db.CheckConstraint(
            "(page_id IS NULL) <> (page_translation_id IS NULL)",
            name="ck_module_single_owner",
        ),
        db.CheckConstraint("sort >= 0", name="ck_module_sort_non_negative"),
    )

    @classmethod
    def _active(cls):
        return cls.query.filter(cls.deleted_at.is_(None)).order_by(cls.sort.asc(), cls.created_at.asc())

    @classmethod
    def find_all_active_by_page(cls, page_id):
        return cls._active().filter(cls.page_id == page_id).all()

    @classmethod
    def find_all_active_by_translation(cls, translation_id):
        return cls._active().filter(cls.page_translation_id == translation_id).all()

    @classmethod
    def find_all_active_for(cls, translation):
        """Master tree rendered for a translation, depending on its layout mode."""
        if translation.custom:
            return cls.find_all_active_by_translation(translation.id)
        return cls.find_all_active_by_page(translation.page_id)
