from pagebuilder.extensions import db
from .base import BaseModel
from .soft_delete_mixin import SoftDeleteMixin

class Page(BaseModel, SoftDeleteMixin):
    __tablename__ = 'pages'

    name = db.Column(db.String(200), nullable=False)
    parent_id = db.Column(db.String(36), db.ForeignKey("pages.id"), nullable=True, index=True)
    is_404 = db.Column(db.Boolean, nullable=False, default=False)
    is_homepage = db.Column(db.Boolean, nullable=False, default=False)

    translations = db.relationship(
        "PageTranslation",
        back_populates="page",
        order_by="PageTranslation.created_at",
    )

    @classmethod
    def find_active(cls, page_id):
        return cls.query.filter_by(id=page_id, deleted_at=None).first()

    def active_children(self):
        return Page.query.filter_by(parent_id=self.id, deleted_at=None).all()
