from pagebuilder.extensions import db
from .base import BaseModel


class PageTranslation(BaseModel):
    __tablename__ = "page_translations"

    page_id = db.Column(db.String(36), db.ForeignKey("pages.id"), nullable=False, index=True)
    language = db.Column(db.String(10), nullable=False)
    slug = db.Column(db.String(255), nullable=False)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False, default="")
    keywords = db.Column(db.String(500), nullable=False, default="")

    # custom = modules owned by this translation, otherwise shared with the page
    custom = db.Column(db.Boolean, nullable=False, default=False)

    # Optimistic concurrency token
    version = db.Column(db.Integer, nullable=False, default=1)

    page = db.relationship("Page", back_populates="translations")

    __table_args__ = (
        db.UniqueConstraint("page_id", "language", name="uq_page_translation_language"),
        db.UniqueConstraint("language", "slug", name="uq_translation_slug_per_language"),
    )

    @classmethod
    def find_all_by_page(cls, page_id):
        return cls.query.filter_by(page_id=page_id).order_by(cls.created_at.asc()).all()

    def siblings(self):
        """Other translations of the same page."""
        return [t for t in PageTranslation.find_all_by_page(self.page_id) if t.id != self.id]

    def shared_siblings(self):
        """Sibling translations that share the page-owned module tree."""
        return [t for t in self.siblings() if not t.custom]

    @classmethod
    def find_by_language_and_slug(cls, language, slug):
        return cls.query.filter_by(language=language, slug=slug).first()
