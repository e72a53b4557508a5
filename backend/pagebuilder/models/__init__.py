from .audit_log import AuditLog
from .module import Module
from .module_draft import SCRATCH_SORT, DraftModuleStatus, ModuleDraft
from .module_translation import ModuleTranslation, TranslationStatus
from .module_translation_draft import ModuleTranslationDraft
from .page import Page
from .page_draft import PageDraft
from .page_translation import PageTranslation

__all__ = [
    "AuditLog",
    "DraftModuleStatus",
    "Module",
    "ModuleDraft",
    "ModuleTranslation",
    "ModuleTranslationDraft",
    "Page",
    "PageDraft",
    "PageTranslation",
    "SCRATCH_SORT",
    "TranslationStatus",
]
