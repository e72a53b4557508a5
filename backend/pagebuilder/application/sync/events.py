from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class ModuleTreeChanged:
    """
    Raised after the module tree of a shared-layout draft was saved.
    Consumed synchronously, inside the same transaction.
    """
    draft_id: str
    user_id: str
    page_id: str
    page_translation_id: str
    deleted_module_ids: List[str] = field(default_factory=list)
