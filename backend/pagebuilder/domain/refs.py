"""
Client module descriptors.

A save request references modules through three id namespaces: rows of the
current draft, published master modules and client-side temporary keys.
Each descriptor is parsed into exactly one ModuleRef variant.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from .exceptions import ValidationError


@dataclass(frozen=True)
class DraftRef:
    draft_id: str


@dataclass(frozen=True)
class MasterRef:
    original_module_id: str


@dataclass(frozen=True)
class TempRef:
    temp_key: str


ModuleRef = Union[DraftRef, MasterRef, TempRef]


@dataclass
class ModuleInput:
    ref: ModuleRef
    parent: Optional[ModuleRef]
    type: str
    settings: Dict[str, Any]
    sort: int
    translation_settings: Optional[Dict[str, Any]] = None
    status: Optional[str] = None


def parse_ref(data: Dict[str, Any]) -> ModuleRef:
    if data.get("draftId"):
        return DraftRef(str(data["draftId"]))
    if data.get("originalModuleId"):
        return MasterRef(str(data["originalModuleId"]))
    if data.get("tempKey"):
        return TempRef(str(data["tempKey"]))
    raise ValidationError(
        "INVALID_MODULE",
        "Module needs one of draftId, originalModuleId or tempKey",
    )


def parse_parent_ref(data: Dict[str, Any]) -> Optional[ModuleRef]:
    if data.get("parentDraftId"):
        return DraftRef(str(data["parentDraftId"]))
    if data.get("parentTempKey"):
        return TempRef(str(data["parentTempKey"]))
    if data.get("parentOriginalModuleId"):
        return MasterRef(str(data["parentOriginalModuleId"]))
    return None


def parse_module_input(data: Dict[str, Any]) -> ModuleInput:
    if not isinstance(data, dict):
        raise ValidationError("INVALID_MODULE", "Module descriptor must be an object")

    module_type = data.get("type")
    if not module_type:
        raise ValidationError("INVALID_MODULE", "Module type is required")

    sort = data.get("sort", 0)
    if isinstance(sort, bool) or not isinstance(sort, int):
        raise ValidationError("INVALID_SORT", "Module sort must be an integer", sort=sort)

    settings = data.get("settings") or {}
    translation_settings = data.get("translationSettings")
    if not isinstance(settings, dict) or (
        translation_settings is not None and not isinstance(translation_settings, dict)
    ):
        raise ValidationError("INVALID_MODULE", "Module settings must be objects")

    return ModuleInput(
        ref=parse_ref(data),
        parent=parse_parent_ref(data),
        type=str(module_type),
        settings=settings,
        sort=sort,
        translation_settings=translation_settings,
        status=data.get("status"),
    )


def describe_ref(ref: Optional[ModuleRef]) -> Optional[str]:
    if ref is None:
        return None
    if isinstance(ref, DraftRef):
        return f"draft:{ref.draft_id}"
    if isinstance(ref, MasterRef):
        return f"master:{ref.original_module_id}"
    return f"temp:{ref.temp_key}"
