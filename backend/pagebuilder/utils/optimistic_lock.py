from flask import current_app
from sqlalchemy import select, update
from pagebuilder.extensions import db
from pagebuilder.models.page_translation import PageTranslation
from pagebuilder.domain.exceptions import NotFound, ValidationError, VersionConflict


def lock_translation(translation_id):
    """
    Loads a translation with a row-level lock for the rest of the transaction.
    """
    translation = (
        db.session.execute(
            select(PageTranslation)
            .where(PageTranslation.id == translation_id)
            .with_for_update()
        )
        .scalar_one_or_none()
    )
    if not translation:
        raise NotFound("TRANSLATION_NOT_FOUND", "Translation not found")
    return translation


def enforce_version(translation, client_version, force=False):
    """
    Raises 409 VERSION_CONFLICT if the client edited an older version.
    The version may only be left out together with force.
    """
    if force:
        return
    if client_version is None:
        raise ValidationError("VERSION_REQUIRED", "version is required unless force is set")
    try:
        client_version = int(client_version)
    except (TypeError, ValueError) as exc:
        raise ValidationError("VERSION_REQUIRED", "version must be an integer") from exc
    if client_version != translation.version:
        current_app.logger.warning(
            "Version conflict on translation %s: client=%s current=%s",
            translation.id, client_version, translation.version,
        )
        raise VersionConflict(
            "Translation has been modified by someone else",
            clientVersion=client_version,
            currentVersion=translation.version,
        )


def bump_version(translation):
    """
    Compare-and-swap increment of translation.version.

    A concurrent writer that bumped the version first makes the UPDATE match
    no row, which is reported as a conflict instead of a lost update.
    """
    seen = translation.version
    result = db.session.execute(
        update(PageTranslation)
        .where(PageTranslation.id == translation.id, PageTranslation.version == seen)
        .values(version=PageTranslation.version + 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise VersionConflict(
            "Translation was published concurrently",
            draftBaseVersion=seen,
            currentMasterVersion=seen + 1,
        )
    db.session.refresh(translation, ["version"])
    return translation.version
