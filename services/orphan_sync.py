# services/orphan_sync.py

"""
Orphan-identity sync: create a minimal profile for every identity known to
the provider that has no persisted profile row.

Orphans are processed one at a time. A failed insert is recorded and the
loop moves on; rows already inserted stay committed.
"""

from datetime import datetime, timezone
from typing import List, Tuple

from core.config import settings
from core.errors import PartialFailure, extract_supabase_error
from core.identity_provider import IdentityProvider
from core.logging_config import logger
from core.profile_store import ProfileStore
from models.enums import Role
from models.user import Identity, SyncResponse


def derive_names(identity: Identity) -> Tuple[str, str]:
    meta = identity.user_metadata or {}
    name = (
        meta.get("name")
        or meta.get("full_name")
        or (identity.email.split("@")[0] if identity.email else None)
        or "User"
    )
    parts = str(name).split(" ")
    first_name = parts[0] or "User"
    last_name = " ".join(parts[1:]) or "Name"
    return first_name, last_name


def build_orphan_row(identity: Identity) -> dict:
    meta = identity.user_metadata or {}
    first_name, last_name = derive_names(identity)
    now = datetime.now(timezone.utc).isoformat()
    return {
        "id": identity.id,
        "email": identity.email,
        "name": f"{first_name} {last_name}",
        "firstName": first_name,
        "lastName": last_name,
        "role": Role(settings.SYNC_DEFAULT_ROLE).value,
        "avatar": meta.get("avatar_url"),
        "phone": meta.get("phone"),
        "isActive": True,
        "createdAt": now,
        "updatedAt": now,
    }


def sync_orphan_identities(provider: IdentityProvider, store: ProfileStore) -> SyncResponse:
    identities = provider.list_identities()
    profile_ids = set(store.list_profile_ids())

    orphans = [i for i in identities if i.id not in profile_ids]
    logger.info(
        f"Sync: {len(identities)} identities, {len(profile_ids)} profiles, {len(orphans)} orphan(s)"
    )

    synced = 0
    errors: List[str] = []

    for identity in orphans:
        try:
            store.insert_profile(build_orphan_row(identity))
            synced += 1
            logger.info(f"Profile created for {identity.email} ({identity.id})")
        except Exception as e:
            msg = f"Error creating profile for {identity.email}: {extract_supabase_error(e)}"
            logger.error(msg)
            errors.append(msg)

    partial = None
    if errors:
        partial = PartialFailure(errors, succeeded=synced)
        logger.warning(f"Sync finished with partial failure: {partial.message}")

    return SyncResponse(
        synced=synced,
        errors=errors,
        totalAuthUsers=len(identities),
        totalPublicUsers=len(profile_ids),
        partialFailure=partial.message if partial else None,
    )
