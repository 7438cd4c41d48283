# services/user_admin.py

"""
Account create / delete behind the server authorization gate.
"""

import secrets
import string
from datetime import datetime, timezone
from typing import Optional

from pydantic import ValidationError as PayloadError

from core.config import settings
from core.errors import ConflictError, ValidationError, extract_supabase_error
from core.identity_provider import IdentityProvider
from core.logging_config import logger
from core.profile_store import ProfileStore
from dependencies.auth import CurrentUser
from models.enums import Role
from models.user import AdminCreateUser, CreateUserResponse, DeleteUserResponse


TEMP_PASSWORD_ALPHABET = string.ascii_lowercase + string.digits


def generate_temp_password(length: Optional[int] = None) -> str:
    length = length or settings.TEMP_PASSWORD_LENGTH
    body = "".join(secrets.choice(TEMP_PASSWORD_ALPHABET) for _ in range(length))
    return f"Temp{body}!"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def parse_create_payload(raw: bytes) -> AdminCreateUser:
    """
    Decode a raw create body. An empty body yields an empty payload so the
    required-field check below reports it; anything that is not a JSON
    object of strings is rejected as a 400.
    """
    if not raw or not raw.strip():
        return AdminCreateUser()
    try:
        return AdminCreateUser.model_validate_json(raw)
    except PayloadError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'body'}: {err['msg']}"
            for err in e.errors()
        )
        raise ValidationError(f"Invalid request body: {problems}")


# -----------------------------------------------------
# CREATE
# -----------------------------------------------------
def create_account(
    payload: AdminCreateUser,
    provider: IdentityProvider,
    store: ProfileStore,
    actor: CurrentUser,
) -> CreateUserResponse:
    email = (payload.email or "").strip().lower()
    first_name = (payload.firstName or "").strip()
    last_name = (payload.lastName or "").strip()

    if not email or not first_name or not last_name:
        raise ValidationError("Email, first name and last name are required")

    role = Role.parse(payload.role or Role.RESIDENT.value)
    if role is None:
        raise ValidationError(f"Invalid role: {payload.role}")

    temp_password = None
    password = payload.password
    if not password:
        temp_password = generate_temp_password()
        password = temp_password

    full_name = f"{first_name} {last_name}"

    try:
        identity = provider.create_identity(
            email,
            password,
            metadata={"name": full_name, "firstName": first_name, "lastName": last_name},
        )
    except Exception as e:
        detail = extract_supabase_error(e)
        logger.error(f"Identity creation failed for {email}: {detail}")
        raise ValidationError(f"Error creating authentication user: {detail}")

    now = _now()
    row = {
        "id": identity.id,
        "email": email,
        "name": full_name,
        "firstName": first_name,
        "lastName": last_name,
        "role": role.value,
        "avatar": None,
        "phone": None,
        "isActive": True,
        "createdAt": now,
        "updatedAt": now,
    }

    try:
        profile = store.insert_profile(row)
    except Exception as e:
        detail = extract_supabase_error(e)
        logger.error(f"Profile insert failed for {email}, rolling back identity {identity.id}: {detail}")
        try:
            provider.delete_identity(identity.id)
        except Exception as rollback_error:
            logger.error(
                f"Rollback of identity {identity.id} failed: {extract_supabase_error(rollback_error)}"
            )
        raise ValidationError(f"Error creating profile: {detail}")

    logger.info(f"User {email} ({identity.id}) created as {role.value} by {actor.email} ({actor.id})")

    return CreateUserResponse(
        user=profile.model_dump(),
        tempPassword=temp_password,
    )


# -----------------------------------------------------
# DELETE
# -----------------------------------------------------
def delete_account(
    user_id: Optional[str],
    provider: IdentityProvider,
    store: ProfileStore,
    actor: CurrentUser,
) -> DeleteUserResponse:
    if not user_id:
        raise ValidationError("User id is required")

    if user_id == actor.id:
        raise ConflictError("You cannot delete your own account")

    try:
        store.delete_profile(user_id)
    except Exception as e:
        detail = extract_supabase_error(e)
        logger.error(f"Profile delete failed for {user_id}: {detail}")
        raise ValidationError(f"Error deleting profile: {detail}")

    # The profile is the authoritative record; a provider failure is only a warning
    warning = None
    try:
        provider.delete_identity(user_id)
    except Exception as e:
        warning = f"Authentication user could not be deleted: {extract_supabase_error(e)}"
        logger.warning(f"{warning} (user {user_id})")

    logger.info(f"User {user_id} deleted by {actor.email} ({actor.id})")

    return DeleteUserResponse(userId=user_id, warning=warning)
