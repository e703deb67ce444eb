"""
Seed Permissions and Roles Script
Upserts the admin permission catalog (module x action) and the preset roles from
permissions_config, syncs each preset role's grants, and optionally bootstraps a
super admin account from SEED_ADMIN_EMAIL / SEED_ADMIN_PASSWORD.

Run with: python -m mall_admin.scripts.seed_permissions_roles
"""

import logging
import os
import sys
from typing import Dict, List, Optional

from supabase import Client

from mall_admin.config.permissions_config import PERMISSION_MATRIX, SUPER_ADMIN_ROLE
from mall_admin.core.security import hash_password
from mall_admin.database.supabase_client import first_row, get_service_supabase

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def seed_permissions(supabase: Client) -> Dict[str, str]:
    """Upsert every catalog permission; returns name -> id"""
    logger.info("Seeding permissions...")

    rows = [
        {
            "name": perm["name"],
            "display_name": perm["display_name"],
            "module": perm["module"],
            "action": perm["action"],
            "description": perm["description"],
            "is_active": True,
        }
        for perm in PERMISSION_MATRIX["permissions"]
    ]
    result = supabase.table("admin_permissions").upsert(rows, on_conflict="name").execute()
    ids = {row["name"]: row["id"] for row in result.data or []}

    logger.info(f"Permissions seeded: {len(ids)} upserted")
    return ids


def seed_roles(supabase: Client, permission_ids: Dict[str, str]) -> Dict[str, str]:
    """Upsert the preset roles and sync their grants; returns name -> id"""
    logger.info("Seeding roles...")

    role_ids: Dict[str, str] = {}
    for role in PERMISSION_MATRIX["roles"]:
        try:
            result = supabase.table("admin_roles").upsert({
                "name": role["name"],
                "display_name": role["display_name"],
                "description": role["description"],
                "color": role["color"],
                "sort_order": role["sort_order"],
                "is_active": True,
            }, on_conflict="name").execute()
            row = first_row(result)
            if row is None:
                logger.warning(f"Role {role['name']} was not returned by the upsert")
                continue
            role_ids[role["name"]] = row["id"]
            assign_permissions_to_role(supabase, row["id"], role["name"], role["permissions"], permission_ids)
        except Exception as e:
            logger.error(f"Error processing role {role['name']}: {e}")

    logger.info(f"Roles seeded: {len(role_ids)} upserted")
    return role_ids


def assign_permissions_to_role(
    supabase: Client,
    role_id: str,
    role_name: str,
    permission_names: List[str],
    permission_ids: Dict[str, str],
):
    """Make the role's grants match the config: add missing ones, remove the rest"""
    wanted = {permission_ids[name] for name in permission_names if name in permission_ids}
    missing = set(permission_names) - set(permission_ids)
    if missing:
        logger.warning(f"Unknown permissions for role {role_name}: {sorted(missing)}")

    existing_result = supabase.table("admin_role_permissions")\
        .select("permission_id")\
        .eq("role_id", role_id)\
        .execute()
    existing = {p["permission_id"] for p in existing_result.data or []}

    new_assignments = [{"role_id": role_id, "permission_id": pid} for pid in sorted(wanted - existing)]
    if new_assignments:
        supabase.table("admin_role_permissions").insert(new_assignments).execute()
        logger.debug(f"Assigned {len(new_assignments)} permissions to role {role_name}")

    to_remove = existing - wanted
    if to_remove:
        supabase.table("admin_role_permissions")\
            .delete()\
            .eq("role_id", role_id)\
            .in_("permission_id", list(to_remove))\
            .execute()
        logger.debug(f"Removed {len(to_remove)} permissions from role {role_name}")


def seed_admin(supabase: Client, email: Optional[str], password: Optional[str], super_admin_role_id: Optional[str]) -> Optional[str]:
    """Create the bootstrap super admin when it does not exist yet; returns its id"""
    if not email or not password:
        logger.info("SEED_ADMIN_EMAIL / SEED_ADMIN_PASSWORD not set, skipping admin account")
        return None
    email = email.strip().lower()

    existing = first_row(supabase.table("admin_users").select("id").eq("email", email).limit(1).execute())
    if existing is not None:
        user_id = existing["id"]
        logger.info(f"Admin account {email} already exists")
    else:
        created = first_row(supabase.table("admin_users").insert({
            "email": email,
            "full_name": "Super Admin",
            "password_hash": hash_password(password),
            "is_active": True,
        }).execute())
        user_id = created["id"]
        logger.info(f"Created admin account {email}")

    if super_admin_role_id:
        supabase.table("admin_user_roles").upsert(
            {"user_id": user_id, "role_id": super_admin_role_id},
            on_conflict="user_id,role_id",
        ).execute()
    return user_id


def main():
    """Main function to seed permissions, roles and the bootstrap admin"""
    try:
        supabase = get_service_supabase()

        logger.info("Starting permissions and roles seeding...")

        # Seed permissions first
        permission_ids = seed_permissions(supabase)

        # Then seed roles (which depend on permissions)
        role_ids = seed_roles(supabase, permission_ids)

        seed_admin(
            supabase,
            os.environ.get("SEED_ADMIN_EMAIL"),
            os.environ.get("SEED_ADMIN_PASSWORD"),
            role_ids.get(SUPER_ADMIN_ROLE),
        )

        logger.info("Seeding completed successfully!")
        logger.info(f"Total: {len(permission_ids)} permissions, {len(role_ids)} roles processed")

    except Exception as e:
        logger.error(f"Error during seeding: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
