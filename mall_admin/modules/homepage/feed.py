"""
What's On feed resolution.

Feed items either point at another entity (event, tenant, post, promotion)
through `reference_id`, or carry their own content (`custom`). References are
not foreign keys, so the referenced row may be gone; such items resolve with
`reference_data = None` and fall back to their custom fields.
"""

import logging
from typing import Any, Dict, List, Optional

from supabase import Client

from mall_admin.modules.homepage.schemas import ReferenceData, ResolvedWhatsOn

logger = logging.getLogger(__name__)

# content_type -> (table, columns)
CONTENT_TABLES = {
    "event": ("events", "id, title, images"),
    "tenant": ("tenants", "id, name, logo_url"),
    "post": ("posts", "id, title, featured_image"),
    "promotion": ("promotions", "id, title, image_url"),
}


def _first_image(images: Any) -> Optional[str]:
    if not images:
        return None
    first = images[0]
    if isinstance(first, dict):
        return first.get("url")
    return first


def to_reference_data(row: Dict[str, Any]) -> ReferenceData:
    """Normalize a referenced row of any content type to {id, title, name, image_url, logo_url}."""
    image = row.get("image_url") or row.get("featured_image") or row.get("logo_url") or _first_image(row.get("images"))
    return ReferenceData(
        id=row["id"],
        title=row.get("title"),
        name=row.get("name"),
        image_url=image,
        logo_url=row.get("logo_url"),
    )


def resolve(item: Dict[str, Any], reference: Optional[Dict[str, Any]]) -> ResolvedWhatsOn:
    """
    Build the resolved view of a feed item.

    Custom overrides win; otherwise the referenced title (then name) and the
    referenced image (then logo) are used.
    """
    reference_data = None
    if item.get("content_type") != "custom" and reference is not None:
        reference_data = to_reference_data(reference)

    display_title = item.get("custom_title")
    display_image = item.get("custom_image_url")
    if reference_data is not None:
        display_title = display_title or reference_data.title or reference_data.name
        display_image = display_image or reference_data.image_url or reference_data.logo_url

    return ResolvedWhatsOn.model_validate({
        **item,
        "reference_data": reference_data,
        "display_title": display_title,
        "display_image": display_image,
    })


def fetch_references(supabase: Client, items: List[Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
    """Load referenced rows with one query per content type, keyed by "<content_type>:<id>"."""
    wanted: Dict[str, List[str]] = {}
    for item in items:
        content_type = item.get("content_type")
        if content_type in CONTENT_TABLES and item.get("reference_id"):
            wanted.setdefault(content_type, []).append(item["reference_id"])

    references: Dict[str, Dict[str, Any]] = {}
    for content_type, ids in wanted.items():
        table, columns = CONTENT_TABLES[content_type]
        result = supabase.table(table)\
            .select(columns)\
            .in_("id", list(dict.fromkeys(ids)))\
            .execute()
        for row in result.data or []:
            references[f"{content_type}:{row['id']}"] = row
    return references


def resolve_items(supabase: Client, items: List[Dict[str, Any]]) -> List[ResolvedWhatsOn]:
    references = fetch_references(supabase, items)
    resolved = []
    for item in items:
        reference = references.get(f"{item.get('content_type')}:{item.get('reference_id')}")
        if reference is None and item.get("content_type") != "custom":
            logger.debug(f"What's On item {item.get('id')} references a missing {item.get('content_type')}")
        resolved.append(resolve(item, reference))
    return resolved
