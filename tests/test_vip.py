import pytest

from conftest import make_ctx, make_user
from mall_admin.core.errors import ErrorCode
from mall_admin.modules.vip.service import VipService


@pytest.fixture
def service(backends):
    return VipService(backends)


def tier_payload(**overrides):
    payload = {
        "name": "Gold",
        "description": "Our most popular membership tier",
        "qualification_requirement": "Spend IDR 10,000,000 within twelve months",
        "minimum_spend_amount": 10000000,
        "tier_level": 2,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def tier(db):
    return db.seed("vip_tiers", {"name": "Gold", "tier_level": 2, "is_active": True})[0]


@pytest.fixture
def benefits(db):
    return db.seed(
        "vip_benefits",
        {"name": "Free parking", "icon": "car", "sort_order": 1},
        {"name": "Lounge access", "icon": "sofa", "sort_order": 2},
        {"name": "Birthday voucher", "icon": "gift", "sort_order": 3},
    )


def test_create_tier(service, admin_ctx):
    result = service.create_tier(admin_ctx, tier_payload())
    assert result.success, result.error
    assert result.data.card_color == "#6b7280"


def test_tier_level_is_unique(service, admin_ctx):
    service.create_tier(admin_ctx, tier_payload())
    result = service.create_tier(admin_ctx, tier_payload(name="Platinum"))
    assert result.code == ErrorCode.DUPLICATE
    assert result.error == "A tier with this level already exists"


def test_tier_level_bounds(service, admin_ctx):
    result = service.create_tier(admin_ctx, tier_payload(tier_level=11))
    assert result.error == "Tier level must be at most 10"


def test_replace_tier_benefits(service, db, admin_ctx, tier, benefits):
    result = service.replace_tier_benefits(admin_ctx, tier["id"], {"benefits": [
        {"benefit_id": benefits[2]["id"], "benefit_note": "Once a year"},
        {"benefit_id": benefits[0]["id"], "display_order": 5},
    ]})

    assert result.success, result.error
    links = sorted(db.rows("vip_tier_benefits"), key=lambda link: link["display_order"])
    assert [(link["benefit_id"], link["display_order"]) for link in links] == [
        (benefits[2]["id"], 0),
        (benefits[0]["id"], 5),
    ]

    result = service.replace_tier_benefits(admin_ctx, tier["id"], {"benefits": [{"benefit_id": benefits[1]["id"]}]})
    assert result.success
    assert [link["benefit_id"] for link in db.rows("vip_tier_benefits")] == [benefits[1]["id"]]

    loaded = service.get_tier(tier["id"])
    assert [b.name for b in loaded.benefits] == ["Lounge access"]


def test_tier_benefits_are_ordered(service, db, tier, benefits):
    db.seed(
        "vip_tier_benefits",
        {"tier_id": tier["id"], "benefit_id": benefits[0]["id"], "display_order": 2},
        {"tier_id": tier["id"], "benefit_id": benefits[1]["id"], "display_order": 1, "benefit_note": "Weekdays"},
    )
    tiers = service.list_tiers()
    assert [(b.name, b.benefit_note) for b in tiers[0].benefits] == [("Lounge access", "Weekdays"), ("Free parking", None)]


def test_replace_benefits_needs_manage(service, tier, benefits):
    editor = make_ctx(make_user(permissions=["vip.edit"]))
    result = service.replace_tier_benefits(editor, tier["id"], {"benefits": []})
    assert result.code == ErrorCode.FORBIDDEN


def test_replace_benefits_rejects_bad_id(service, admin_ctx, tier):
    result = service.replace_tier_benefits(admin_ctx, tier["id"], {"benefits": [{"benefit_id": "parking"}]})
    assert result.error == "Invalid benefit ID"


def test_delete_guards(service, db, admin_ctx, tier, benefits):
    db.seed("vip_tier_benefits", {"tier_id": tier["id"], "benefit_id": benefits[0]["id"], "display_order": 0})

    result = service.delete_tier(admin_ctx, tier["id"])
    assert result.code == ErrorCode.REFERENTIAL_CONFLICT
    assert result.error == "Cannot delete tier with 1 benefit(s) assigned. Remove benefits first."

    result = service.delete_benefit(admin_ctx, benefits[0]["id"])
    assert result.error == "Cannot delete benefit assigned to 1 tier(s). Remove from tiers first."

    assert service.delete_benefit(admin_ctx, benefits[1]["id"]).success
