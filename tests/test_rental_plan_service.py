import pytest

from storefront_pricing.services.rental_plan_service import RentalPlanService


def test_plans_ordered_by_duration(rental_plan_service):
    plans = rental_plan_service.list_plans()
    assert [p.duration_days for p in plans] == [7, 30]
    assert plans[0].plan_id == "weekly"
    assert plans[0].fee_percentage == 30


def test_get_plan(rental_plan_service):
    assert rental_plan_service.get_plan("monthly").fee_percentage == 60
    assert rental_plan_service.get_plan("yearly") is None


def test_create_plan_keeps_order(rental_plan_service):
    created = rental_plan_service.create_plan(14, 45, plan_id="fortnight")
    assert created.plan_id == "fortnight"
    assert [p.plan_id for p in rental_plan_service.list_plans()] == ["weekly", "fortnight", "monthly"]


@pytest.mark.parametrize("duration, fee", [(0, 10), (-3, 10), (2.5, 10), (7, -1), (7, 101)])
def test_create_plan_validation(rental_plan_service, duration, fee):
    with pytest.raises(ValueError):
        rental_plan_service.create_plan(duration, fee)


def test_create_duplicate_plan_rejected(rental_plan_service):
    with pytest.raises(ValueError):
        rental_plan_service.create_plan(7, 30, plan_id="weekly")


def test_delete_plan(rental_plan_service):
    rental_plan_service.delete_plan("weekly")
    assert [p.plan_id for p in rental_plan_service.list_plans()] == ["monthly"]
    with pytest.raises(ValueError):
        rental_plan_service.delete_plan("weekly")


def test_empty_store(tmp_path):
    service = RentalPlanService(tmp_path / "rental_plans.csv")
    assert service.list_plans() == []
    service.create_plan(7, 30, plan_id="weekly")
    assert service.get_plan("weekly").duration_days == 7
