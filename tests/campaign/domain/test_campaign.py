"""Tests for the Campaign aggregate and the pure reconcile function."""

from datetime import date
from decimal import Decimal

import pytest
from storefront.campaign.campaign import Campaign, CampaignStatus, reconcile
from storefront.campaign.events import CampaignCompleted, CampaignDeactivated, CampaignLaunched
from storefront.shared.exceptions import ValidationError


def _make_campaign(start=date(2026, 3, 1), end=date(2026, 3, 31), **overrides):
    fields = dict(name="Holi Offers", budget=Decimal("500"), start_date=start, end_date=end)
    fields.update(overrides)
    campaign = Campaign.launch(**fields)
    campaign._events.clear()
    return campaign


class TestLaunch:
    def test_launch(self):
        campaign = Campaign.launch(
            name="Holi Offers",
            budget=Decimal("500"),
            start_date=date(2026, 3, 1),
            end_date=date(2026, 3, 31),
            target_audience="Students",
        )
        assert campaign.active
        assert campaign.status == CampaignStatus.ACTIVE.value
        assert isinstance(campaign._events[0], CampaignLaunched)

    def test_end_before_start_rejected(self):
        with pytest.raises(ValidationError):
            _make_campaign(start=date(2026, 3, 10), end=date(2026, 3, 1))

    def test_negative_budget_rejected(self):
        with pytest.raises(ValidationError):
            _make_campaign(budget=Decimal("-1"))


class TestReconcile:
    def test_running_campaign_stays_active(self):
        assert reconcile(_make_campaign(), date(2026, 3, 31)) is CampaignStatus.ACTIVE

    def test_past_end_date_completes(self):
        assert reconcile(_make_campaign(), date(2026, 4, 1)) is CampaignStatus.COMPLETED

    def test_reconcile_does_not_mutate(self):
        campaign = _make_campaign()
        reconcile(campaign, date(2026, 4, 1))
        assert campaign.status == CampaignStatus.ACTIVE.value

    def test_soft_deleted_campaign_is_left_alone(self):
        campaign = _make_campaign()
        campaign.deactivate()
        assert reconcile(campaign, date(2026, 4, 1)) is CampaignStatus.ACTIVE

    def test_completed_stays_completed(self):
        campaign = _make_campaign()
        campaign.complete()
        assert reconcile(campaign, date(2026, 3, 5)) is CampaignStatus.COMPLETED


class TestLifecycle:
    def test_complete_happens_once(self):
        campaign = _make_campaign()
        campaign.complete()
        assert isinstance(campaign._events[0], CampaignCompleted)
        with pytest.raises(ValidationError):
            campaign.complete()

    def test_deactivate_is_idempotent(self):
        campaign = _make_campaign()
        campaign.deactivate()
        campaign.deactivate()
        assert not campaign.active
        assert len([e for e in campaign._events if isinstance(e, CampaignDeactivated)]) == 1

    @pytest.mark.parametrize(
        "today,running",
        [
            (date(2026, 2, 28), False),
            (date(2026, 3, 1), True),
            (date(2026, 3, 31), True),
            (date(2026, 4, 1), False),
        ],
    )
    def test_is_running(self, today, running):
        assert _make_campaign().is_running(today) is running

    def test_soft_deleted_campaign_is_not_running(self):
        campaign = _make_campaign()
        campaign.deactivate()
        assert not campaign.is_running(date(2026, 3, 15))
