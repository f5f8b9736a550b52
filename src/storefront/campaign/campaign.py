"""Campaign aggregate and its lifecycle.

A campaign is ``Active`` until its end date passes, then ``Completed``,
exactly once. Nothing schedules that change: every read boundary calls the
pure ``reconcile`` and persists the result when it differs. Deleting a
campaign only clears ``active``; the record stays so historical ROI can
still be computed.
"""

from datetime import UTC, date, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, Date, DateTime, Decimal, String

from storefront.campaign.events import CampaignCompleted, CampaignDeactivated, CampaignLaunched
from storefront.domain import storefront
from storefront.store.port import CAMPAIGNS
from storefront.store.repository import ResourceRepository


class CampaignStatus(Enum):
    ACTIVE = "Active"
    COMPLETED = "Completed"


@storefront.aggregate
class Campaign:
    name: String(required=True, max_length=200)
    target_audience: String(max_length=200, default="")
    budget: Decimal(required=True, min_value=0)
    start_date: Date(required=True)
    end_date: Date(required=True)
    active: Boolean(default=True)
    status: String(choices=CampaignStatus, default=CampaignStatus.ACTIVE.value)
    created_at: DateTime(default=lambda: datetime.now(UTC))

    @invariant.post
    def end_date_must_not_precede_start_date(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValidationError({"end_date": ["end_date must not be before start_date"]})

    @classmethod
    def launch(cls, name, budget, start_date, end_date, target_audience=""):
        campaign = cls(
            name=name,
            target_audience=target_audience or "",
            budget=budget,
            start_date=start_date,
            end_date=end_date,
        )
        campaign.raise_(
            CampaignLaunched(
                campaign_id=campaign.id,
                name=campaign.name,
                budget=campaign.budget,
                start_date=campaign.start_date,
                end_date=campaign.end_date,
            )
        )
        return campaign

    def complete(self) -> None:
        if self.status == CampaignStatus.COMPLETED.value:
            raise ValidationError({"status": ["Campaign is already completed"]})
        self.status = CampaignStatus.COMPLETED.value
        self.raise_(CampaignCompleted(campaign_id=self.id, end_date=self.end_date))

    def deactivate(self) -> None:
        if not self.active:
            return
        self.active = False
        self.raise_(CampaignDeactivated(campaign_id=self.id))

    def is_running(self, today: date) -> bool:
        """True while the campaign may still attribute new orders."""
        return (
            self.active
            and reconcile(self, today) is CampaignStatus.ACTIVE
            and self.start_date <= today <= self.end_date
        )


def reconcile(campaign: Campaign, today: date) -> CampaignStatus:
    """Return the status ``campaign`` should have on ``today``.

    Only active campaigns are completed; a soft-deleted campaign keeps
    whatever status it had when it was deactivated.
    """
    status = CampaignStatus(campaign.status)
    if campaign.active and status is not CampaignStatus.COMPLETED and campaign.end_date < today:
        return CampaignStatus.COMPLETED
    return status


@storefront.repository(part_of=Campaign)
class CampaignRepository(ResourceRepository):
    resource = CAMPAIGNS
