"""Campaign launch, attribution and ROI reporting."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

import structlog
from protean import handle
from protean.fields import Date, Decimal as DecimalField, Identifier, String
from protean.utils.globals import current_domain

from storefront.campaign.campaign import Campaign, CampaignStatus, reconcile
from storefront.domain import storefront
from storefront.order.order import Order
from storefront.order.status import OrderStatus
from storefront.shared.exceptions import ConcurrencyHazard, NotFound
from storefront.shared.money import ZERO, to_money

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Campaign")
class LaunchCampaign:
    name: String(required=True, max_length=200)
    budget: DecimalField(required=True, min_value=0)
    start_date: Date(required=True)
    end_date: Date(required=True)
    target_audience: String(max_length=200, default="")


@storefront.command(part_of="Campaign")
class DeactivateCampaign:
    campaign_id: Identifier(required=True)


@storefront.command_handler(part_of=Campaign)
class CampaignCommandHandler:
    @handle(LaunchCampaign)
    def launch_campaign(self, command):
        campaign = Campaign.launch(
            name=command.name,
            budget=command.budget,
            start_date=command.start_date,
            end_date=command.end_date,
            target_audience=command.target_audience,
        )
        current_domain.repository_for(Campaign).add(campaign)
        logger.info("Campaign launched", campaign_id=campaign.id, name=campaign.name)
        return campaign

    @handle(DeactivateCampaign)
    def deactivate_campaign(self, command):
        repository = current_domain.repository_for(Campaign)
        campaign = repository.get(command.campaign_id)
        campaign.deactivate()
        repository.add(campaign)
        logger.info("Campaign deactivated", campaign_id=campaign.id)
        return campaign


@dataclass(frozen=True)
class CampaignROI:
    campaign_id: str
    budget: Decimal
    revenue: Decimal
    roi: Decimal
    order_count: int


class CampaignAttribution:
    """Read side of campaigns: running checks, attributed orders and ROI."""

    def __init__(self, clock: Callable[[], date] = date.today) -> None:
        self._clock = clock

    @property
    def _campaigns(self):
        return current_domain.repository_for(Campaign)

    @property
    def _orders(self):
        return current_domain.repository_for(Order)

    def _reconciled(self, campaign: Campaign) -> Campaign:
        if reconcile(campaign, self._clock()).value == campaign.status:
            return campaign
        campaign.complete()
        repository = self._campaigns
        try:
            repository.add(campaign)
        except ConcurrencyHazard:
            # Another reader completed it first
            return repository.get(campaign.id)
        logger.info("Campaign completed", campaign_id=campaign.id, end_date=campaign.end_date.isoformat())
        return campaign

    def get(self, campaign_id: str) -> Campaign:
        return self._reconciled(self._campaigns.get(str(campaign_id)))

    def is_running(self, campaign_id: str) -> bool:
        try:
            campaign = self.get(campaign_id)
        except NotFound:
            return False
        return campaign.is_running(self._clock())

    def attributed_orders(self, campaign_id: str) -> list[Order]:
        """Delivered orders attributed to the campaign."""
        return self._orders.list(campaign_id=str(campaign_id), status=OrderStatus.DELIVERED.value)

    def roi(self, campaign_id: str) -> CampaignROI:
        """Revenue from delivered attributed orders, minus budget.

        Works for soft-deleted campaigns too.
        """
        campaign = self._campaigns.get(str(campaign_id))
        orders = self.attributed_orders(campaign.id)
        revenue = to_money(sum((order.total for order in orders), ZERO))
        return CampaignROI(
            campaign_id=campaign.id,
            budget=to_money(campaign.budget),
            revenue=revenue,
            roi=revenue - to_money(campaign.budget),
            order_count=len(orders),
        )

    def list(self, include_completed: bool = False) -> list[Campaign]:
        """Active (not soft-deleted) campaigns, completing any whose end date passed."""
        campaigns = [self._reconciled(campaign) for campaign in self._campaigns.list(active=True)]
        if include_completed:
            return campaigns
        return [campaign for campaign in campaigns if campaign.status == CampaignStatus.ACTIVE.value]
