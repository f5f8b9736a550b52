"""Domain events for the Campaign aggregate."""

from protean.fields import Date, Decimal, Identifier, String

from storefront.domain import storefront


@storefront.event(part_of="Campaign")
class CampaignLaunched:
    __version__ = 1

    campaign_id: Identifier(required=True)
    name: String(required=True, max_length=200)
    budget: Decimal(required=True)
    start_date: Date(required=True)
    end_date: Date(required=True)


@storefront.event(part_of="Campaign")
class CampaignCompleted:
    """The campaign's end date passed; it no longer attributes orders."""

    __version__ = 1

    campaign_id: Identifier(required=True)
    end_date: Date(required=True)


@storefront.event(part_of="Campaign")
class CampaignDeactivated:
    """Soft-deleted by an admin. Attributed orders keep their campaign id."""

    __version__ = 1

    campaign_id: Identifier(required=True)
