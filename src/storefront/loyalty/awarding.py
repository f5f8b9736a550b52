"""Stand-alone loyalty award, used to retry a failed award after delivery."""

from protean import handle
from protean.fields import Identifier

from storefront.container import get_storefront
from storefront.domain import storefront
from storefront.loyalty.customer import Customer


@storefront.command(part_of="Customer")
class AwardLoyaltyPoints:
    """Credit (or re-try crediting) the points for a delivered order."""

    order_id: Identifier(required=True)


@storefront.command_handler(part_of=Customer)
class AwardLoyaltyPointsHandler:
    @handle(AwardLoyaltyPoints)
    def award_loyalty_points(self, command):
        return get_storefront().loyalty.award(command.order_id)
