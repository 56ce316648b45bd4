"""Plan catalogue administration: commands and handler."""

import structlog
from protean import handle
from protean.fields import Boolean, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from shared.identity import Principal, require_admin
from subscriptions.domain import subscriptions
from subscriptions.plan.plan import SubscriptionPlan

logger = structlog.get_logger(__name__)


@subscriptions.command(part_of="SubscriptionPlan")
class CreatePlan:
    actor_id = String(required=True, max_length=255)
    actor_groups = Text()
    name = String(required=True, max_length=100)
    tier = String(required=True, max_length=50)
    price_monthly = Float(required=True, min_value=0.0)
    price_yearly = Float(required=True, min_value=0.0)
    max_listings = Integer(required=True, min_value=0)
    features = Text()
    is_active = Boolean(default=True)
    display_order = Integer(default=0)


@subscriptions.command(part_of="SubscriptionPlan")
class UpdatePlan:
    plan_id = Identifier(required=True)
    actor_id = String(required=True, max_length=255)
    actor_groups = Text()
    name = String(max_length=100)
    tier = String(max_length=50)
    price_monthly = Float(min_value=0.0)
    price_yearly = Float(min_value=0.0)
    max_listings = Integer(min_value=0)
    features = Text()
    is_active = Boolean()
    display_order = Integer()


@subscriptions.command(part_of="SubscriptionPlan")
class DeletePlan:
    plan_id = Identifier(required=True)
    actor_id = String(required=True, max_length=255)
    actor_groups = Text()


@subscriptions.command_handler(part_of=SubscriptionPlan)
class PlanManagementHandler:
    @handle(CreatePlan)
    def create_plan(self, command):
        principal = Principal.from_command(command)
        require_admin(principal, "manage subscription plans")

        plan = SubscriptionPlan.create(
            name=command.name,
            tier=command.tier,
            price_monthly=command.price_monthly,
            price_yearly=command.price_yearly,
            max_listings=command.max_listings,
            features=command.features,
            is_active=command.is_active if command.is_active is not None else True,
            display_order=command.display_order or 0,
        )
        current_domain.repository_for(SubscriptionPlan).add(plan)
        logger.info("plan_created", plan_id=str(plan.id), actor_id=principal.user_id, tier=plan.tier)
        return str(plan.id)

    @handle(UpdatePlan)
    def update_plan(self, command):
        principal = Principal.from_command(command)
        require_admin(principal, "manage subscription plans")

        repo = current_domain.repository_for(SubscriptionPlan)
        plan = repo.get(command.plan_id)
        plan.update(
            name=command.name,
            tier=command.tier,
            price_monthly=command.price_monthly,
            price_yearly=command.price_yearly,
            max_listings=command.max_listings,
            features=command.features,
            is_active=command.is_active,
            display_order=command.display_order,
        )
        repo.add(plan)
        logger.info("plan_updated", plan_id=str(plan.id), actor_id=principal.user_id)
        return str(plan.id)

    @handle(DeletePlan)
    def delete_plan(self, command):
        principal = Principal.from_command(command)
        require_admin(principal, "manage subscription plans")

        repo = current_domain.repository_for(SubscriptionPlan)
        plan = repo.get(command.plan_id)
        repo._dao.delete(plan)
        logger.info("plan_deleted", plan_id=str(command.plan_id), actor_id=principal.user_id)
        return str(command.plan_id)


def list_plans(include_inactive: bool = False) -> list[SubscriptionPlan]:
    """Plans ordered for display; only active ones unless ``include_inactive``."""
    query = current_domain.repository_for(SubscriptionPlan)._dao.query
    plans = query.all().items if include_inactive else query.filter(is_active=True).all().items
    return sorted(plans, key=lambda p: (p.display_order or 0, p.name))
