"""FastAPI routes for the Subscriptions domain: plans, subscriptions and admin overrides."""

from datetime import datetime

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from shared.api import current_principal
from shared.clock import utc_now
from shared.errors import NotVisible
from shared.identity import Principal, require_admin
from subscriptions.api.schemas import (
    CreatePlanRequest,
    ExtendSubscriptionRequest,
    MySubscriptionResponse,
    PlanListResponse,
    PlanResponse,
    QuotaSchema,
    SubscribeRequest,
    SubscriptionListResponse,
    SubscriptionResponse,
    SweepResponse,
    UpdatePlanRequest,
)
from subscriptions.plan.management import CreatePlan, DeletePlan, UpdatePlan, list_plans
from subscriptions.plan.plan import SubscriptionPlan
from subscriptions.subscription.admin import AdminCancelSubscription, ExpireSubscription, ExtendSubscription
from subscriptions.subscription.enrollment import Subscribe
from subscriptions.subscription.expiry import ExpireLapsedSubscriptions
from subscriptions.subscription.lifecycle import (
    CancelSubscription,
    RenewSubscription,
    ResumeSubscription,
    process_with_expiry_sync,
)
from subscriptions.subscription.queries import current_subscription, list_subscriptions, load_subscription
from subscriptions.subscription.quota import authorize_listing_activation, check_quota


def plan_response(plan) -> PlanResponse:
    return PlanResponse(
        id=str(plan.id),
        name=plan.name,
        tier=plan.tier,
        price_monthly=plan.price_monthly,
        price_yearly=plan.price_yearly,
        max_listings=plan.max_listings,
        features=plan.features,
        is_active=bool(plan.is_active),
        display_order=plan.display_order or 0,
        created_at=plan.created_at,
        updated_at=plan.updated_at,
    )


def subscription_response(subscription, now: datetime | None = None, with_quota: bool = True) -> SubscriptionResponse:
    """Serialize a subscription with its effective status, as of ``now``."""
    now = now or utc_now()
    quota = check_quota(str(subscription.user_id), now) if with_quota else None
    return SubscriptionResponse(
        id=str(subscription.id),
        user_id=str(subscription.user_id),
        plan_id=str(subscription.plan_id),
        plan_name=subscription.plan_name,
        tier=subscription.tier,
        billing_period=subscription.billing_period,
        max_listings=subscription.max_listings,
        start_date=subscription.start_date,
        end_date=subscription.end_date,
        status=subscription.effective_status(now).value,
        stored_status=subscription.status,
        auto_renew=bool(subscription.auto_renew),
        payment_reference=subscription.payment_reference,
        cancelled_at=subscription.cancelled_at,
        expired_at=subscription.expired_at,
        renewed_at=subscription.renewed_at,
        quota=QuotaSchema(**quota.to_dict()) if quota else None,
    )


def _own_subscription(principal: Principal):
    subscription = current_subscription(principal.user_id)
    if subscription is None:
        raise NotVisible("Subscription", principal.user_id)
    return subscription


def _read(subscription_id: str, principal: Principal) -> SubscriptionResponse:
    return subscription_response(load_subscription(subscription_id, principal))


# ---------------------------------------------------------------------------
# Plan Router
# ---------------------------------------------------------------------------
plan_router = APIRouter(prefix="/plans", tags=["plans"])


@plan_router.get("", response_model=PlanListResponse)
async def get_plans() -> PlanListResponse:
    return PlanListResponse(plans=[plan_response(p) for p in list_plans()])


admin_plan_router = APIRouter(prefix="/admin/plans", tags=["admin"])


@admin_plan_router.get("", response_model=PlanListResponse)
async def admin_get_plans(principal: Principal = Depends(current_principal)) -> PlanListResponse:
    require_admin(principal, "manage subscription plans")
    return PlanListResponse(plans=[plan_response(p) for p in list_plans(include_inactive=True)])


@admin_plan_router.post("", status_code=201, response_model=PlanResponse)
async def create_plan(body: CreatePlanRequest, principal: Principal = Depends(current_principal)) -> PlanResponse:
    plan_id = current_domain.process(CreatePlan(**principal.as_actor(), **body.model_dump()), asynchronous=False)
    return plan_response(current_domain.repository_for(SubscriptionPlan).get(plan_id))


@admin_plan_router.put("/{plan_id}", response_model=PlanResponse)
async def update_plan(
    plan_id: str,
    body: UpdatePlanRequest,
    principal: Principal = Depends(current_principal),
) -> PlanResponse:
    command = UpdatePlan(plan_id=plan_id, **principal.as_actor(), **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    return plan_response(current_domain.repository_for(SubscriptionPlan).get(plan_id))


@admin_plan_router.delete("/{plan_id}", status_code=204)
async def delete_plan(plan_id: str, principal: Principal = Depends(current_principal)) -> None:
    current_domain.process(DeletePlan(plan_id=plan_id, **principal.as_actor()), asynchronous=False)


# ---------------------------------------------------------------------------
# Subscription Router
# ---------------------------------------------------------------------------
subscription_router = APIRouter(prefix="/subscriptions", tags=["subscriptions"])


@subscription_router.post("", status_code=201, response_model=SubscriptionResponse)
async def subscribe(body: SubscribeRequest, principal: Principal = Depends(current_principal)) -> SubscriptionResponse:
    command = Subscribe(
        **principal.as_actor(),
        plan_id=body.plan_id,
        billing_period=body.billing_period,
        session_id=body.session_id,
        auto_renew=body.auto_renew,
    )
    subscription_id = current_domain.process(command, asynchronous=False)
    return _read(subscription_id, principal)


@subscription_router.get("/me", response_model=MySubscriptionResponse)
async def my_subscription(principal: Principal = Depends(current_principal)) -> MySubscriptionResponse:
    now = utc_now()
    subscription = current_subscription(principal.user_id)
    return MySubscriptionResponse(
        subscription=subscription_response(subscription, now, with_quota=False) if subscription else None,
        quota=QuotaSchema(**check_quota(principal.user_id, now).to_dict()),
    )


@subscription_router.put("/me/cancel", response_model=SubscriptionResponse)
async def cancel_my_subscription(principal: Principal = Depends(current_principal)) -> SubscriptionResponse:
    subscription = _own_subscription(principal)
    process_with_expiry_sync(CancelSubscription(subscription_id=str(subscription.id), **principal.as_actor()))
    return _read(str(subscription.id), principal)


@subscription_router.put("/me/resume", response_model=SubscriptionResponse)
async def resume_my_subscription(principal: Principal = Depends(current_principal)) -> SubscriptionResponse:
    subscription = _own_subscription(principal)
    process_with_expiry_sync(ResumeSubscription(subscription_id=str(subscription.id), **principal.as_actor()))
    return _read(str(subscription.id), principal)


@subscription_router.get("/me/quota", response_model=QuotaSchema)
async def my_quota(principal: Principal = Depends(current_principal)) -> QuotaSchema:
    return QuotaSchema(**check_quota(principal.user_id).to_dict())


@subscription_router.post("/me/quota/claim", response_model=QuotaSchema)
async def claim_listing_slot(principal: Principal = Depends(current_principal)) -> QuotaSchema:
    """Check that one more listing may be activated; the listing service calls this before activating."""
    return QuotaSchema(**authorize_listing_activation(principal.user_id).to_dict())


# ---------------------------------------------------------------------------
# Admin Router
# ---------------------------------------------------------------------------
admin_subscription_router = APIRouter(prefix="/admin/subscriptions", tags=["admin"])


@admin_subscription_router.get("", response_model=SubscriptionListResponse)
async def admin_list_subscriptions(
    user_id: str | None = None,
    principal: Principal = Depends(current_principal),
) -> SubscriptionListResponse:
    require_admin(principal, "list subscriptions")
    now = utc_now()
    return SubscriptionListResponse(
        subscriptions=[subscription_response(s, now, with_quota=False) for s in list_subscriptions(user_id)]
    )


@admin_subscription_router.post("/expire-lapsed", response_model=SweepResponse)
async def expire_lapsed(principal: Principal = Depends(current_principal)) -> SweepResponse:
    result = current_domain.process(ExpireLapsedSubscriptions(**principal.as_actor()), asynchronous=False)
    return SweepResponse(**result)


@admin_subscription_router.put("/{subscription_id}/renew", response_model=SubscriptionResponse)
async def renew(subscription_id: str, principal: Principal = Depends(current_principal)) -> SubscriptionResponse:
    process_with_expiry_sync(RenewSubscription(subscription_id=subscription_id, **principal.as_actor()))
    return _read(subscription_id, principal)


@admin_subscription_router.put("/{subscription_id}/extend", response_model=SubscriptionResponse)
async def extend(
    subscription_id: str,
    body: ExtendSubscriptionRequest,
    principal: Principal = Depends(current_principal),
) -> SubscriptionResponse:
    process_with_expiry_sync(
        ExtendSubscription(subscription_id=subscription_id, **principal.as_actor(), days=body.days)
    )
    return _read(subscription_id, principal)


@admin_subscription_router.put("/{subscription_id}/expire", response_model=SubscriptionResponse)
async def expire(subscription_id: str, principal: Principal = Depends(current_principal)) -> SubscriptionResponse:
    process_with_expiry_sync(ExpireSubscription(subscription_id=subscription_id, **principal.as_actor()))
    return _read(subscription_id, principal)


@admin_subscription_router.put("/{subscription_id}/cancel", response_model=SubscriptionResponse)
async def admin_cancel(subscription_id: str, principal: Principal = Depends(current_principal)) -> SubscriptionResponse:
    process_with_expiry_sync(AdminCancelSubscription(subscription_id=subscription_id, **principal.as_actor()))
    return _read(subscription_id, principal)
