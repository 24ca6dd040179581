"""Subscription lifecycle and usage governance use cases"""
from .usage_limit_checker import UsageLimitChecker, evaluate_usage_limit
from .usage_display import UsageDisplay, build_usage_display
from .record_registration import RecordRegistration
from .plan_upgrade import PlanUpgrade
from .subscription_cancel import SubscriptionCancel
from .subscription_finalizer import SubscriptionFinalizer
from .provision_subscription import ProvisionSubscription
from .dtos import (
    CancelReason,
    UsageLimitResultDTO,
    UsageDisplayDTO,
    RecordRegistrationCommandDTO,
    RegistrationResponseDTO,
    UpgradePreviewDTO,
    UpgradeResultDTO,
    CancelPreviewDTO,
    CancelResultDTO,
    ProvisionSubscriptionCommandDTO,
    SubscriptionResponseDTO,
    FinalizationResultDTO,
)

__all__ = [
    "UsageLimitChecker",
    "evaluate_usage_limit",
    "UsageDisplay",
    "build_usage_display",
    "RecordRegistration",
    "PlanUpgrade",
    "SubscriptionCancel",
    "SubscriptionFinalizer",
    "ProvisionSubscription",
    "CancelReason",
    "UsageLimitResultDTO",
    "UsageDisplayDTO",
    "RecordRegistrationCommandDTO",
    "RegistrationResponseDTO",
    "UpgradePreviewDTO",
    "UpgradeResultDTO",
    "CancelPreviewDTO",
    "CancelResultDTO",
    "ProvisionSubscriptionCommandDTO",
    "SubscriptionResponseDTO",
    "FinalizationResultDTO",
]
