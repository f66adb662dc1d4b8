"""Default subscription plan catalog."""

from core.models.quota import PlanConfig, SubscriptionPlan

DEFAULT_PLANS: tuple[PlanConfig, ...] = (
    PlanConfig(
        plan=SubscriptionPlan.FREE,
        name="Free",
        description="Perfect for personal use",
        image_quota=10,
        price=0,
        features=["10 images per month", "Basic support", "Standard quality"],
    ),
    PlanConfig(
        plan=SubscriptionPlan.CLASSIC,
        name="Classic",
        description="Great for small businesses",
        image_quota=100,
        price=9.99,
        features=["100 images per month", "Priority support", "High quality", "API access"],
    ),
    PlanConfig(
        plan=SubscriptionPlan.PRO,
        name="Pro",
        description="For growing businesses",
        image_quota=500,
        price=29.99,
        features=[
            "500 images per month",
            "24/7 support",
            "Ultra quality",
            "Advanced API",
            "Custom domains",
        ],
    ),
    PlanConfig(
        plan=SubscriptionPlan.MAX,
        name="Max",
        description="For enterprise use",
        image_quota=2000,
        price=99.99,
        features=[
            "2000 images per month",
            "Dedicated support",
            "Premium quality",
            "Full API access",
            "White-label solution",
            "SLA guarantee",
        ],
    ),
)
