from pydantic import BaseModel

from ai_agent.logging_config import logger
from ai_agent.schemas.project import INTEGRATION_TYPES, ProjectIntent

DEFAULT_TEMPLATE_ID = "saas"


class TemplateMetadata(BaseModel):
    id: str
    name: str
    description: str
    features: list[str] = []
    supported_integrations: dict[str, list[str]] = {}


_ALL_AUTH = ["clerk", "supabase"]
_ALL_SEARCH = ["algolia", "meilisearch"]
_ALL_STORAGE = ["r2", "uploadthing"]

TEMPLATES: dict[str, TemplateMetadata] = {
    "saas": TemplateMetadata(
        id="saas",
        name="SaaS",
        description="Subscription product with marketing pages, auth and an app dashboard",
        features=["landing page", "pricing", "authentication", "dashboard", "settings", "billing"],
        supported_integrations={
            "auth": _ALL_AUTH,
            "payments": ["stripe", "paddle", "lemon-squeezy"],
            "storage": _ALL_STORAGE,
            "search": _ALL_SEARCH,
            "monitoring": ["sentry"],
            "ai": ["openai"],
        },
    ),
    "landing-page": TemplateMetadata(
        id="landing-page",
        name="Landing Page",
        description="Single product marketing site",
        features=["hero", "features", "testimonials", "faq", "cta", "newsletter signup"],
        supported_integrations={
            "cms": ["contentful", "sanity"],
            "image_opt": ["cloudinary"],
            "monitoring": ["sentry"],
        },
    ),
    "dashboard": TemplateMetadata(
        id="dashboard",
        name="Dashboard",
        description="Internal tool or analytics dashboard",
        features=["sidebar navigation", "charts", "data tables", "filters", "authentication"],
        supported_integrations={
            "auth": _ALL_AUTH,
            "search": _ALL_SEARCH,
            "monitoring": ["sentry"],
            "ai": ["openai"],
        },
    ),
    "blog": TemplateMetadata(
        id="blog",
        name="Blog",
        description="Content site with posts, categories and authors",
        features=["post list", "post pages", "categories", "authors", "rss"],
        supported_integrations={
            "cms": ["contentful", "sanity"],
            "search": _ALL_SEARCH,
            "image_opt": ["cloudinary"],
        },
    ),
    "ecommerce": TemplateMetadata(
        id="ecommerce",
        name="E-commerce",
        description="Storefront with catalog, cart and checkout",
        features=["product catalog", "product pages", "cart", "checkout", "order history"],
        supported_integrations={
            "auth": _ALL_AUTH,
            "payments": ["stripe"],
            "search": _ALL_SEARCH,
            "storage": _ALL_STORAGE,
            "image_opt": ["cloudinary"],
        },
    ),
}

CATEGORY_TEMPLATES = {
    "saas": "saas",
    "marketing": "landing-page",
    "landing": "landing-page",
    "internal-tool": "dashboard",
    "analytics": "dashboard",
    "content": "blog",
    "blog": "blog",
    "ecommerce": "ecommerce",
    "store": "ecommerce",
}


def get_template(template_id: str) -> TemplateMetadata | None:
    return TEMPLATES.get(template_id)


def select_template(intent: ProjectIntent) -> TemplateMetadata:
    """Suggested template if it exists, else one matching the category, else the default."""
    template = TEMPLATES.get(intent.suggested_template)
    if template:
        return template

    template_id = CATEGORY_TEMPLATES.get(intent.category.lower(), DEFAULT_TEMPLATE_ID)
    logger.warning(
        "Unknown template '%s' suggested for category '%s', using '%s'",
        intent.suggested_template, intent.category, template_id,
    )
    return TEMPLATES[template_id]


def validate_integrations(
    template: TemplateMetadata,
    requested: dict[str, str | None],
) -> dict[str, str | None]:
    """Keep the requested providers the template supports.

    Unsupported providers become ``None``; unknown integration types are dropped.
    """
    validated: dict[str, str | None] = {}
    for integration_type, provider in requested.items():
        if integration_type not in INTEGRATION_TYPES:
            logger.warning("Dropping unknown integration type '%s'", integration_type)
            continue
        if provider is None:
            validated[integration_type] = None
            continue
        supported = template.supported_integrations.get(integration_type, [])
        if provider.lower() in supported:
            validated[integration_type] = provider.lower()
        else:
            logger.warning(
                "Template '%s' does not support %s provider '%s'",
                template.id, integration_type, provider,
            )
            validated[integration_type] = None
    return validated


def describe_integrations() -> str:
    """Every integration type with the providers any template supports."""
    providers: dict[str, list[str]] = {t: [] for t in INTEGRATION_TYPES}
    for template in TEMPLATES.values():
        for integration_type, names in template.supported_integrations.items():
            for name in names:
                if name not in providers[integration_type]:
                    providers[integration_type].append(name)
    return "\n".join(f"- {t}: {', '.join(names)}" for t, names in providers.items())
