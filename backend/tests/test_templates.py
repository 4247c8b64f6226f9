"""
Tests for the template catalog and reference loading
"""
from ai_agent.schemas.project import ProjectIntent
from ai_agent.templates.catalog import (
    DEFAULT_TEMPLATE_ID,
    TEMPLATES,
    describe_integrations,
    select_template,
    validate_integrations,
)
from ai_agent.utils.references import (
    DEFAULT_DESIGN_REFERENCE,
    TEMPLATE_REFERENCE_UNAVAILABLE,
    load_design_reference,
    load_template_reference,
)

from conftest import INTENT


def _intent(**overrides) -> ProjectIntent:
    return ProjectIntent.model_validate({**INTENT, **overrides})


class TestSelectTemplate:

    def test_suggested_template(self):
        assert select_template(_intent(suggested_template="blog")).id == "blog"

    def test_falls_back_to_category(self):
        template = select_template(_intent(suggested_template="portfolio", category="store"))
        assert template.id == "ecommerce"

    def test_falls_back_to_default(self):
        template = select_template(_intent(suggested_template="portfolio", category="game"))
        assert template.id == DEFAULT_TEMPLATE_ID


class TestValidateIntegrations:

    def test_supported_providers_kept(self):
        result = validate_integrations(TEMPLATES["saas"], {"auth": "Clerk", "payments": "stripe"})
        assert result == {"auth": "clerk", "payments": "stripe"}

    def test_unsupported_provider_becomes_none(self):
        result = validate_integrations(TEMPLATES["saas"], {"cms": "contentful"})
        assert result == {"cms": None}

    def test_unknown_type_dropped(self):
        result = validate_integrations(TEMPLATES["blog"], {"crm": "hubspot", "search": "algolia"})
        assert result == {"search": "algolia"}

    def test_describe_integrations_lists_every_type(self):
        description = describe_integrations()
        assert "- payments: stripe, paddle, lemon-squeezy" in description
        assert "- image_opt: cloudinary" in description


class TestReferences:

    def test_template_reference(self, tmp_path):
        page = tmp_path / "saas" / "app" / "page.tsx"
        page.parent.mkdir(parents=True)
        page.write_text("export default function Home() {}", encoding="utf-8")

        reference = load_template_reference("saas", templates_dir=tmp_path)

        assert reference.startswith("Example page from saas template")
        assert "function Home" in reference

    def test_missing_template_reference(self, tmp_path):
        assert load_template_reference("saas", templates_dir=tmp_path) == TEMPLATE_REFERENCE_UNAVAILABLE

    def test_design_reference_fallback(self, tmp_path):
        assert load_design_reference(tmp_path / "missing.md") == DEFAULT_DESIGN_REFERENCE

    def test_design_reference_file(self, tmp_path):
        path = tmp_path / "design.md"
        path.write_text("Brutalist, monospace everywhere", encoding="utf-8")
        assert load_design_reference(path) == "Brutalist, monospace everywhere"
