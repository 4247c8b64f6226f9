"""
Tests for splitting an architecture into generation batches
"""
import pytest

from ai_agent.pipeline.batching import create_batches, estimate_file_count, summarize_previous_files
from ai_agent.schemas.code import FileDefinition
from ai_agent.schemas.project import ComponentDefinition, PageDefinition, ProjectArchitecture, RouteDefinition

from conftest import make_architecture


def _names(batches):
    items = []
    for batch in batches:
        items += [p.name for p in batch.pages]
        items += [c.name for c in batch.components]
        items += [r.path for r in batch.routes]
    return items


class TestEstimateFileCount:

    def test_counts_pages_new_components_and_api_routes(self):
        architecture = ProjectArchitecture(
            template="saas",
            pages=[PageDefinition(path="/", name="Home")],
            components=[
                ComponentDefinition(name="Hero", type="section"),
                ComponentDefinition(name="Navbar", type="layout", template="saas/navbar"),
            ],
            routes=[
                RouteDefinition(path="/api/users", type="api", method="GET"),
                RouteDefinition(path="/", type="page"),
            ],
        )
        assert estimate_file_count(architecture) == 3


class TestCreateBatches:

    def test_three_pages_two_components_each(self):
        """Each page lands in its own batch together with its components"""
        batches = create_batches(make_architecture(pages=3, components_per_page=2), batch_size=5)

        assert len(batches) >= 3
        assert all(batch.item_count <= 5 for batch in batches)
        page_names = [p.name for batch in batches for p in batch.pages]
        assert sorted(page_names) == ["P1", "P2", "P3"]
        assert [[c.name for c in b.components] for b in batches] == [["C1", "C2"], ["C3", "C4"], ["C5", "C6"]]

    def test_union_equals_input_without_duplicates(self):
        architecture = make_architecture(pages=4, components_per_page=3, api_routes=4)
        architecture.components.append(ComponentDefinition(name="Footer", type="layout"))
        batches = create_batches(architecture, batch_size=5)

        names = _names(batches)
        assert len(names) == len(set(names))
        expected = (
            [p.name for p in architecture.pages]
            + [c.name for c in architecture.components]
            + [r.path for r in architecture.routes]
        )
        assert sorted(names) == sorted(expected)
        assert all(0 < batch.item_count <= 5 for batch in batches)

    def test_order_is_stable(self):
        architecture = make_architecture(pages=6, components_per_page=1, api_routes=3)
        batches = create_batches(architecture, batch_size=4)

        pages = [p.name for b in batches for p in b.pages]
        routes = [r.path for b in batches for r in b.routes]
        assert pages == [f"P{i}" for i in range(1, 7)]
        assert routes == ["/api/r1", "/api/r2", "/api/r3"]

    def test_pages_are_colocated_with_their_components(self):
        architecture = make_architecture(pages=5, components_per_page=2)
        batches = create_batches(architecture, batch_size=5)

        for batch in batches:
            in_batch = {c.name for c in batch.components}
            for page in batch.pages:
                assert set(page.components) <= in_batch

    def test_shared_component_goes_with_first_page(self):
        architecture = ProjectArchitecture(
            template="saas",
            pages=[
                PageDefinition(path="/", name="Home", components=["Navbar", "Hero"]),
                PageDefinition(path="/about", name="About", components=["Navbar"]),
            ],
            components=[
                ComponentDefinition(name="Navbar", type="layout"),
                ComponentDefinition(name="Hero", type="section"),
            ],
        )
        batches = create_batches(architecture, batch_size=2)

        assert [c.name for c in batches[0].components] == ["Navbar"]
        assert _names(batches).count("Navbar") == 1

    def test_existing_template_components_are_skipped(self):
        architecture = ProjectArchitecture(
            template="saas",
            pages=[PageDefinition(path="/", name="Home", components=["Navbar"])],
            components=[ComponentDefinition(name="Navbar", type="layout", template="saas/navbar")],
        )
        batches = create_batches(architecture, batch_size=5)

        assert len(batches) == 1
        assert batches[0].components == []

    def test_page_larger_than_batch_is_split(self):
        batches = create_batches(make_architecture(pages=1, components_per_page=6), batch_size=5)

        assert [b.item_count for b in batches] == [5, 2]
        assert batches[0].pages[0].name == "P1"

    def test_description(self):
        batches = create_batches(make_architecture(pages=1, components_per_page=2, api_routes=1), batch_size=5)
        assert batches[0].description == "1 pages, 2 components, 1 API routes"

    def test_empty_architecture(self):
        assert create_batches(ProjectArchitecture(template="saas")) == []

    def test_batch_size_below_one_is_rejected(self):
        with pytest.raises(ValueError):
            create_batches(make_architecture(pages=2), batch_size=-1)


class TestSummarizePreviousFiles:

    def test_folder_and_file_name(self):
        refs = summarize_previous_files([
            FileDefinition(path="app/dashboard/page.tsx", content="x"),
            FileDefinition(path="README.md", content="y"),
        ])

        assert [(r.path, r.description) for r in refs] == [
            ("app/dashboard/page.tsx", "dashboard/page.tsx"),
            ("README.md", "README.md"),
        ]
