"""
Tests for single-call and chunked code generation
"""
import pytest

from ai_agent.pipeline.code_generator import generate_code
from ai_agent.pipeline.errors import CodeGenerationError, SchemaValidationError, ServiceError
from ai_agent.pipeline.prompts.code_generation import PREVIOUS_FILES_HEADER
from ai_agent.schemas.project import ProjectInput

from conftest import code_response, make_architecture


class TestSingleCall:

    async def test_small_architecture_uses_one_call(self, ctx, gateway):
        gateway.queue(code_response("app/p1/page.tsx"))

        code = await generate_code(ctx, make_architecture(pages=1), model="gpt-4o")

        assert [f.path for f in code.files] == ["app/p1/page.tsx"]
        assert len(gateway.requests) == 1
        system = gateway.requests[0].system
        assert "BATCH" not in system
        assert "MyApp" in system

    async def test_exactly_batch_size_is_single_call(self, ctx, gateway):
        gateway.queue(code_response("a.tsx"))

        await generate_code(ctx, make_architecture(pages=1, components_per_page=4), model="m", batch_size=5)

        assert len(gateway.requests) == 1

    async def test_project_name_in_prompt(self, ctx, gateway):
        gateway.queue(code_response("a.tsx"))

        await generate_code(ctx, make_architecture(pages=1), ProjectInput(description="x", project_name="Ledger"), model="m")

        assert "called Ledger" in gateway.requests[0].system


class TestChunked:

    async def test_one_call_per_batch_in_order(self, ctx, gateway):
        gateway.queue(
            code_response("app/p1/page.tsx", "components/C1.tsx", "components/C2.tsx"),
            code_response("app/p2/page.tsx", "components/C3.tsx", "components/C4.tsx"),
            code_response("app/p3/page.tsx", "components/C5.tsx", "components/C6.tsx"),
        )
        batches_seen = []

        code = await generate_code(
            ctx,
            make_architecture(pages=3, components_per_page=2),
            model="m",
            on_batch=lambda number, total, batch: batches_seen.append((number, total, batch.description)),
        )

        assert len(gateway.requests) == 3
        assert [f.path for f in code.files][:3] == ["app/p1/page.tsx", "components/C1.tsx", "components/C2.tsx"]
        assert len(code.files) == 9
        assert batches_seen == [
            (1, 3, "1 pages, 2 components"),
            (2, 3, "1 pages, 2 components"),
            (3, 3, "1 pages, 2 components"),
        ]
        for number, request in enumerate(gateway.requests, start=1):
            assert f"BATCH {number}/3" in request.system
            assert request.messages[-1]["content"].startswith(f"Generate batch {number} of 3.")

    async def test_previous_files_listed_in_later_batches(self, ctx, gateway):
        gateway.queue(
            code_response("app/p1/page.tsx", "components/C1.tsx", "components/C2.tsx"),
            code_response("app/p2/page.tsx", "components/C3.tsx", "components/C4.tsx"),
            code_response("app/p3/page.tsx", "components/C5.tsx", "components/C6.tsx"),
        )

        await generate_code(ctx, make_architecture(pages=3, components_per_page=2), model="m")

        first, second, third = (r.system for r in gateway.requests)
        assert PREVIOUS_FILES_HEADER not in first
        assert "- app/p1/page.tsx: p1/page.tsx" in second
        assert "app/p2/page.tsx" not in second
        assert "- components/C4.tsx: components/C4.tsx" in third

    async def test_batch_prompt_only_describes_its_items(self, ctx, gateway):
        gateway.queue(code_response("a.tsx"), code_response("b.tsx"), code_response("c.tsx"))

        await generate_code(ctx, make_architecture(pages=3, components_per_page=2), model="m")

        second = gateway.requests[1].system
        assert '"P2"' in second
        assert '"P1"' not in second

    async def test_failed_batch_carries_partial_result(self, ctx, gateway):
        gateway.queue(
            code_response("app/p1/page.tsx"),
            {"files": [{"path": "", "content": "x"}]},
        )

        with pytest.raises(CodeGenerationError) as exc_info:
            await generate_code(ctx, make_architecture(pages=3, components_per_page=2), model="m")

        error = exc_info.value
        assert error.stage == "code"
        assert error.batch == 2
        assert error.total_batches == 3
        assert isinstance(error.cause, SchemaValidationError)
        assert not error.retryable
        assert error.partial.status == "stopped at batch 2 of 3"
        assert [f.path for f in error.partial.code.files] == ["app/p1/page.tsx"]
        assert error.to_dict()["context"]["files_generated"] == 1

    async def test_resume_from_partial(self, ctx, gateway):
        architecture = make_architecture(pages=3, components_per_page=2)
        gateway.queue(code_response("app/p1/page.tsx"), ServiceError("bad request", status=400))

        with pytest.raises(CodeGenerationError) as exc_info:
            await generate_code(ctx, architecture, model="m")
        partial = exc_info.value.partial

        gateway.queue(code_response("app/p2/page.tsx"), code_response("app/p3/page.tsx"))
        code = await generate_code(ctx, architecture, model="m", resume_from=partial)

        assert [f.path for f in code.files] == ["app/p1/page.tsx", "app/p2/page.tsx", "app/p3/page.tsx"]
        resumed = gateway.requests[2]
        assert "BATCH 2/3" in resumed.system
        assert "- app/p1/page.tsx: p1/page.tsx" in resumed.system

    async def test_failed_batch_keeps_cause_diagnostics(self, ctx, gateway):
        gateway.queue(code_response("app/p1/page.tsx"), "Sorry, batch two is too large to write.")

        with pytest.raises(CodeGenerationError) as exc_info:
            await generate_code(ctx, make_architecture(pages=3, components_per_page=2), model="m")

        context = exc_info.value.to_dict()["context"]
        assert context["cause"] == "malformed_output"
        assert context["status"] == "stopped at batch 2 of 3"
        assert context["excerpt"].startswith("Sorry, batch two")


class TestPromptVariables:

    async def test_project_name_is_not_expanded(self, ctx, gateway):
        gateway.queue(code_response("a.tsx"))

        await generate_code(
            ctx, make_architecture(pages=1), ProjectInput(description="x", project_name="{design_reference}"), model="m",
        )

        assert "called {design_reference}." in gateway.requests[0].system
