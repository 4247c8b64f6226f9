from ai_agent.config import settings
from ai_agent.schemas.code import FileDefinition
from ai_agent.schemas.pipeline import GenerationBatch, PreviousFileRef
from ai_agent.schemas.project import ComponentDefinition, PageDefinition, ProjectArchitecture


def estimate_file_count(architecture: ProjectArchitecture) -> int:
    """Pages + create-new components + API routes.

    Only used to decide whether chunking is needed.
    """
    pages = len(architecture.pages)
    new_components = sum(1 for c in architecture.components if c.is_new)
    api_routes = sum(1 for r in architecture.routes if r.type == "api")
    return pages + new_components + api_routes


def describe_batch(batch: GenerationBatch) -> str:
    parts = []
    if batch.pages:
        parts.append(f"{len(batch.pages)} pages")
    if batch.components:
        parts.append(f"{len(batch.components)} components")
    if batch.routes:
        parts.append(f"{len(batch.routes)} API routes")
    return ", ".join(parts)


def _claimable(page: PageDefinition, components: list[ComponentDefinition]) -> list[ComponentDefinition]:
    """Queued components the page references, in reference order."""
    by_name = {c.name: c for c in components}
    claimed = []
    for name in dict.fromkeys(page.components):
        if name in by_name:
            claimed.append(by_name[name])
    return claimed


def create_batches(architecture: ProjectArchitecture, batch_size: int | None = None) -> list[GenerationBatch]:
    """Split the architecture into generation batches of at most ``batch_size`` items.

    Pages are taken first, each together with the create-new components it
    references that no earlier page has claimed. A page whose group does not
    fit in the room left waits for the next batch, unless the batch is empty,
    in which case it takes as many of its components as fit. Leftover
    components that no queued page references fill the remaining room, then
    API routes.
    """
    batch_size = batch_size or settings.batch_size
    if batch_size < 1:
        raise ValueError(f"batch_size must be at least 1, got {batch_size}")

    pages = list(architecture.pages)
    components = [c for c in architecture.components if c.is_new]
    routes = [r for r in architecture.routes if r.type == "api"]

    batches: list[GenerationBatch] = []
    while pages or components or routes:
        batch = GenerationBatch()

        while pages and batch.item_count < batch_size:
            group = _claimable(pages[0], components)
            room = batch_size - batch.item_count
            if batch.item_count and 1 + len(group) > room:
                break
            batch.pages.append(pages.pop(0))
            for component in group[:room - 1]:
                components.remove(component)
                batch.components.append(component)

        wanted = {name for page in pages for name in page.components}
        leftovers = [c for c in components if c.name not in wanted]
        while leftovers and batch.item_count < batch_size:
            component = leftovers.pop(0)
            components.remove(component)
            batch.components.append(component)

        while routes and batch.item_count < batch_size:
            batch.routes.append(routes.pop(0))

        batch.description = describe_batch(batch)
        if batch.item_count > 0:
            batches.append(batch)

    return batches


def summarize_previous_files(files: list[FileDefinition]) -> list[PreviousFileRef]:
    """Path plus "<folder>/<file>" for each file. Contents are left out on purpose."""
    refs = []
    for f in files:
        parts = f.path.strip("/").split("/")
        folder = parts[-2] if len(parts) > 1 else ""
        description = f"{folder}/{parts[-1]}" if folder else parts[-1]
        refs.append(PreviousFileRef(path=f.path, description=description))
    return refs
