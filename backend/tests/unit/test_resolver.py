import pytest

from backend.src.services.config import AppConfig
from backend.src.services.errors import ResolutionMissError
from backend.src.services.resolver import NoteResolver, ResolveOptions
from backend.src.services.store import SQLiteNoteStore

OWNER = "alice"


@pytest.fixture
def resolver(store: SQLiteNoteStore, app_config: AppConfig) -> NoteResolver:
    return NoteResolver(store, app_config)


@pytest.mark.asyncio
async def test_exact_match_ignores_case(store, resolver) -> None:
    note = await store.create_note(OWNER, "Project Plan", "")

    resolution = await resolver.resolve(OWNER, "project PLAN")

    assert resolution.note_id == note.id
    assert resolution.matched_by == "exact"


@pytest.mark.asyncio
async def test_exact_match_beats_earlier_substring_match(store, resolver) -> None:
    await store.create_note(OWNER, "Plan B", "")
    exact = await store.create_note(OWNER, "Plan", "")

    resolution = await resolver.resolve(OWNER, "plan")

    assert resolution.note_id == exact.id


@pytest.mark.asyncio
async def test_substring_match_is_case_insensitive(store, resolver) -> None:
    note = await store.create_note(OWNER, "Quarterly Project Review", "")

    resolution = await resolver.resolve(OWNER, "project")

    assert resolution.note_id == note.id
    assert resolution.matched_by == "contains"


@pytest.mark.asyncio
async def test_substring_tie_goes_to_first_created_note(store, resolver) -> None:
    # Known ambiguity: with several candidates the earliest note wins, which
    # may not be the note the author meant.
    first = await store.create_note(OWNER, "Design Notes", "")
    await store.create_note(OWNER, "Notes Archive", "")

    resolution = await resolver.resolve(OWNER, "notes")

    assert resolution.note_id == first.id


@pytest.mark.asyncio
async def test_wildcard_characters_are_matched_literally(store, resolver) -> None:
    await store.create_note(OWNER, "Budget 2024", "")
    percent = await store.create_note(OWNER, "Growth 100%", "")

    assert (await resolver.resolve(OWNER, "0%")).note_id == percent.id
    assert (await resolver.resolve(OWNER, "_")).is_miss


@pytest.mark.asyncio
async def test_unicode_titles_fold_case(store, resolver) -> None:
    note = await store.create_note(OWNER, "Ärzte Übersicht", "")

    resolution = await resolver.resolve(OWNER, "ärzte übersicht")

    assert resolution.note_id == note.id
    assert resolution.matched_by == "exact"


@pytest.mark.asyncio
async def test_miss_returns_no_note(store, resolver) -> None:
    await store.create_note(OWNER, "Something", "")

    resolution = await resolver.resolve(OWNER, "Nothing Like It")

    assert resolution.is_miss
    assert resolution.matched_by is None
    assert len(await store.list_notes(OWNER)) == 1


@pytest.mark.asyncio
async def test_resolution_is_scoped_to_owner(store, resolver) -> None:
    await store.create_note("bob", "Shared Title", "")

    assert (await resolver.resolve(OWNER, "Shared Title")).is_miss


@pytest.mark.asyncio
async def test_create_if_missing_creates_root_stub(store, resolver) -> None:
    resolution = await resolver.resolve(
        OWNER, "New Idea", ResolveOptions(create_if_missing=True)
    )

    assert resolution.created
    note = await store.get_note(resolution.note_id)
    assert note is not None
    assert note.title == "New Idea"
    assert note.parent_id is None
    assert note.body.startswith("# New Idea")


@pytest.mark.asyncio
async def test_blank_display_text_is_rejected(resolver) -> None:
    with pytest.raises(ValueError):
        await resolver.resolve(OWNER, "   ")


@pytest.mark.asyncio
async def test_require_raises_with_create_hint(resolver) -> None:
    with pytest.raises(ResolutionMissError) as excinfo:
        await resolver.require(OWNER, "Ghost")

    assert excinfo.value.status_code == 404
    assert excinfo.value.detail["action"] == "create"


@pytest.mark.asyncio
async def test_pass_creates_one_note_for_repeated_text(store, resolver) -> None:
    resolution_pass = resolver.start_pass(OWNER, ResolveOptions(create_if_missing=True))

    results = [
        await resolution_pass.resolve(text) for text in ("Topic", "topic", "TOPIC")
    ]

    assert len({result.note_id for result in results}) == 1
    assert [result.display_text for result in results] == ["Topic", "topic", "TOPIC"]
    assert len(await store.list_notes(OWNER)) == 1
    assert [ref.title for ref in resolution_pass.created] == ["Topic"]


@pytest.mark.asyncio
async def test_pass_records_misses(resolver) -> None:
    resolution_pass = resolver.start_pass(OWNER)

    await resolution_pass.resolve("Unknown")

    assert resolution_pass.misses == ["Unknown"]
    assert resolution_pass.created == []


@pytest.mark.asyncio
async def test_search_titles_lists_candidates(store, resolver) -> None:
    await store.create_note(OWNER, "Alpha Plan", "")
    await store.create_note(OWNER, "Beta Plan", "")
    await store.create_note(OWNER, "Gamma", "")

    refs = await resolver.search_titles(OWNER, "plan")

    assert [ref.title for ref in refs] == ["Alpha Plan", "Beta Plan"]
    assert await resolver.search_titles(OWNER, "  ") == []
