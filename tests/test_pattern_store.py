"""
Unit tests for pattern snapshots and the custom-pattern store.

Tests:
- PatternSet ordering and filtering
- Loading stored rows into a snapshot
- Store writes (create, update, delete) and core protection
"""

from types import SimpleNamespace

import pytest

from fitout.services.core_patterns import CORE_PATTERNS
from fitout.services.errors import (
    PatternConflictError, PatternNotFoundError, PatternPermissionError,
    PatternValidationError,
)
from fitout.services.pattern_store import PatternSet, PatternStore, is_core_id, load


def _row(**overrides):
    fields = {
        "id": "row-1",
        "name": "Handyman",
        "pattern": "odd jobs",
        "match_type": "contains",
        "category": "service",
        "maps_to": "handyman",
        "notes": "",
        "enabled": True,
    }
    fields.update(overrides)
    return SimpleNamespace(**fields)


# ============================================================================
# SNAPSHOTS
# ============================================================================


class TestPatternSet:
    """Tests for the immutable snapshot."""

    def test_core_first(self, make_pattern, with_user_patterns):
        """Core rules come before user rules."""
        snapshot = with_user_patterns(make_pattern())
        sources = [p.source for p in snapshot]
        assert sources == sorted(sources)
        assert len(snapshot.core()) == len(CORE_PATTERNS)
        assert len(snapshot.user()) == 1

    def test_duplicate_ids_rejected(self, make_pattern):
        """Two rules may not share an id."""
        rule = make_pattern()
        with pytest.raises(PatternValidationError):
            PatternSet([rule, rule])

    def test_broken_regex_flagged(self, make_pattern):
        """Invalid regexes are marked broken and filtered out."""
        good = make_pattern(pattern="pipe")
        bad = make_pattern(pattern="(", match_type="regex")
        snapshot = PatternSet([good, bad])
        assert snapshot.broken == frozenset({bad.id})
        assert snapshot.for_category("service") == [good]

    def test_for_category_filters(self, make_pattern):
        """Only enabled rules of the asked categories are returned."""
        service = make_pattern(category="service")
        trade = make_pattern(category="trade")
        disabled = make_pattern(category="service", enabled=False)
        location = make_pattern(category="location")
        snapshot = PatternSet([service, trade, disabled, location])
        assert snapshot.for_category("service", "trade") == [service, trade]
        assert snapshot.get(location.id) is location


class TestLoad:
    """Tests for merging stored rows with the core rules."""

    def test_rows_follow_core(self):
        """Stored rows are appended as user rules."""
        snapshot = load([_row()])
        assert snapshot.get("row-1").source == "user"
        assert list(snapshot)[-1].id == "row-1"

    def test_invalid_rows_skipped(self):
        """Rows that fail validation or collide are left out."""
        core_id = CORE_PATTERNS[0].id
        snapshot = load([
            _row(id="bad-regex", pattern="(", match_type="regex"),
            _row(id="bad-type", match_type="fuzzy"),
            _row(id=core_id),
            _row(id="ok"),
        ])
        assert [p.id for p in snapshot.user()] == ["ok"]
        assert snapshot.get(core_id).source == "core"

    def test_core_ids(self):
        """Core ids are recognized by membership and prefix."""
        assert is_core_id(CORE_PATTERNS[0].id)
        assert is_core_id("core-service-anything")
        assert not is_core_id("row-1")


# ============================================================================
# STORE WRITES
# ============================================================================


class TestPatternStore:
    """Tests for custom-pattern writes against a real database."""

    @pytest.fixture
    def store(self):
        return PatternStore()

    @pytest.mark.asyncio
    async def test_create_refreshes_snapshot(self, db_session, store):
        """A created rule is immediately visible to resolution."""
        created = await store.create(db_session, {
            "name": "Electrical Services", "pattern": "electric|elec",
            "match_type": "regex", "category": "service", "maps_to": "Electrician",
        })
        assert created.source == "user"
        assert store.snapshot().get(created.id) == created

    @pytest.mark.asyncio
    async def test_create_rejects_invalid(self, db_session, store):
        """Invalid rules are never stored."""
        with pytest.raises(PatternValidationError):
            await store.create(db_session, {
                "name": "Broken", "pattern": "(", "match_type": "regex", "category": "service",
            })
        assert await store.list(db_session) == []

    @pytest.mark.asyncio
    async def test_create_with_core_id_forbidden(self, db_session, store):
        """A create cannot shadow a core rule."""
        with pytest.raises(PatternPermissionError):
            await store.create(db_session, {
                "id": CORE_PATTERNS[0].id, "name": "X", "pattern": "x",
                "match_type": "contains", "category": "service",
            })

    @pytest.mark.asyncio
    async def test_create_duplicate_id(self, db_session, store):
        """A second create with the same id conflicts."""
        data = {"id": "dup", "name": "X", "pattern": "x", "match_type": "contains", "category": "service"}
        await store.create(db_session, data)
        with pytest.raises(PatternConflictError):
            await store.create(db_session, data)

    @pytest.mark.asyncio
    async def test_update_and_disable(self, db_session, store):
        """Updates merge over the stored row; disabling stops matching."""
        await store.create(db_session, {
            "id": "odd", "name": "Handyman", "pattern": "odd jobs",
            "match_type": "contains", "category": "service", "maps_to": "handyman",
        })
        updated = await store.update(db_session, "odd", {"enabled": False})
        assert updated.enabled is False
        assert updated.pattern == "odd jobs"
        assert store.snapshot().for_category("service")[-1].id != "odd"

    @pytest.mark.asyncio
    async def test_update_validates_merged_rule(self, db_session, store):
        """A partial update that breaks the rule is rejected."""
        await store.create(db_session, {
            "id": "odd", "name": "Handyman", "pattern": "odd jobs",
            "match_type": "contains", "category": "service",
        })
        with pytest.raises(PatternValidationError):
            await store.update(db_session, "odd", {"match_type": "regex", "pattern": "("})

    @pytest.mark.asyncio
    async def test_core_rules_are_read_only(self, db_session, store):
        """Core rules cannot be updated or deleted."""
        core_id = CORE_PATTERNS[0].id
        with pytest.raises(PatternPermissionError):
            await store.update(db_session, core_id, {"enabled": False})
        with pytest.raises(PatternPermissionError):
            await store.delete(db_session, core_id)
        assert store.snapshot().get(core_id).enabled

    @pytest.mark.asyncio
    async def test_missing_rule(self, db_session, store):
        """Unknown ids raise not-found."""
        with pytest.raises(PatternNotFoundError):
            await store.update(db_session, "nope", {"enabled": False})
        with pytest.raises(PatternNotFoundError):
            await store.delete(db_session, "nope")

    @pytest.mark.asyncio
    async def test_delete(self, db_session, store):
        """A deleted rule leaves the snapshot."""
        await store.create(db_session, {
            "id": "gone", "name": "X", "pattern": "x", "match_type": "contains", "category": "service",
        })
        await store.delete(db_session, "gone")
        assert store.snapshot().get("gone") is None
        assert await store.list(db_session) == []

    @pytest.mark.asyncio
    async def test_list_include_core(self, db_session, store):
        """Listing can include the core rules ahead of user rules."""
        await store.create(db_session, {
            "id": "mine", "name": "X", "pattern": "x", "match_type": "contains", "category": "service",
        })
        listed = await store.list(db_session, include_core=True)
        assert len(listed) == len(CORE_PATTERNS) + 1
        assert listed[-1].id == "mine"
