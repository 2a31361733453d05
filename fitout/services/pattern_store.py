"""Pattern store: merges core rules with administrator-authored custom rules.

Resolution always works on an immutable ``PatternSet`` snapshot. Writes go
through ``PatternStore``, which validates them, refuses to touch core rules,
commits, and then swaps in a freshly loaded snapshot.
"""

import logging
import uuid
from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from fitout.models.database import CustomPattern
from fitout.services.core_patterns import CORE_IDS, CORE_PATTERNS
from fitout.services.errors import (
    PatternConflictError, PatternNotFoundError, PatternPermissionError,
    PatternValidationError,
)
from fitout.services.matching import Pattern, clear_regex_cache, compile_regex, validate_pattern

logger = logging.getLogger("fitout.patterns")

EDITABLE_FIELDS = ("name", "pattern", "match_type", "category", "maps_to", "notes", "enabled")


class PatternSet:
    """Read-only, ordered view over core + user rules (core first)."""

    def __init__(self, patterns: Iterable[Pattern] = ()):
        patterns = tuple(patterns)

        by_id = {}
        for p in patterns:
            if p.id in by_id:
                raise PatternValidationError(f"Duplicate pattern id '{p.id}'")
            by_id[p.id] = p

        broken = set()
        for p in patterns:
            if p.match_type == "regex" and compile_regex(p.pattern, user=not p.is_core) is None:
                logger.warning(f"Pattern {p.id} ({p.name!r}) has an invalid regex; it will never match")
                broken.add(p.id)

        self._patterns = patterns
        self._by_id = by_id
        self.broken = frozenset(broken)

    def __iter__(self):
        return iter(self._patterns)

    def __len__(self):
        return len(self._patterns)

    def get(self, pattern_id: str) -> Optional[Pattern]:
        return self._by_id.get(pattern_id)

    def core(self) -> List[Pattern]:
        return [p for p in self._patterns if p.is_core]

    def user(self) -> List[Pattern]:
        return [p for p in self._patterns if not p.is_core]

    def for_category(self, *categories: str) -> List[Pattern]:
        """Enabled, usable rules of the given categories in merged order."""
        return [
            p for p in self._patterns
            if p.category in categories and p.enabled and p.id not in self.broken
        ]


def pattern_from_row(row: CustomPattern) -> Pattern:
    return Pattern(
        id=row.id,
        name=row.name,
        pattern=row.pattern,
        match_type=row.match_type,
        category=row.category,
        maps_to=row.maps_to or None,
        enabled=bool(row.enabled) if row.enabled is not None else True,
        source="user",
        notes=row.notes or None,
    )


def load(custom_rows: Iterable[CustomPattern] = ()) -> PatternSet:
    """Merge the core rules with stored custom rows into one snapshot."""
    merged = list(CORE_PATTERNS)
    seen = set(CORE_IDS)

    for row in custom_rows:
        if row.id in seen:
            logger.warning(f"Skipping custom pattern {row.id}: id collides with an existing pattern")
            continue
        try:
            validate_pattern(row.name, row.pattern, row.match_type, row.category, row.maps_to)
        except PatternValidationError as exc:
            logger.warning(f"Skipping custom pattern {row.id}: {exc}")
            continue
        seen.add(row.id)
        merged.append(pattern_from_row(row))

    return PatternSet(merged)


def is_core_id(pattern_id: str) -> bool:
    return pattern_id in CORE_IDS or pattern_id.startswith("core-")


class PatternStore:
    """Holds the current snapshot and applies custom-pattern writes."""

    def __init__(self):
        self._snapshot = load()

    def snapshot(self) -> PatternSet:
        return self._snapshot

    async def _rows(self, session: AsyncSession):
        result = await session.execute(
            select(CustomPattern).order_by(CustomPattern.created_at, CustomPattern.id)
        )
        return result.scalars().all()

    async def refresh(self, session: AsyncSession) -> PatternSet:
        """Reload custom rows and swap in a new snapshot."""
        rows = await self._rows(session)
        clear_regex_cache()
        snapshot = load(rows)
        self._snapshot = snapshot
        logger.info(
            f"Pattern snapshot loaded: {len(snapshot.core())} core, {len(snapshot.user())} user"
        )
        return snapshot

    async def list(self, session: AsyncSession, include_core: bool = False) -> List[Pattern]:
        user = [pattern_from_row(r) for r in await self._rows(session)]
        if not include_core:
            return user
        return list(CORE_PATTERNS) + user

    # ─── WRITES ──────────────────────────────────────────────────────────────

    def _guard_core(self, pattern_id: str) -> None:
        if is_core_id(pattern_id):
            raise PatternPermissionError(
                f"Pattern '{pattern_id}' is a core pattern and cannot be modified"
            )

    async def create(self, session: AsyncSession, data: dict) -> Pattern:
        pattern_id = data.get("id")
        if pattern_id:
            self._guard_core(pattern_id)

        validate_pattern(
            data.get("name"), data.get("pattern"), data.get("match_type"),
            data.get("category"), data.get("maps_to"),
        )

        if pattern_id and await session.get(CustomPattern, pattern_id) is not None:
            raise PatternConflictError(f"Pattern '{pattern_id}' already exists")

        row = CustomPattern(
            id=pattern_id or str(uuid.uuid4()),
            name=data["name"].strip(),
            pattern=data["pattern"],
            match_type=data["match_type"],
            category=data["category"],
            maps_to=data.get("maps_to") or None,
            notes=data.get("notes") or "",
            enabled=data.get("enabled", True) is not False,
        )
        session.add(row)
        try:
            await session.commit()
        except IntegrityError as exc:
            await session.rollback()
            raise PatternConflictError(f"Pattern '{row.id}' already exists") from exc

        logger.info(f"Created custom pattern {row.id} ({row.category}/{row.match_type})")
        await self.refresh(session)
        return pattern_from_row(row)

    async def update(self, session: AsyncSession, pattern_id: str, data: dict) -> Pattern:
        self._guard_core(pattern_id)

        row = await session.get(CustomPattern, pattern_id)
        if row is None:
            raise PatternNotFoundError(f"Pattern '{pattern_id}' not found")

        merged = {field: getattr(row, field) for field in EDITABLE_FIELDS}
        merged.update({k: v for k, v in data.items() if k in EDITABLE_FIELDS})
        validate_pattern(
            merged["name"], merged["pattern"], merged["match_type"],
            merged["category"], merged["maps_to"],
        )

        for field, value in merged.items():
            if field == "name":
                value = value.strip()
            elif field == "enabled":
                value = value is not False
            setattr(row, field, value)
        await session.commit()

        logger.info(f"Updated custom pattern {pattern_id}")
        await self.refresh(session)
        return pattern_from_row(row)

    async def delete(self, session: AsyncSession, pattern_id: str) -> None:
        self._guard_core(pattern_id)

        row = await session.get(CustomPattern, pattern_id)
        if row is None:
            raise PatternNotFoundError(f"Pattern '{pattern_id}' not found")

        await session.delete(row)
        await session.commit()

        logger.info(f"Deleted custom pattern {pattern_id}")
        await self.refresh(session)


pattern_store = PatternStore()


def get_pattern_store() -> PatternStore:
    return pattern_store
