"""
Specimen deduplication.

The store can hold the same physical specimen more than once: codes are typed
by hand with inconsistent spacing/case, and bulk imports re-insert rows that
share a name. Records are grouped in two passes:

1. Records with a code, by normalized code.
2. Records without a code, by (lower-cased name, lower-cased category).

Within a group the representative is chosen in two steps, so the outcome
does not depend on row order:

1. Among records with a parseable ``updated_at``, the latest wins (equal
   timestamps: more non-empty fields, then first seen).
2. That record competes with the undated records on the number of non-empty
   fields; remaining ties keep the first record seen.

Between two dated records the later one therefore always wins.
"""

import datetime as dt
from dataclasses import dataclass, field
from typing import Hashable, Iterable

from loguru import logger
from pydantic import TypeAdapter, ValidationError

from catalog.types import Specimen
from catalog.utils.text import is_blank, normalize_code, normalize_text

# Never copied between records when merging a duplicate group
_MERGE_PROTECTED = frozenset({"id", "created_at", "updated_at", "rock_code", "mineral_code"})

_DATETIME_ADAPTER = TypeAdapter(dt.datetime)


def parse_timestamp(raw: str | None) -> dt.datetime | None:
    """Parse an ISO 8601 timestamp from the store into an aware UTC datetime.

    PostgREST trims trailing zeros from fractional seconds
    (``2024-06-01T12:34:56.12345+00:00``); any precision is accepted.
    Returns ``None`` for empty or unparseable values.
    """
    if not raw:
        return None

    text = str(raw).strip()
    if not text:
        return None

    try:
        parsed = _DATETIME_ADAPTER.validate_python(text)
    except ValidationError:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt.timezone.utc)
    return parsed.astimezone(dt.timezone.utc)


def group_key(specimen: Specimen) -> tuple[str, Hashable]:
    """Identity key used for grouping: by code when present, else by name+category."""
    code = normalize_code(specimen.code)
    if code:
        return ("code", code)
    return ("name", (normalize_text(specimen.name), normalize_text(specimen.category)))


def select_representative(group: Iterable[Specimen]) -> Specimen:
    """
    Pick the record that represents a duplicate group.

    The latest dated record is chosen first, then compared with the undated
    records on completeness. The result is the same for any ordering of the
    group except where records tie exactly, in which case the first wins.
    """
    members = list(group)
    if not members:
        raise ValueError("Cannot select a representative from an empty group")

    dated: list[tuple[dt.datetime, int, int]] = []
    contenders: list[tuple[int, int]] = []
    for index, specimen in enumerate(members):
        stamp = parse_timestamp(specimen.updated_at)
        if stamp is None:
            contenders.append((specimen.completeness(), -index))
        else:
            dated.append((stamp, specimen.completeness(), -index))

    if dated:
        _, completeness, neg_index = max(dated)
        contenders.append((completeness, neg_index))

    _, neg_index = max(contenders)
    return members[-neg_index]


def _group(specimens: Iterable[Specimen]) -> dict[tuple[str, Hashable], list[Specimen]]:
    groups: dict[tuple[str, Hashable], list[Specimen]] = {}
    for specimen in specimens:
        groups.setdefault(group_key(specimen), []).append(specimen)
    return groups


def deduplicate(specimens: Iterable[Specimen]) -> list[Specimen]:
    """
    Collapse records that describe the same physical specimen.

    Returns one representative per group, in order of each group's first
    appearance. Running it again on its own output changes nothing.
    """
    specimens = list(specimens)
    groups = _group(specimens)
    out = [select_representative(members) for members in groups.values()]

    if len(out) != len(specimens):
        logger.info(f"dedup: kept={len(out)} from={len(specimens)}")
    return out


@dataclass
class DuplicateReport:
    """Duplicate groups found in a set of specimens."""

    by_code: dict[str, list[Specimen]] = field(default_factory=dict)
    by_name: dict[tuple[str, str], list[Specimen]] = field(default_factory=dict)

    @property
    def group_count(self) -> int:
        return len(self.by_code) + len(self.by_name)

    @property
    def affected_count(self) -> int:
        return sum(len(g) for g in self.by_code.values()) + sum(len(g) for g in self.by_name.values())

    def is_clean(self) -> bool:
        return self.group_count == 0

    def groups(self) -> list[tuple[str, list[Specimen]]]:
        """All groups as (label, members) pairs, code groups first."""
        labelled = [(f"code:{key}", members) for key, members in self.by_code.items()]
        labelled.extend(
            (f"name:{name} / {category}", members) for (name, category), members in self.by_name.items()
        )
        return labelled

    def to_dict(self) -> dict:
        def _describe(members: list[Specimen]) -> dict:
            keep = select_representative(members)
            return {
                "keep": keep.id,
                "records": [
                    {
                        "id": s.id,
                        "code": s.code,
                        "name": s.name,
                        "category": s.category,
                        "updated_at": s.updated_at,
                        "completeness": s.completeness(),
                    }
                    for s in members
                ],
            }

        return {
            "group_count": self.group_count,
            "affected_count": self.affected_count,
            "by_code": {k: _describe(v) for k, v in self.by_code.items()},
            "by_name": [
                {"name": name, "category": category, **_describe(v)}
                for (name, category), v in self.by_name.items()
            ],
        }


def find_duplicate_groups(specimens: Iterable[Specimen]) -> DuplicateReport:
    """Report every group with more than one member."""
    report = DuplicateReport()
    for (rule, key), members in _group(specimens).items():
        if len(members) < 2:
            continue
        if rule == "code":
            report.by_code[key] = members
        else:
            report.by_name[key] = members

    logger.info(
        f"dedup.report: {len(report.by_code)} code groups, "
        f"{len(report.by_name)} name groups, {report.affected_count} records"
    )
    return report


def merge_duplicates(group: Iterable[Specimen]) -> Specimen:
    """
    Merge a duplicate group into one record.

    The representative keeps its own values; its empty columns are filled
    from the other members in group order. Identity and timestamp columns
    are never copied. The inputs are left untouched.
    """
    members = list(group)
    primary = select_representative(members)
    merged = dict(primary.fields)

    for other in members:
        if other is primary:
            continue
        for key, value in other.fields.items():
            if key in _MERGE_PROTECTED or is_blank(value):
                continue
            if is_blank(merged.get(key)):
                merged[key] = value

    return Specimen.from_record(primary.kind, merged)
