"""
Per-provider country rate tables.

The primary provider ships a complete table. Every other provider ships either
its own complete table or a derivation spec applied against the primary table.
Tables are rebuilt in bulk and swapped in as one unit, so a reader always sees
a complete set of tables.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional

from pydantic import TypeAdapter, ValidationError

from src.integrations.contracts.interfaces import ProviderName
from src.integrations.contracts.rate_tables import (
    CountryRateEntry,
    DerivationSpec,
    ProviderAdjustmentSpec,
    RateTable,
    RoleBand,
)
from src.quotes.calc import round_whole
from src.quotes.errors import CountryNotFound, DataLoadFailure

logger = logging.getLogger(__name__)

_ENTRY_LIST = TypeAdapter(List[CountryRateEntry])

FALLBACK_ENTRY = CountryRateEntry(
    country="US",
    employer_tax_rate=0.112,
    benefits_percent=0.085,
    fixed_fees=360,
    probation_months=3,
    currency_code="USD",
    currency_symbol="$",
    cost_notes="Fallback data - limited functionality",
    roles=(
        RoleBand(
            title="Software Engineer",
            min_salary=70000,
            max_salary=150000,
            seniority_levels=("junior", "mid", "senior"),
            description="Develops software applications",
        ),
        RoleBand(
            title="Product Manager",
            min_salary=90000,
            max_salary=170000,
            seniority_levels=("mid", "senior"),
            description="Manages product development",
        ),
    ),
)


def index_table(entries: Iterable[CountryRateEntry]) -> RateTable:
    """Key entries by upper-cased country code."""
    return {entry.country.upper(): entry for entry in entries}


def derive_rate_table(primary: Mapping[str, CountryRateEntry], spec: ProviderAdjustmentSpec) -> RateTable:
    """Build a provider table from the primary table and an adjustment spec.

    A full table is used as-is. A derivation spec covers exactly the primary
    table's countries; rates and fees are floored at zero and role bands are
    scaled by the combined salary multiplier.
    """
    if isinstance(spec, list):
        return index_table(spec)

    if not primary:
        raise DataLoadFailure("Primary rate table is empty; nothing to derive from")

    adj = spec.adjustments
    per_country = {code.upper(): value for code, value in adj.per_country.items()}
    result: RateTable = {}

    for code, base in primary.items():
        per = per_country.get(code.upper())
        tax_delta = adj.employer_tax_rate_delta + (per.employer_tax_rate_delta if per else 0.0)
        benefits_delta = adj.benefits_percent_delta + (per.benefits_percent_delta if per else 0.0)
        fees_delta = adj.fixed_fees_delta + (per.fixed_fees_delta if per else 0.0)
        salary_multiplier = adj.salary_multiplier * (per.salary_multiplier if per else 1.0)

        roles = tuple(
            band.model_copy(
                update={
                    "min_salary": round_whole(band.min_salary * salary_multiplier),
                    "max_salary": round_whole(band.max_salary * salary_multiplier),
                }
            )
            for band in base.roles
        )
        result[code] = base.model_copy(
            update={
                "employer_tax_rate": max(0.0, base.employer_tax_rate + tax_delta),
                "benefits_percent": max(0.0, base.benefits_percent + benefits_delta),
                "fixed_fees": max(0.0, base.fixed_fees + fees_delta),
                "roles": roles,
            }
        )

    return result


def parse_adjustment_spec(data: Any) -> ProviderAdjustmentSpec:
    if isinstance(data, list):
        return _ENTRY_LIST.validate_python(data)
    return DerivationSpec.model_validate(data)


def _read_json(path: Path) -> Any:
    if not path.exists():
        raise DataLoadFailure(f"Required provider data file not found: {path}", payload={"path": str(path)})
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise DataLoadFailure(f"Provider data file could not be read: {path}", payload={"path": str(path)}) from exc
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise DataLoadFailure(f"Provider data file is not valid JSON: {path}", payload={"path": str(path)}) from exc


class RateTableStore:
    """Holds every provider's rate table; replaced wholesale on reload."""

    def __init__(
        self,
        primary: ProviderName = ProviderName.DEEL,
        providers: Optional[Iterable[ProviderName]] = None,
    ) -> None:
        self.primary = ProviderName(primary)
        self.providers: List[ProviderName] = [ProviderName(p) for p in (providers or list(ProviderName))]
        if self.primary not in self.providers:
            self.providers.insert(0, self.primary)
        self._lock = threading.Lock()
        self._tables: Mapping[ProviderName, Mapping[str, CountryRateEntry]] = MappingProxyType(
            {p: MappingProxyType({}) for p in self.providers}
        )
        self.using_fallback = False

    # ------------------------------------------------------------------ #
    # Building and swapping
    # ------------------------------------------------------------------ #
    def build_tables(
        self,
        primary_entries: Iterable[CountryRateEntry],
        specs: Mapping[ProviderName, ProviderAdjustmentSpec],
    ) -> Dict[ProviderName, RateTable]:
        primary_table = index_table(primary_entries)
        if not primary_table:
            raise DataLoadFailure("Primary rate table is empty")

        tables: Dict[ProviderName, RateTable] = {self.primary: primary_table}
        for provider in self.providers:
            if provider == self.primary:
                continue
            spec = specs.get(provider)
            if spec is None:
                raise DataLoadFailure(
                    f"No adjustment spec for provider '{provider.value}'",
                    payload={"provider": provider.value},
                )
            tables[provider] = derive_rate_table(primary_table, spec)
        return tables

    def replace(self, tables: Mapping[ProviderName, Mapping[str, CountryRateEntry]], *, fallback: bool = False) -> None:
        frozen = MappingProxyType(
            {p: MappingProxyType(dict(tables.get(p, {}))) for p in self.providers}
        )
        with self._lock:
            self._tables = frozen
            self.using_fallback = fallback

    def load(
        self,
        primary_entries: Iterable[CountryRateEntry],
        specs: Mapping[ProviderName, ProviderAdjustmentSpec],
    ) -> bool:
        """Derive and swap in new tables. Falls back on failure; returns False then."""
        try:
            tables = self.build_tables(primary_entries, specs)
        except DataLoadFailure as exc:
            logger.error("Failed to build rate tables: %s", exc, exc_info=True)
            self.use_fallback()
            return False
        self.replace(tables)
        for provider, table in tables.items():
            logger.info("Loaded %d countries for %s", len(table), provider.value)
        return True

    def load_from_disk(self, data_dir: Path) -> bool:
        """Read ``<provider>.json`` files from ``data_dir`` and reload every table."""
        try:
            if not data_dir.is_dir():
                raise DataLoadFailure(
                    f"Provider data directory not found: {data_dir}",
                    payload={"path": str(data_dir)},
                )
            logger.info("Loading provider data from: %s", data_dir)

            primary_raw = _read_json(data_dir / f"{self.primary.value}.json")
            primary_entries = _ENTRY_LIST.validate_python(primary_raw)

            specs: Dict[ProviderName, ProviderAdjustmentSpec] = {}
            for provider in self.providers:
                if provider == self.primary:
                    continue
                specs[provider] = parse_adjustment_spec(_read_json(data_dir / f"{provider.value}.json"))
        except (DataLoadFailure, ValidationError) as exc:
            logger.error("Error loading provider data from %s: %s", data_dir, exc, exc_info=True)
            self.use_fallback()
            return False

        return self.load(primary_entries, specs)

    def use_fallback(self) -> None:
        logger.warning("Using fallback data - only %s available with limited roles", FALLBACK_ENTRY.country)
        fallback = {FALLBACK_ENTRY.country: FALLBACK_ENTRY}
        self.replace({p: fallback for p in self.providers}, fallback=True)

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #
    def snapshot(self) -> Mapping[ProviderName, Mapping[str, CountryRateEntry]]:
        with self._lock:
            return self._tables

    def table(self, provider: ProviderName) -> Mapping[str, CountryRateEntry]:
        return self.snapshot().get(ProviderName(provider), MappingProxyType({}))

    def require(self, provider: ProviderName, country: str) -> CountryRateEntry:
        table = self.table(provider)
        code = country.strip().upper()
        entry = table.get(code)
        if entry is None:
            provider_value = ProviderName(provider).value
            logger.warning("Country %s not found for provider %s", code, provider_value)
            raise CountryNotFound(
                f"Country {code} not found for provider {provider_value}",
                payload={
                    "requested_country": code,
                    "provider": provider_value,
                    "available_countries": sorted(table),
                },
            )
        return entry

    def is_loaded(self) -> bool:
        tables = self.snapshot()
        return all(len(tables.get(p, {})) > 0 for p in self.providers)

    def available_countries(self, provider: Optional[ProviderName] = None) -> List[str]:
        return sorted(self.table(provider or self.primary))

    def status(self) -> Dict[str, Any]:
        tables = self.snapshot()
        return {
            "loaded": self.is_loaded(),
            "fallback": self.using_fallback,
            "providers": {p.value: sorted(tables.get(p, {})) for p in self.providers},
            "total_countries": {p.value: len(tables.get(p, {})) for p in self.providers},
        }
