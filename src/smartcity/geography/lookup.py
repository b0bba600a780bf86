"""Read-only governorate -> municipality lookup loaded from YAML."""

from __future__ import annotations

from pathlib import Path

import yaml

_DEFAULT_DATA_PATH = Path(__file__).resolve().parents[3] / "config" / "geography.yml"


class GeographyLookup:
    """Static geography table.

    The YAML file maps each governorate name to its list of municipalities::

        governorates:
          Tunis: [Tunis, Carthage, Le Bardo]
    """

    def __init__(self, data_path: str | Path | None = None) -> None:
        self._table: dict[str, tuple[str, ...]] = {}
        self._load(Path(data_path) if data_path else _DEFAULT_DATA_PATH)

    @classmethod
    def from_mapping(cls, table: dict[str, list[str]]) -> GeographyLookup:
        lookup = cls.__new__(cls)
        lookup._table = {gov: tuple(munis) for gov, munis in table.items()}
        return lookup

    def _load(self, path: Path) -> None:
        if not path.exists():
            return
        with open(path) as fh:
            data = yaml.safe_load(fh) or {}
        for governorate, municipalities in data.get("governorates", {}).items():
            self._table[governorate] = tuple(municipalities or [])

    def governorates(self) -> list[str]:
        return sorted(self._table)

    def municipalities(self, governorate: str) -> list[str]:
        """Municipalities of a governorate; empty if the governorate is unknown."""
        return list(self._table.get(governorate, ()))

    def governorate_of(self, municipality: str) -> str | None:
        for governorate, municipalities in self._table.items():
            if municipality in municipalities:
                return governorate
        return None

    def contains(self, governorate: str, municipality: str) -> bool:
        return municipality in self._table.get(governorate, ())

    @property
    def is_empty(self) -> bool:
        return not self._table
