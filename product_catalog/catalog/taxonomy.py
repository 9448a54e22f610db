"""Category taxonomy parser.

A taxonomy file lists one category path per line, from the root down:

    Electronics
    Electronics > Audio
    Electronics > Audio > Headphones

Lines may carry a numeric id prefix (``264 - Electronics > Audio``), as
in the Google Product Taxonomy export; the id is ignored. Blank lines and
``#`` comments are skipped.
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class TaxonomyEntry:
    """One category path from a taxonomy file.

    Attributes:
        path: Category names from the root to this category.
        position: Order of the entry among its siblings (0-based).
    """

    path: tuple[str, ...]
    position: int = 0

    @property
    def name(self) -> str:
        return self.path[-1]

    @property
    def parent_path(self) -> tuple[str, ...]:
        return self.path[:-1]

    @property
    def level(self) -> int:
        """Depth of the entry; roots are level 0."""
        return len(self.path) - 1

    @property
    def full_path(self) -> str:
        return " > ".join(self.path)


class TaxonomyParser:
    """Parser for category taxonomy files.

    Example usage:
        parser = TaxonomyParser()
        entries = parser.parse_file("taxonomy.txt")
        result = await service.seed_from_taxonomy(entries)
    """

    SEPARATOR = ">"

    EMBEDDED_TAXONOMY = """
# Sample storefront taxonomy
Electronics
Electronics > Computers
Electronics > Computers > Laptops
Electronics > Computers > Monitors
Electronics > Audio
Electronics > Audio > Headphones
Electronics > Audio > Speakers
Electronics > Phones
Home & Kitchen
Home & Kitchen > Cookware
Home & Kitchen > Furniture
Home & Kitchen > Furniture > Chairs
Home & Kitchen > Furniture > Tables
Clothing
Clothing > Men
Clothing > Women
Clothing > Shoes
Sports & Outdoors
Sports & Outdoors > Camping
Sports & Outdoors > Fitness
""".strip()

    def parse_embedded(self) -> list[TaxonomyEntry]:
        """Parse the built-in sample taxonomy."""
        return self.parse_lines(self.EMBEDDED_TAXONOMY.splitlines())

    def parse_file(self, path: str | Path) -> list[TaxonomyEntry]:
        """Parse a taxonomy file.

        Args:
            path: Path to the taxonomy file.

        Returns:
            Entries ordered parents first.
        """
        with open(path, encoding="utf-8") as f:
            return self.parse_lines(f.readlines())

    def parse_lines(self, lines: list[str]) -> list[TaxonomyEntry]:
        """Parse taxonomy lines.

        Missing intermediate paths are added, and duplicates are dropped,
        so the result can be seeded top-down.

        Args:
            lines: Raw lines.

        Returns:
            Entries ordered parents first, siblings in file order.
        """
        paths: list[tuple[str, ...]] = []
        seen: set[tuple[str, ...]] = set()

        for raw in lines:
            path = self._parse_line(raw)
            if not path:
                continue
            for depth in range(1, len(path) + 1):
                prefix = path[:depth]
                if prefix not in seen:
                    seen.add(prefix)
                    paths.append(prefix)

        positions: dict[tuple[str, ...], int] = {}
        entries = []
        for path in paths:
            parent = path[:-1]
            position = positions.get(parent, 0)
            positions[parent] = position + 1
            entries.append(TaxonomyEntry(path=path, position=position))

        # stable sort keeps file order within a level
        entries.sort(key=lambda e: e.level)
        return entries

    def _parse_line(self, raw: str) -> tuple[str, ...]:
        line = raw.strip()
        if not line or line.startswith("#"):
            return ()

        if " - " in line:
            prefix, rest = line.split(" - ", 1)
            if prefix.strip().isdigit():
                line = rest

        return tuple(part.strip() for part in line.split(self.SEPARATOR) if part.strip())
