"""Extension catalog: resolve slugs, names and aliases to extension IDs.

The bundled ``extensions.yaml`` ships with the package. A user catalog in
the same format (``extension_catalog`` setting) is merged over it, so users
can add private extensions or override bundled IDs without a release.

Catalog format::

    extensions:
      - id: ECC268AA-4B25-4DBC-A57CA2E7A929A83E
        name: Redis Driver
        slug: redis
        aliases: [redis-cache]
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Any

import yaml

from depsmith.exceptions import ConfigError

logger = logging.getLogger(__name__)

BUNDLED_CATALOG = "extensions.yaml"

# 8-4-4-4-12, the 8-4-4-16 form extension providers publish, or 32 bare hex.
_ID_RE = re.compile(
    r"^(?:[0-9A-Fa-f]{8}-[0-9A-Fa-f]{4}-[0-9A-Fa-f]{4}-[0-9A-Fa-f]{4}-[0-9A-Fa-f]{12}"
    r"|[0-9A-Fa-f]{8}-[0-9A-Fa-f]{4}-[0-9A-Fa-f]{4}-[0-9A-Fa-f]{16}"
    r"|[0-9A-Fa-f]{32})$"
)


def is_extension_id(value: str) -> bool:
    """Return True if ``value`` already is an extension identifier."""
    return bool(_ID_RE.match(value.strip()))


@dataclass(frozen=True)
class ExtensionInfo:
    """One catalog entry."""

    id: str
    name: str
    slug: str | None = None
    aliases: tuple[str, ...] = ()

    @property
    def keys(self) -> list[str]:
        keys = [self.name]
        if self.slug:
            keys.append(self.slug)
        keys.extend(self.aliases)
        return [k.strip().lower() for k in keys if k and k.strip()]


@dataclass
class ExtensionCatalog:
    """Case-insensitive lookup table of known extensions."""

    _index: dict[str, ExtensionInfo] = field(default_factory=dict)

    def add(self, info: ExtensionInfo) -> None:
        for key in info.keys:
            self._index[key] = info

    def get(self, name_or_slug: str) -> ExtensionInfo | None:
        return self._index.get(name_or_slug.strip().lower())

    def resolve_id(self, name_or_slug: str | None) -> str | None:
        """Resolve a slug, name, alias or ID to an extension ID.

        IDs are returned unchanged. Unknown names return None.
        """
        if not name_or_slug or not name_or_slug.strip():
            return None
        if is_extension_id(name_or_slug):
            return name_or_slug.strip()
        info = self.get(name_or_slug)
        return info.id if info else None

    def all(self) -> list[ExtensionInfo]:
        """Distinct entries, sorted by name."""
        unique = {info.id: info for info in self._index.values()}
        return sorted(unique.values(), key=lambda i: i.name.lower())

    def __len__(self) -> int:
        return len({info.id for info in self._index.values()})

    def load_data(self, data: Any, origin: str) -> None:
        """Merge entries from a parsed catalog document.

        Raises:
            ConfigError: If the document does not have the catalog shape.
        """
        if data is None:
            return
        entries = data.get("extensions") if isinstance(data, dict) else None
        if not isinstance(entries, list):
            raise ConfigError(f"{origin}: expected a top-level 'extensions' list")
        for raw in entries:
            if not isinstance(raw, dict) or not raw.get("id") or not raw.get("name"):
                raise ConfigError(f"{origin}: every extension needs 'id' and 'name'")
            aliases = raw.get("aliases") or []
            self.add(ExtensionInfo(
                id=str(raw["id"]).strip(),
                name=str(raw["name"]),
                slug=str(raw["slug"]) if raw.get("slug") else None,
                aliases=tuple(str(a) for a in aliases),
            ))

    def load_file(self, path: Path) -> None:
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigError(f"Could not read extension catalog {path}: {exc}") from exc
        self.load_data(data, str(path))
        logger.debug("Merged extension catalog %s", path)

    @classmethod
    def load_default(cls, user_catalog: Path | None = None) -> ExtensionCatalog:
        """Load the bundled catalog, then merge ``user_catalog`` over it."""
        catalog = cls()
        text = (
            resources.files("depsmith.registry")
            .joinpath(BUNDLED_CATALOG)
            .read_text(encoding="utf-8")
        )
        catalog.load_data(yaml.safe_load(text), BUNDLED_CATALOG)
        if user_catalog is not None:
            catalog.load_file(user_catalog)
        return catalog
