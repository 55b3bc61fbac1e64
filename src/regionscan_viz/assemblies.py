"""Reference assembly loader for chromosome length tables."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from jsonschema import FormatChecker
from jsonschema.validators import validator_for

from regionscan_viz.config import Assembly, AssemblyInfo

logger = logging.getLogger(__name__)

SCHEMA_FILENAME = "assembly.schema.json"


class AssemblyLoader:
    """Load assembly JSON from ``config/assemblies`` or a custom path."""

    def __init__(self, assemblies_dir: str | Path | None = None) -> None:
        if assemblies_dir is None:
            assemblies_dir = Path(__file__).resolve().parents[2] / "config" / "assemblies"
        self.assemblies_dir = Path(assemblies_dir)
        self._validator = None

    def list_assemblies(self) -> list[str]:
        """Return available assembly names from the configured directory."""

        return sorted(
            path.stem
            for path in self.assemblies_dir.glob("*.json")
            if path.name != SCHEMA_FILENAME
        )

    def load(self, name_or_path: str | Path | Assembly) -> AssemblyInfo:
        """Load an assembly by name (for example, ``GRCh38``) or explicit path."""

        if isinstance(name_or_path, Assembly):
            name_or_path = name_or_path.value
        path = self._resolve_path(name_or_path)
        payload = json.loads(path.read_text())
        self._validate(payload, path)
        info = self._parse(payload)
        logger.debug("Loaded %s with %d chromosomes from %s", info.assembly.value, len(info.lengths), path)
        return info

    def _resolve_path(self, name_or_path: str | Path) -> Path:
        requested = Path(name_or_path)

        if requested.suffix == ".json" and requested.exists():
            return requested

        candidate = self.assemblies_dir / f"{requested}.json"
        if candidate.exists():
            return candidate

        raise FileNotFoundError(
            f"Assembly not found: {name_or_path}. Available: {', '.join(self.list_assemblies())}"
        )

    def _compile_validator(self):
        if self._validator is None:
            schema = json.loads((self.assemblies_dir / SCHEMA_FILENAME).read_text())
            validator_cls = validator_for(schema)
            validator_cls.check_schema(schema)
            self._validator = validator_cls(schema, format_checker=FormatChecker())
        return self._validator

    def _validate(self, payload: dict[str, Any], path: Path) -> None:
        errors = sorted(self._compile_validator().iter_errors(payload), key=lambda err: list(err.path))
        if errors:
            details = "; ".join(
                f"{'/' + '/'.join(str(part) for part in err.path)}: {err.message}"
                for err in errors
            )
            raise ValueError(f"Invalid assembly file {path}: {details}")

    def _parse(self, payload: dict[str, Any]) -> AssemblyInfo:
        lengths = {str(chromosome): int(length) for chromosome, length in payload["lengths"].items()}
        return AssemblyInfo(assembly=Assembly(payload["assembly"]), lengths=lengths)


def load_assembly(assembly: Assembly | str) -> AssemblyInfo:
    """Load one of the bundled assembly tables."""

    return AssemblyLoader().load(assembly)
