"""Main-game exclusion heuristics, loaded from YAML."""

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from osrs_data.exceptions import ConfigurationError

log = logging.getLogger(__name__)

DEFAULT_EXCLUSIONS_PATH = Path(__file__).with_name("exclusions.yaml")


class ExclusionRules(BaseModel):
    infobox_keys: list[str] = Field(default_factory=list)
    title_contains: list[str] = Field(default_factory=list)
    title_prefixes: list[str] = Field(default_factory=list)
    text_markers: list[str] = Field(default_factory=list)

    def match(self, title: str, text: str, params: dict[str, str]) -> str | None:
        """Return the first rule that flags the page, or None if it is main game content."""
        for key in self.infobox_keys:
            if key in params:
                return f"infobox key '{key}'"
        for fragment in self.title_contains:
            if fragment in title:
                return f"title contains '{fragment}'"
        for prefix in self.title_prefixes:
            if title.startswith(prefix):
                return f"title starts with '{prefix}'"
        for marker in self.text_markers:
            if marker in text:
                return f"text marker '{marker}'"
        return None


def load_exclusions(path: Path | None = None) -> ExclusionRules:
    path = path or DEFAULT_EXCLUSIONS_PATH
    try:
        with path.open() as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError as e:
        raise ConfigurationError(f"Exclusion rules not found at {path}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in exclusion rules {path}: {e}") from e

    try:
        rules = ExclusionRules.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid exclusion rules in {path}: {e}") from e

    log.debug(
        "Loaded exclusion rules from %s: %d key(s), %d marker(s)",
        path,
        len(rules.infobox_keys),
        len(rules.text_markers),
    )
    return rules
