"""
Pydantic configuration models for phylodash.

These models define the thresholds used to classify metadata columns, the
colour palette applied to the tree, the names of the identifier columns and
the radial layout extent. Configuration can be loaded from YAML files or
built from CLI arguments.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Self

from pydantic import BaseModel, Field, ValidationError, field_validator

from phylodash.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


# d3.schemeTableau10
TABLEAU10: tuple[str, ...] = (
    "#4e79a7",
    "#f28e2c",
    "#e15759",
    "#76b7b2",
    "#59a14f",
    "#edc949",
    "#af7aa1",
    "#ff9da7",
    "#9c755f",
    "#bab0ab",
)

NEUTRAL_COLOR = "#ccc"


class ClassifierConfig(BaseModel):
    """
    Thresholds for inferring a descriptor's statistical type.

    A column is numerical only when more than ``numeric_fraction_threshold``
    of its non-missing values parse as finite numbers AND it has more than
    ``min_distinct_numeric`` distinct values. Low-cardinality numeric codes
    (e.g. 1/2/3 severity levels) therefore stay categorical, which is what
    legends and colour scales want.
    """

    numeric_fraction_threshold: float = Field(
        default=0.8,
        ge=0,
        le=1,
        description="Fraction of numeric values above which a column may be numerical",
    )
    min_distinct_numeric: int = Field(
        default=6,
        ge=0,
        description="Distinct-value count a numerical column must exceed",
    )
    missing_tokens: tuple[str, ...] = Field(
        default=("NA",),
        description="Case-insensitive tokens treated as missing values",
    )

    @field_validator("missing_tokens")
    @classmethod
    def normalize_tokens(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(token.strip().upper() for token in value if token.strip())

    model_config = {"frozen": True}


class ColorConfig(BaseModel):
    """Palette used for categorical tree colouring."""

    palette: tuple[str, ...] = Field(
        default=TABLEAU10,
        min_length=1,
        description="Colours indexed by category hash",
    )
    neutral_color: str = Field(
        default=NEUTRAL_COLOR,
        description="Colour for missing data and mixed clades",
    )

    model_config = {"frozen": True}


class ColumnConfig(BaseModel):
    """Names of the identifier columns in the metadata CSV."""

    accession: str = Field(default="accession", description="Column joined to tree leaf names")
    paper_id_aliases: tuple[str, ...] = Field(
        default=("pmid", "paperId"),
        min_length=1,
        description="Accepted names for the paper identifier column, first match wins",
    )
    strict: bool = Field(
        default=False,
        description="Fail when identifier columns are missing instead of leaving values empty",
    )

    @property
    def reserved(self) -> frozenset[str]:
        """All column names that are never descriptors."""
        return frozenset((self.accession, *self.paper_id_aliases))

    model_config = {"frozen": True}


class LayoutConfig(BaseModel):
    """Radial tree layout settings."""

    radial_extent: float = Field(
        default=1.0,
        gt=0,
        description="Radius assigned to the longest branch length scale",
    )

    model_config = {"frozen": True}


class DashboardConfig(BaseModel):
    """Top-level configuration aggregating all sections."""

    classifier: ClassifierConfig = Field(default_factory=ClassifierConfig)
    colors: ColorConfig = Field(default_factory=ColorConfig)
    columns: ColumnConfig = Field(default_factory=ColumnConfig)
    layout: LayoutConfig = Field(default_factory=LayoutConfig)

    @classmethod
    def from_yaml(cls, path: Path) -> Self:
        """
        Load configuration from a YAML file.

        Missing sections fall back to defaults. Unknown keys are ignored
        for forward compatibility.

        Args:
            path: Path to YAML configuration file.

        Returns:
            DashboardConfig populated from YAML values merged with defaults.

        Raises:
            FileNotFoundError: If the YAML file does not exist.
            ConfigurationError: If the file is not a mapping or holds invalid values.
        """
        import yaml

        if not path.exists():
            msg = f"Configuration file not found: {path}"
            raise FileNotFoundError(msg)

        raw = yaml.safe_load(path.read_text())
        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise ConfigurationError(
                str(path), f"YAML config must be a mapping, got {type(raw).__name__}"
            )

        try:
            config = cls(**_known_sections(raw))
        except ValidationError as e:
            raise ConfigurationError(str(path), str(e)) from e

        logger.debug("Loaded configuration from %s", path)
        return config

    def to_yaml(self, path: Path) -> None:
        """Write configuration to a YAML file."""
        path.write_text(self.to_yaml_str())

    def to_yaml_str(self) -> str:
        """Serialize configuration to a YAML string."""
        import yaml

        data = self.model_dump(mode="json")
        return yaml.safe_dump(data, default_flow_style=False, sort_keys=False)

    model_config = {"frozen": True}


def _known_sections(raw: dict[str, Any]) -> dict[str, Any]:
    """Drop unknown top-level and section keys from a raw YAML mapping."""
    sections = {
        "classifier": ClassifierConfig,
        "colors": ColorConfig,
        "columns": ColumnConfig,
        "layout": LayoutConfig,
    }
    cleaned: dict[str, Any] = {}
    for name, model in sections.items():
        section = raw.get(name)
        if not isinstance(section, dict):
            continue
        cleaned[name] = {
            key: value for key, value in section.items()
            if key in model.model_fields and value is not None
        }
    return cleaned
