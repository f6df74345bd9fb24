"""
Pydantic configuration models for RunCompare.

Three sections make up a configuration file:

- ``ingest``: how the tabular input is split and which header names map to
  the four record fields
- ``chart``: how an aligned series set is drawn and exported
- ``schema_version``: semantic version of the configuration layout

Every field has a default, so ``RunCompareConfig()`` is a complete, valid
configuration for the usual ``experiment_id,metric_name,step,value`` export.
"""

from typing import Dict, Optional

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .versioning import CURRENT_SCHEMA_VERSION, is_supported_version


class ColumnMapping(BaseModel):
    """
    Header names of the four required input columns.

    Attributes:
        experiment_id: Column holding the experiment (run) identifier
        metric_name: Column holding the metric name
        step: Column holding the step index
        value: Column holding the observed value
    """

    model_config = ConfigDict(
        extra="forbid",
        str_strip_whitespace=True,
        frozen=True,
    )

    experiment_id: str = Field(default="experiment_id", description="Header of the experiment column")
    metric_name: str = Field(default="metric_name", description="Header of the metric column")
    step: str = Field(default="step", description="Header of the step column")
    value: str = Field(default="value", description="Header of the value column")

    @field_validator('experiment_id', 'metric_name', 'step', 'value')
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v:
            raise ValueError("column names must not be blank")
        return v

    @model_validator(mode='after')
    def validate_distinct(self) -> 'ColumnMapping':
        names = list(self.as_dict().values())
        if len(set(names)) != len(names):
            raise ValueError(f"column names must be distinct, got {names}")
        return self

    def as_dict(self) -> Dict[str, str]:
        """Return ``{field: header_name}`` in canonical field order."""
        return {
            "experiment_id": self.experiment_id,
            "metric_name": self.metric_name,
            "step": self.step,
            "value": self.value,
        }


class IngestConfig(BaseModel):
    """
    Parsing and coercion settings for tabular input.

    Attributes:
        columns: Header names of the required columns
        delimiter: Single-character field delimiter
        encoding: Text encoding used when reading files
        integer_steps: Reject steps with a fractional part when True
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    columns: ColumnMapping = Field(default_factory=ColumnMapping)
    delimiter: str = Field(default=",", description="Field delimiter")
    encoding: str = Field(default="utf-8-sig", description="File encoding (BOM tolerant by default)")
    integer_steps: bool = Field(
        default=True,
        description="Drop rows whose step is not integral; keep float steps when False",
    )

    @field_validator('delimiter')
    @classmethod
    def validate_delimiter(cls, v: str) -> str:
        if len(v) != 1:
            raise ValueError(f"delimiter must be a single character, got {v!r}")
        if v in ('"', '\n', '\r'):
            raise ValueError(f"delimiter {v!r} is not allowed")
        return v

    @field_validator('encoding')
    @classmethod
    def validate_encoding(cls, v: str) -> str:
        import codecs

        try:
            codecs.lookup(v)
        except LookupError as e:
            raise ValueError(f"unknown encoding '{v}'") from e
        return v


class ChartConfig(BaseModel):
    """
    Rendering and export settings.

    Attributes:
        x_label: Label of the shared step axis
        width: Figure width in inches
        height: Figure height in inches
        dpi: Export resolution
        line_width: Width of each series line
        marker_size: Size of the marker drawn at every observed point
        image_format: Any format matplotlib can save (png, svg, pdf, ...)
        legend_location: matplotlib legend location string
        color_seed: Seed for series colours; None picks new colours each render
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    x_label: str = "Step"
    width: float = Field(default=10.0, gt=0)
    height: float = Field(default=6.0, gt=0)
    dpi: int = Field(default=100, gt=0)
    line_width: float = Field(default=1.5, gt=0)
    marker_size: float = Field(default=3.0, gt=0)
    image_format: str = "png"
    legend_location: str = "upper right"
    color_seed: Optional[int] = None

    @field_validator('image_format')
    @classmethod
    def normalize_format(cls, v: str) -> str:
        v = v.strip().lower().lstrip('.')
        if not v:
            raise ValueError("image_format must not be blank")
        return v


class RunCompareConfig(BaseModel):
    """Top-level configuration document."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    schema_version: str = Field(
        default=CURRENT_SCHEMA_VERSION,
        description="Configuration schema version",
        json_schema_extra={"example": "1.0.0"},
    )
    ingest: IngestConfig = Field(default_factory=IngestConfig)
    chart: ChartConfig = Field(default_factory=ChartConfig)

    @field_validator('schema_version')
    @classmethod
    def validate_schema_version(cls, v: str) -> str:
        if not is_supported_version(v):
            raise ValueError(
                f"unsupported schema_version '{v}', expected {CURRENT_SCHEMA_VERSION}-compatible"
            )
        logger.debug(f"Schema version validated: {v}")
        return v


__all__ = [
    "ColumnMapping",
    "IngestConfig",
    "ChartConfig",
    "RunCompareConfig",
]
