"""Pydantic models for loading pipeline settings from user input."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import pydantic
from pydantic import BaseModel, Field, field_validator, model_validator

from . import ChromaKeySettings, OutputMode, SheetLayoutSettings
from .errors import ValidationError
from ..utils import validators

logger = logging.getLogger(__name__)


class ChromaKeyConfig(BaseModel):
    """Chroma key options as accepted from JSON or form input."""

    enabled: bool = True
    color: tuple[int, int, int] = (0, 255, 0)
    similarity: float = Field(0.25, ge=0, le=1)
    smoothness: float = Field(0.1, ge=0, le=1)
    spill: float = Field(0.1, ge=0, le=1)

    @field_validator("color", mode="before")
    @classmethod
    def _parse_color(cls, value):
        if value in (None, "", "null"):
            return (0, 255, 0)
        if isinstance(value, (list, tuple)):
            if len(value) != 3:
                raise ValueError("Color must be R,G,B")
            return tuple(value)
        if isinstance(value, str):
            return validators.parse_color_tuple(value)
        raise ValueError("Color must be #RRGGBB or R,G,B")

    @field_validator("color")
    @classmethod
    def _check_channels(cls, value):
        if any(channel < 0 or channel > 255 for channel in value):
            raise ValueError("Color channels must be between 0 and 255")
        return value

    def to_settings(self) -> ChromaKeySettings:
        return ChromaKeySettings(
            enabled=self.enabled,
            key_color=self.color,
            similarity=self.similarity,
            smoothness=self.smoothness,
            spill=self.spill,
        )


class SheetLayoutConfig(BaseModel):
    """Sheet layout options as accepted from JSON or form input."""

    columns: int = Field(5, ge=1)
    padding: int = Field(2, ge=0)
    output_mode: OutputMode = OutputMode.SCALE
    scale: float = Field(0.5, gt=0, le=1)
    fixed_width: int = Field(128, ge=1)
    fixed_height: int = Field(128, ge=1)

    def to_settings(self) -> SheetLayoutSettings:
        return SheetLayoutSettings(
            columns=self.columns,
            padding=self.padding,
            output_mode=self.output_mode,
            scale=self.scale,
            fixed_width=self.fixed_width,
            fixed_height=self.fixed_height,
        )


class ExtractionConfig(BaseModel):
    """Sampling window and rate. ``end_time`` of None means the clip end."""

    start_time: float = Field(0.0, ge=0)
    end_time: Optional[float] = Field(None, gt=0)
    fps: float = Field(10.0, gt=0)

    @model_validator(mode="after")
    def _check_window(self):
        if self.end_time is not None and self.end_time <= self.start_time:
            raise ValueError("end_time must be greater than start_time")
        return self

    def window(self, duration: float) -> tuple[float, float]:
        """Resolve the window against a clip duration."""

        end = duration if self.end_time is None else min(self.end_time, duration)
        return self.start_time, end


class PipelineConfig(BaseModel):
    """Everything needed to run extract and generate end to end."""

    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    chroma: ChromaKeyConfig = Field(default_factory=ChromaKeyConfig)
    layout: SheetLayoutConfig = Field(default_factory=SheetLayoutConfig)
    max_workers: Optional[int] = Field(None, ge=1)


def parse_config(payload: dict) -> PipelineConfig:
    """Validate a raw mapping, re-raising pydantic errors as ValidationError."""

    try:
        return PipelineConfig.model_validate(payload)
    except pydantic.ValidationError as exc:
        raise ValidationError(str(exc)) from exc


def load_config(path: Path) -> PipelineConfig:
    """Read a JSON settings file."""

    try:
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValidationError(f"Invalid settings JSON in {path}: {exc}") from exc
    config = parse_config(payload)
    logger.debug("Loaded settings from %s", path)
    return config
