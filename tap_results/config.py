"""Runtime configuration for the command line tool."""

from typing import Literal

from pydantic import BaseModel, Field


class ReportConfig(BaseModel):
    """Configuration for reporting parsed TAP files."""

    output_format: Literal["text", "json"] = Field(
        default="text", description="Render reports as text or as one JSON document"
    )
    include_lines: bool = Field(
        default=False, description="Echo the input lines in JSON output"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
