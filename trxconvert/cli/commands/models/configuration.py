"""Conversion options model."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple, Dict, Any

from ..types import DEFAULT_MAX_DETAIL_LENGTH, DEFAULT_JOBS, DEFAULT_MERGED_NAME


@dataclass(frozen=True)
class ConversionOptions:
    """Options for one conversion run.

    Attributes:
        inputs: Input paths or glob patterns
        output_dir: Directory that receives the JUnit reports
        merge: Combine all inputs into one report
        continue_on_error: Keep processing after a file fails
        max_detail_length: Maximum length of failure detail text
        jobs: Number of worker threads for parsing
        strict: Treat an empty input match set as an error
        merged_name: File name of the merged report
        summary_file: Optional path of a Markdown run summary
        config_path: Configuration file the options were read from
    """
    # Required fields
    inputs: Tuple[str, ...]
    output_dir: Path

    # Optional fields
    merge: bool = False
    continue_on_error: bool = False
    max_detail_length: int = DEFAULT_MAX_DETAIL_LENGTH
    jobs: int = DEFAULT_JOBS
    strict: bool = False
    merged_name: str = DEFAULT_MERGED_NAME
    summary_file: Optional[Path] = None
    config_path: Optional[Path] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], config_path: Optional[Path] = None) -> 'ConversionOptions':
        """Create ConversionOptions from a validated dictionary.

        Args:
            data: Dictionary containing option values
            config_path: Path to the configuration file, if any

        Returns:
            ConversionOptions instance
        """
        summary_file = data.get('summary_file')
        return cls(
            inputs=tuple(data.get('inputs', ())),
            output_dir=Path(data['output_dir']),
            merge=bool(data.get('merge', False)),
            continue_on_error=bool(data.get('continue_on_error', False)),
            max_detail_length=int(data.get('max_detail_length', DEFAULT_MAX_DETAIL_LENGTH)),
            jobs=int(data.get('jobs', DEFAULT_JOBS)),
            strict=bool(data.get('strict', False)),
            merged_name=data.get('merged_name', DEFAULT_MERGED_NAME),
            summary_file=Path(summary_file) if summary_file else None,
            config_path=config_path
        )
