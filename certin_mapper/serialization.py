"""
CycloneDX serialization utilities for version-aware output.

Enriched documents are written back in the spec version they were read in,
so downstream tooling sees the same schema it produced.
"""

from typing import Dict, Optional, Type

from cyclonedx.model.bom import Bom

from .logging_config import logger

# Lazy imports to avoid loading all versions upfront
_CYCLONEDX_OUTPUTTERS: Dict[str, Optional[Type]] = {
    "1.4": None,  # JsonV1Dot4
    "1.5": None,  # JsonV1Dot5
    "1.6": None,  # JsonV1Dot6
}

# Default version to use when the input does not declare one
DEFAULT_CYCLONEDX_VERSION = "1.6"


def _get_cyclonedx_outputter(spec_version: Optional[str]) -> Type:
    """
    Get the CycloneDX JSON outputter class for a spec version.

    Args:
        spec_version: CycloneDX spec version (e.g., "1.5", "1.6"); None uses the default

    Returns:
        Outputter class for the specified version

    Raises:
        ValueError: If version is not supported
    """
    if spec_version:
        major_minor = ".".join(str(spec_version).split(".")[:2])
    else:
        major_minor = DEFAULT_CYCLONEDX_VERSION

    if major_minor in _CYCLONEDX_OUTPUTTERS and _CYCLONEDX_OUTPUTTERS[major_minor] is None:
        if major_minor == "1.4":
            from cyclonedx.output.json import JsonV1Dot4

            _CYCLONEDX_OUTPUTTERS["1.4"] = JsonV1Dot4
        elif major_minor == "1.5":
            from cyclonedx.output.json import JsonV1Dot5

            _CYCLONEDX_OUTPUTTERS["1.5"] = JsonV1Dot5
        elif major_minor == "1.6":
            from cyclonedx.output.json import JsonV1Dot6

            _CYCLONEDX_OUTPUTTERS["1.6"] = JsonV1Dot6

    outputter_class = _CYCLONEDX_OUTPUTTERS.get(major_minor)
    if outputter_class is None:
        raise ValueError(
            f"Unsupported CycloneDX version: {spec_version}. "
            f"Supported versions: {', '.join(get_supported_cyclonedx_versions())}"
        )

    return outputter_class


def serialize_cyclonedx_bom(bom: Bom, spec_version: Optional[str] = None) -> str:
    """
    Serialize a CycloneDX BOM to a JSON string.

    Args:
        bom: The CycloneDX BOM object to serialize
        spec_version: The CycloneDX spec version (e.g., "1.5", "1.6").
                     Defaults to 1.6 when not given.

    Returns:
        JSON string representation of the BOM

    Raises:
        ValueError: If spec_version is unsupported

    Examples:
        >>> bom = Bom.from_json(data)
        >>> json_str = serialize_cyclonedx_bom(bom, "1.5")
    """
    outputter_class = _get_cyclonedx_outputter(spec_version)

    logger.debug(f"Serializing CycloneDX BOM using version {spec_version or DEFAULT_CYCLONEDX_VERSION}")
    outputter = outputter_class(bom)
    return outputter.output_as_string(indent=2)


def get_supported_cyclonedx_versions() -> list[str]:
    """
    Get list of supported CycloneDX versions.

    Returns:
        List of version strings (e.g., ["1.4", "1.5", "1.6"])
    """
    return sorted(_CYCLONEDX_OUTPUTTERS.keys())
