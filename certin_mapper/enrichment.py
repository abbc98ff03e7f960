"""CycloneDX file enrichment with CERT-In properties.

This module is the file-level driver around the reconciler in
certin_mapper/_enrichment/:
- identifiers.py: package URL resolution
- registry.py + sources/: provider lookups (npm, PyPI, Maven Central,
  GitHub, endoflife.date, OSV)
- criticality.py: severity precedence
- properties.py: derivation and merging of the twelve properties
- reconciler.py: per-component orchestration
"""

import asyncio
import json
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional

from cyclonedx.model.bom import Bom
from cyclonedx.model.component import Component

from ._enrichment import PropertyReconciler, PropertySet, ProviderCache
from .config import Config
from .exceptions import FileProcessingError, SBOMValidationError
from .logging_config import logger
from .serialization import serialize_cyclonedx_bom


def iter_components(components: Iterable[Component]) -> Iterator[Component]:
    """Yield components depth-first, nested components included."""
    for component in components:
        yield component
        yield from iter_components(component.components)


def load_cyclonedx_bom(input_file: str) -> tuple[Bom, str]:
    """
    Read and parse a CycloneDX JSON document.

    Args:
        input_file: Path to the SBOM

    Returns:
        Tuple of (Bom, spec version)

    Raises:
        FileProcessingError: If the file cannot be read
        SBOMValidationError: If the file is not a CycloneDX JSON document
    """
    input_path = Path(input_file)
    try:
        with open(input_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise FileProcessingError(f"Input SBOM file not found: {input_file}")
    except OSError as e:
        raise FileProcessingError(f"Failed to read SBOM file {input_file}: {e}")
    except json.JSONDecodeError as e:
        raise SBOMValidationError(f"Invalid JSON in SBOM file: {e}")

    if not isinstance(data, dict) or data.get("bomFormat") != "CycloneDX":
        raise SBOMValidationError("Input file is not a CycloneDX JSON document")

    spec_version = data.get("specVersion")
    if spec_version is None:
        raise SBOMValidationError("CycloneDX SBOM is missing required 'specVersion' field")

    _convert_legacy_tools(data, str(spec_version))

    try:
        bom = Bom.from_json(data)
    except Exception as e:
        raise SBOMValidationError(f"Failed to parse CycloneDX SBOM: {e}")

    return bom, str(spec_version)


def _convert_legacy_tools(data: Dict[str, Any], spec_version: str) -> None:
    """Convert a legacy ``metadata.tools`` array to the 1.5+ components form."""
    tools_data = (data.get("metadata") or {}).get("tools")
    if not isinstance(tools_data, list):
        return

    spec_parts = spec_version.split(".")
    major = int(spec_parts[0]) if spec_parts[0].isdigit() else 1
    minor = int(spec_parts[1]) if len(spec_parts) > 1 and spec_parts[1].isdigit() else 0
    if major == 1 and minor < 5:
        return

    logger.debug("Converting tools from legacy array to components format")
    components = []
    for tool_data in tools_data:
        component_data = dict(tool_data)
        if "vendor" in component_data:
            component_data["group"] = component_data.pop("vendor")
        component_data.setdefault("type", "application")
        components.append(component_data)
    data["metadata"]["tools"] = {"components": components, "services": []}


def enrich_bom(
    bom: Bom,
    config: Optional[Config] = None,
    cache: Optional[ProviderCache] = None,
) -> List[PropertySet]:
    """
    Enrich every component of a BOM in place.

    Args:
        bom: Parsed CycloneDX BOM
        config: Run configuration (defaults apply when omitted)
        cache: Provider cache to reuse across runs

    Returns:
        Final property sets, in component order
    """
    components = list(iter_components(bom.components))
    if not components:
        logger.warning("No components found in SBOM, skipping enrichment")
        return []

    with PropertyReconciler(config, cache=cache) as reconciler:
        return asyncio.run(reconciler.enrich_components(components, bom.vulnerabilities))


def enrich_sbom_file(
    input_file: str,
    output_file: str,
    config: Optional[Config] = None,
    cache: Optional[ProviderCache] = None,
) -> List[PropertySet]:
    """
    Enrich a CycloneDX JSON file with CERT-In properties.

    Args:
        input_file: Path to input SBOM file
        output_file: Path to save enriched SBOM

    Returns:
        Final property sets, in component order

    Raises:
        FileProcessingError: If the input cannot be read or the output cannot be written
        SBOMValidationError: If the input is not a valid CycloneDX JSON document
    """
    logger.info(f"Starting SBOM enrichment for: {input_file}")
    bom, spec_version = load_cyclonedx_bom(input_file)

    property_sets = enrich_bom(bom, config=config, cache=cache)

    try:
        serialized = serialize_cyclonedx_bom(bom, spec_version)
    except ValueError as e:
        raise SBOMValidationError(str(e))

    try:
        with open(Path(output_file), "w", encoding="utf-8") as f:
            f.write(serialized)
    except OSError as e:
        raise FileProcessingError(f"Failed to write enriched SBOM: {e}")

    logger.info(f"Enriched SBOM written to: {output_file}")
    return property_sets
