"""
OpenStreetMap XML ingestion.

Streams an OSM extract into a RoadGraph through its ingestion API. Every
<node> becomes a vertex; consecutive <nd> references of a drivable <way>
become road segments. Ways whose highway tag is not drivable (footways,
service roads, ...) are ignored.
"""

import logging
import math
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Collection, Dict, List, Optional, Tuple, Union

from waypath.core.config import settings
from waypath.core.errors import ParseError

if TYPE_CHECKING:
    from waypath.core.routing.graph import RoadGraph

logger = logging.getLogger(__name__)


@dataclass
class OSMLoadResult:
    """
    Counts gathered while loading an OSM extract.

    Attributes:
        vertices_added: Nodes handed to add_vertex
        skipped_nodes: Nodes dropped for missing or malformed attributes
        ways_seen: Total <way> elements
        routable_ways: Ways with an allowed highway tag
        edges_added: Road segments accepted by the graph
        edges_rejected: Segments the graph refused (unknown node, self-loop)
    """

    vertices_added: int = 0
    skipped_nodes: int = 0
    ways_seen: int = 0
    routable_ways: int = 0
    edges_added: int = 0
    edges_rejected: int = 0


def _parse_node(element: ET.Element) -> Optional[Tuple[int, float, float]]:
    """Extract (id, lat, lon) from a <node>, or None if malformed."""
    try:
        node_id = int(element.attrib["id"])
        lat = float(element.attrib["lat"])
        lon = float(element.attrib["lon"])
    except (KeyError, ValueError):
        return None

    if not (math.isfinite(lat) and math.isfinite(lon)):
        return None
    if not (-90 <= lat <= 90 and -180 <= lon <= 180):
        return None
    return node_id, lat, lon


def _tags(element: ET.Element) -> Dict[str, str]:
    return {
        tag.attrib["k"]: tag.attrib.get("v", "")
        for tag in element.iterfind("tag")
        if "k" in tag.attrib
    }


class OSMGraphLoader:
    """
    Load OSM XML into a road graph.
    """

    def __init__(
        self,
        graph: "RoadGraph",
        allowed_highway_types: Optional[Collection[str]] = None,
    ):
        """
        Initialize the loader.

        Args:
            graph: Graph in its ingestion phase
            allowed_highway_types: Drivable highway tag values (default: settings)
        """
        self.graph = graph
        self.allowed_highway_types = frozenset(
            allowed_highway_types
            if allowed_highway_types is not None
            else settings.allowed_highway_types
        )

    def load(self, source: Union[str, Path]) -> OSMLoadResult:
        """
        Stream an OSM file into the graph.

        Args:
            source: Path to the OSM XML file

        Returns:
            OSMLoadResult with ingestion counts

        Raises:
            ParseError: If the XML is malformed
            FileNotFoundError: If the file does not exist
        """
        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(f"OSM file not found: {path}")

        result = OSMLoadResult()
        try:
            for _, element in ET.iterparse(str(path), events=("end",)):
                if element.tag == "node":
                    self._handle_node(element, result)
                    element.clear()
                elif element.tag == "way":
                    self._handle_way(element, result)
                    element.clear()
        except ET.ParseError as e:
            line_number = e.position[0] if e.position else None
            raise ParseError(
                f"Malformed OSM XML: {e}",
                file_path=str(path),
                line_number=line_number,
            ) from e

        if result.skipped_nodes:
            logger.warning(f"Skipped {result.skipped_nodes} malformed nodes in {path}")
        logger.info(
            f"OSM ingestion finished: {result.vertices_added} nodes, "
            f"{result.routable_ways}/{result.ways_seen} routable ways, "
            f"{result.edges_added} edges ({result.edges_rejected} rejected)"
        )
        return result

    def _handle_node(self, element: ET.Element, result: OSMLoadResult) -> None:
        parsed = _parse_node(element)
        if parsed is None:
            logger.debug(f"Skipping malformed node: {element.attrib}")
            result.skipped_nodes += 1
            return

        node_id, lat, lon = parsed
        name = _tags(element).get("name")
        self.graph.add_vertex(node_id, lat, lon, name=name)
        result.vertices_added += 1

    def _handle_way(self, element: ET.Element, result: OSMLoadResult) -> None:
        result.ways_seen += 1

        if _tags(element).get("highway") not in self.allowed_highway_types:
            return
        result.routable_ways += 1

        refs: List[int] = []
        for nd in element.iterfind("nd"):
            try:
                refs.append(int(nd.attrib["ref"]))
            except (KeyError, ValueError):
                logger.debug(f"Skipping malformed nd in way {element.attrib.get('id')}")

        for source, dest in zip(refs, refs[1:]):
            if self.graph.add_edge(source, dest):
                result.edges_added += 1
            else:
                result.edges_rejected += 1


def load_osm_file(
    source: Union[str, Path],
    graph: "RoadGraph",
    allowed_highway_types: Optional[Collection[str]] = None,
) -> OSMLoadResult:
    """
    Convenience function to load an OSM XML file into a graph.

    Args:
        source: Path to the OSM XML file
        graph: Graph in its ingestion phase
        allowed_highway_types: Drivable highway tag values (default: settings)

    Returns:
        OSMLoadResult with ingestion counts
    """
    return OSMGraphLoader(graph, allowed_highway_types).load(source)
