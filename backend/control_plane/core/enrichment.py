"""Enrichment Assembler — read model of a pipeline with display names resolved.

Invariants:
    - Never mutates the stored graph; output is a fresh document
    - A dangling client/connection reference falls back to the raw id (not an error)
    - Each stream carries its computed wire name; the wire name is never persisted

Design Decisions:
    - Output is the persisted document plus extra keys, so readers see one shape
      for stored and enriched pipelines
"""

from collections.abc import Mapping

from control_plane.core.pipeline_graph import PipelineGraph, graph_to_document
from control_plane.core.topic_names import encode_topic_name


def enrich_pipeline(
    graph: PipelineGraph,
    client_names: Mapping[str, str],
    connection_names: Mapping[str, str],
    workspace_code: str,
    environment: str,
) -> dict:
    document = graph_to_document(graph)
    document["workspaceCode"] = workspace_code
    document["environment"] = environment

    for stream in document["streams"]:
        stream["topic"] = encode_topic_name(
            environment, workspace_code, graph.code,
            stream["streamName"], stream["variant"],
        )
    for connector in document["sourceConnectors"]:
        connector["clientName"] = (
            client_names.get(connector["clientId"]) or connector["clientId"]
        )
    for connector in document["sinkConnectors"]:
        connector["connectionName"] = (
            connection_names.get(connector["connectionId"])
            or connector["connectionId"]
        )
    return document
