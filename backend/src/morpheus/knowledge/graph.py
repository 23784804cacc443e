"""Knowledge graph of notes, links and their connections."""

from datetime import datetime
from typing import Optional

import networkx as nx
from pydantic import Field

from morpheus.knowledge.schemas import ApiModel, ItemType
from morpheus.storage.base import KnowledgeStore


class GraphTag(ApiModel):
    id: int
    name: str


class GraphNode(ApiModel):
    id: str
    type: ItemType
    title: str
    url: Optional[str] = None
    tags: list[GraphTag] = Field(default_factory=list)
    created_at: datetime


class GraphEdge(ApiModel):
    source: str
    target: str
    strength: int


class GraphData(ApiModel):
    """Graph in the node/link shape force-directed layouts consume."""

    nodes: list[GraphNode]
    links: list[GraphEdge]


def node_id(item_type: ItemType, item_id: int) -> str:
    """Graph node id for a note or link, e.g. ``note-3``."""
    return f"{ItemType(item_type).value}-{item_id}"


def build_graph(store: KnowledgeStore) -> nx.MultiDiGraph:
    """Build a directed multigraph from the store.

    Nodes are notes (in store order) followed by links. Every connection
    becomes an edge; connections pointing at deleted items are skipped.
    """
    graph = nx.MultiDiGraph()

    for note in store.get_notes():
        graph.add_node(
            node_id(ItemType.NOTE, note.id),
            type=ItemType.NOTE,
            title=note.title,
            url=None,
            tags=[{"id": t.id, "name": t.name} for t in store.get_note_tags(note.id)],
            created_at=note.created_at,
        )

    for link in store.get_links():
        graph.add_node(
            node_id(ItemType.LINK, link.id),
            type=ItemType.LINK,
            title=link.title,
            url=link.url,
            tags=[{"id": t.id, "name": t.name} for t in store.get_link_tags(link.id)],
            created_at=link.created_at,
        )

    for connection in store.get_connections():
        source = node_id(connection.source_type, connection.source_id)
        target = node_id(connection.target_type, connection.target_id)
        # add_edge would silently create missing endpoints
        if source in graph and target in graph:
            graph.add_edge(source, target, key=connection.id, strength=connection.strength)

    return graph


def graph_to_data(graph: nx.MultiDiGraph) -> GraphData:
    """Serialize a knowledge graph for the API."""
    nodes = [GraphNode(id=nid, **attrs) for nid, attrs in graph.nodes(data=True)]
    edges = [
        GraphEdge(source=source, target=target, strength=attrs.get("strength", 1))
        for source, target, attrs in graph.edges(data=True)
    ]
    return GraphData(nodes=nodes, links=edges)
