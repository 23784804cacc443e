"""Knowledge graph tests."""

import networkx as nx

from morpheus.knowledge.graph import build_graph, graph_to_data, node_id
from morpheus.knowledge.schemas import ItemType


def test_node_ids():
    assert node_id(ItemType.NOTE, 3) == "note-3"
    assert node_id("link", 7) == "link-7"


def test_every_item_becomes_a_node(sample_store):
    graph = build_graph(sample_store)

    assert isinstance(graph, nx.MultiDiGraph)
    assert graph.number_of_nodes() == 5
    note = sample_store.get_notes()[0]
    attrs = graph.nodes[f"note-{note.id}"]
    assert attrs["type"] == ItemType.NOTE
    assert attrs["title"] == note.title
    assert attrs["url"] is None


def test_connections_become_weighted_edges(sample_store):
    note = sample_store.get_notes()[0]
    link = sample_store.get_links()[0]
    sample_store.create_connection(note.id, ItemType.NOTE, link.id, ItemType.LINK, strength=2)
    sample_store.create_connection(note.id, ItemType.NOTE, link.id, ItemType.LINK, strength=5)

    graph = build_graph(sample_store)

    edges = graph.get_edge_data(f"note-{note.id}", f"link-{link.id}")
    assert sorted(e["strength"] for e in edges.values()) == [2, 5]


def test_dangling_connections_are_skipped(memory_store):
    note = memory_store.create_note("Alone", "")
    memory_store.create_connection(note.id, ItemType.NOTE, 99, ItemType.LINK)

    graph = build_graph(memory_store)

    assert graph.number_of_edges() == 0
    assert list(graph.nodes) == [f"note-{note.id}"]


def test_serialized_shape(sample_store):
    note = sample_store.get_notes()[0]
    link = sample_store.get_links()[0]
    sample_store.create_connection(link.id, ItemType.LINK, note.id, ItemType.NOTE)

    data = graph_to_data(build_graph(sample_store)).model_dump(by_alias=True)

    assert len(data["nodes"]) == 5
    [edge] = data["links"]
    assert edge == {"source": f"link-{link.id}", "target": f"note-{note.id}", "strength": 1}
    link_node = next(n for n in data["nodes"] if n["id"] == f"link-{link.id}")
    assert link_node["url"] == link.url
    assert {"id", "name"} == set(link_node["tags"][0])
    assert "createdAt" in link_node
