from v2vmap.roadgraph import RoadEdge, RoadGraph, RoadNode


def _graph_with_nodes(*ids):
    graph = RoadGraph()
    for osm_id in ids:
        graph.add_node(RoadNode(id=osm_id, lat=float(osm_id), lon=-float(osm_id)))
    return graph


def test_edge_defaults():
    edge = RoadEdge()
    assert edge.from_node == -1
    assert edge.to_node == -1
    assert edge.max_speed_kmh == 50.0
    assert edge.oneway is False


def test_add_node_returns_sequential_indices():
    graph = RoadGraph()
    assert graph.add_node(RoadNode(id=100)) == 0
    assert graph.add_node(RoadNode(id=200)) == 1
    assert [n.id for n in graph.nodes()] == [100, 200]


def test_add_node_duplicate_id_keeps_first():
    graph = RoadGraph()
    graph.add_node(RoadNode(id=7, lat=1.0))
    assert graph.add_node(RoadNode(id=7, lat=2.0)) == 0
    assert len(graph.nodes()) == 1
    assert graph.node_by_id(7).lat == 1.0


def test_add_node_stores_copy():
    graph = RoadGraph()
    node = RoadNode(id=1, lat=3.0)
    graph.add_node(node)
    node.lat = 9.0
    node.outgoing_edges.append(5)
    assert graph.node_by_id(1).lat == 3.0
    assert graph.node_by_id(1).outgoing_edges == []


def test_add_edge_records_outgoing_edge():
    graph = _graph_with_nodes(1, 2)
    first = graph.add_edge(RoadEdge(id=10, from_node=0, to_node=1))
    second = graph.add_edge(RoadEdge(id=11, from_node=1, to_node=0))
    assert (first, second) == (0, 1)
    assert graph.nodes()[0].outgoing_edges == [0]
    assert graph.nodes()[1].outgoing_edges == [1]


def test_add_edge_duplicate_id_returns_existing_index():
    graph = _graph_with_nodes(1, 2)
    graph.add_edge(RoadEdge(id=10, from_node=0, to_node=1))
    assert graph.add_edge(RoadEdge(id=10, from_node=1, to_node=0)) == 0
    assert len(graph.edges()) == 1
    assert graph.nodes()[0].outgoing_edges == [0]
    assert graph.nodes()[1].outgoing_edges == []


def test_add_edge_with_unknown_from_node_is_still_stored():
    graph = _graph_with_nodes(1)
    index = graph.add_edge(RoadEdge(id=3, from_node=5, to_node=0))
    assert index == 0
    assert graph.edge_by_id(3).from_node == 5
    assert graph.nodes()[0].outgoing_edges == []


def test_lookups_for_missing_ids():
    graph = _graph_with_nodes(1)
    assert graph.node_by_id(99) is None
    assert graph.edge_by_id(99) is None
    assert graph.node_index(99) == -1


def test_node_index_and_lookup_agree():
    graph = _graph_with_nodes(5, 6, 7)
    for node in graph.nodes():
        assert graph.nodes()[graph.node_index(node.id)] is graph.node_by_id(node.id)


def test_clear_empties_graph():
    graph = _graph_with_nodes(1, 2)
    graph.add_edge(RoadEdge(id=1, from_node=0, to_node=1))
    graph.clear()
    assert graph.nodes() == ()
    assert graph.edges() == ()
    assert graph.node_index(1) == -1
    assert graph.add_node(RoadNode(id=2)) == 0