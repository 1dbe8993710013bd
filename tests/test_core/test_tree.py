import pytest

from phylolayout import make_tree
from phylolayout.core.tree import PhyloNode, TreeError, branch_length


def test_make_tree_nested():
    """nested sequences give a rooted tree with unnamed internal nodes"""
    tree = make_tree([["A", "B"], ("C", "D"), "E"])
    assert tree.name is None
    assert tree.get_tip_names() == ["A", "B", "C", "D", "E"]
    assert [c.name for c in tree.children] == [None, None, "E"]
    for node in tree.preorder(include_self=False):
        assert node in node.parent.children


def test_make_tree_tip_names():
    """tip_names gives a star tree"""
    tree = make_tree(tip_names=["a", "b", "c"])
    assert tree.name is None
    assert [child.name for child in tree.children] == ["a", "b", "c"]
    assert all(child.is_tip() for child in tree.children)
    assert tree.height() == 1


def test_make_tree_single_tip():
    tree = make_tree("A")
    assert tree.is_tip()
    assert tree.tips() == [tree]
    assert tree.height() == 0


@pytest.mark.parametrize("structure", [None, [], [["A"], []], [1, "A"]])
def test_make_tree_invalid(structure):
    with pytest.raises((ValueError, TreeError)):
        make_tree(structure)


def test_make_tree_keeps_tip_names():
    """repeated tip names are not altered"""
    tree = make_tree([["A", "B"], "A"])
    assert tree.get_tip_names() == ["A", "B", "A"]
    tree = make_tree(tip_names=["x", "x"])
    assert tree.get_tip_names() == ["x", "x"]


def test_make_tree_named_internal():
    """internal names come only from supplied nodes"""
    clade = PhyloNode("ab", children=["A", "B"])
    tree = make_tree([clade, "C"])
    assert tree.children[0] is clade
    assert [n.name for n in tree.preorder()] == [None, "ab", "A", "B", "C"]


def test_traversal_order():
    tree = make_tree([["A", "B"], "C"])
    clade = tree.children[0]
    assert list(tree.preorder()) == [tree, clade, *clade.children, tree.children[1]]
    assert [n.name for n in tree.postorder()] == ["A", "B", None, "C", None]
    assert next(tree.preorder(include_self=False)) is clade
    assert [n.name for n in tree.postorder(include_self=False)][-1] == "C"


def test_deep_tree_traversal():
    """traversals do not recurse, so very deep trees are supported"""
    root = node = PhyloNode("root")
    for i in range(5000):
        node = PhyloNode(f"n{i}", parent=node)
    assert root.height() == 5000
    assert len(list(root.postorder())) == 5001
    assert root.tips() == [node]
    root.validate()


def test_height():
    tree = make_tree([[["A", "B"], "C"], "D"])
    assert tree.height() == 3
    assert tree.children[1].height() == 0


def test_get_node_matching_name():
    tree = make_tree([["A", "B"], "C"])
    assert tree.get_node_matching_name("B").name == "B"
    with pytest.raises(TreeError):
        tree.get_node_matching_name("Z")


def test_validate_cycle():
    """a node reachable twice is an error"""
    tree = make_tree([["A", "B"], "C"])
    tree.children[0].children.append(tree)
    with pytest.raises(TreeError):
        tree.validate()


def test_validate_shared_child():
    tree = make_tree([["A", "B"], "C"])
    shared = tree.children[1]
    tree.children[0].children.append(shared)
    with pytest.raises(TreeError):
        tree.validate()


def test_validate_parent_mismatch():
    tree = make_tree([["A", "B"], "C"])
    tree.children.append(PhyloNode("D"))
    with pytest.raises(TreeError):
        tree.validate()


def test_validate_not_a_node():
    tree = make_tree([["A", "B"], "C"])
    tree.children.append("D")
    with pytest.raises(TreeError):
        tree.validate()


def test_reparenting():
    """appending a node to a new parent removes it from the old one"""
    tree = make_tree([["A", "B"], "C"])
    a = tree.get_node_matching_name("A")
    tree.append(a)
    assert a.parent is tree
    assert tree.get_tip_names() == ["B", "C", "A"]
    tree.validate()


@pytest.mark.parametrize(
    "color", [(0, 0.5, 1), [1, 1, 1], None],
)
def test_color_valid(color):
    node = PhyloNode("A", color=color)
    expect = None if color is None else tuple(float(c) for c in color)
    assert node.color == expect


@pytest.mark.parametrize(
    "color", [(0, 0, 2), (0, 0), (0, -0.1, 0), ("a", 0, 0), (True, 0, 0)],
)
def test_color_invalid(color):
    with pytest.raises(ValueError):
        PhyloNode("A", color=color)
    node = PhyloNode("A")
    with pytest.raises(ValueError):
        node.color = color


@pytest.mark.parametrize(
    "length,expect",
    [
        (None, 1.0),
        (0, 0.0),
        (2, 2.0),
        (0.25, 0.25),
        ("0.25", 0.25),
        ("3", 3.0),
        ("1e-3", 1.0),
        (".5", 1.0),
        ("abc", 1.0),
        ("", 1.0),
        (-2, 1.0),
        (float("nan"), 1.0),
        (float("inf"), 1.0),
        ([1], 1.0),
    ],
)
def test_branch_length(length, expect):
    """malformed branch lengths are treated as 1"""
    node = PhyloNode("A", length=length)
    assert branch_length(node) == expect


def test_get_newick():
    tree = make_tree([PhyloNode("ab", children=["A", "B"]), "C"])
    assert tree.get_newick() == "((A,B),C);"
    assert tree.get_newick(with_node_names=True) == "((A,B)ab,C);"
    assert tree.get_newick(semicolon=False) == "((A,B),C)"
    tree.get_node_matching_name("A").length = 0.5
    assert tree.get_newick(with_distances=True) == "((A:0.5,B),C);"


def test_newick_quoting():
    tree = make_tree(["a b", "c,d"])
    assert tree.get_newick() == "(a_b,'c,d');"


def test_connections_not_shared():
    a = PhyloNode("A")
    b = PhyloNode("B")
    assert a.connections == []
    a.connections.append(PhyloNode("X"))
    assert b.connections == []
