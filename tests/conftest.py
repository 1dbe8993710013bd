import pytest

from phylolayout import MonospaceMetrics, make_tree


@pytest.fixture
def metrics():
    """every character is 6 units wide, as the gd small font"""
    return MonospaceMetrics(char_width=6)


@pytest.fixture
def tree():
    """((A,B),C)"""
    return make_tree([["A", "B"], "C"])


@pytest.fixture
def tree2():
    """((B,C),D)"""
    return make_tree([["B", "C"], "D"])
