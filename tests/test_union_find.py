from glomap.union_find import UnionFind


def test_new_element_is_its_own_root():
    uf = UnionFind()
    assert uf.find(7) == 7


def test_union_joins_sets_transitively():
    uf = UnionFind()
    uf.union(1, 2)
    uf.union(2, 3)
    uf.union(10, 11)
    assert uf.find(1) == uf.find(3)
    assert uf.find(10) == uf.find(11)
    assert uf.find(1) != uf.find(10)


def test_union_root_is_second_argument_root():
    uf = UnionFind()
    uf.union(4, 5)
    assert uf.find(4) == 5


def test_union_same_set_is_noop():
    uf = UnionFind()
    uf.union(1, 2)
    root = uf.find(1)
    uf.union(2, 1)
    assert uf.find(1) == root
    assert uf.find(2) == root


def test_long_chain_compresses():
    uf = UnionFind()
    for i in range(2000):
        uf.union(i, i + 1)
    assert uf.find(0) == 2000
    assert all(uf.find(i) == 2000 for i in range(2001))


def test_clear_resets():
    uf = UnionFind()
    uf.union("a", "b")
    uf.clear()
    assert uf.find("a") == "a"
    assert uf.find("b") == "b"