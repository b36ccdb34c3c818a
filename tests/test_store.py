"""
Tests for the TripleStore facade.
"""

import pytest

from factmatch import StoreConfig, Triple, TripleStore
from factmatch.bindings import Bindings
from factmatch.errors import (
    ConfigValidationError,
    FormatError,
    MissingArgumentError,
    StoreClosedError,
)
from factmatch.storage import PolarsFactBackend


@pytest.fixture
def store():
    """Create a store with a small social graph."""
    store = TripleStore(config=StoreConfig(store_name="test"))
    store.add("alice", "likes", "bob")
    store.add("bob", "likes", "cake")
    store.add("carol", "likes", "cake")
    store.add(Triple("dave", "knows", "dave"))
    yield store
    store.close()


class TestAddAndContains:
    """Tests for adding facts."""
    
    def test_count(self, store):
        """Test count reflects stored facts."""
        assert store.count == 4
        assert len(store) == 4
    
    def test_add_duplicate(self, store):
        """Test adding an existing fact returns False."""
        assert store.add("Alice", "LIKES", "bob") is False
        assert store.count == 4
    
    def test_add_pattern_rejected(self, store):
        """Test patterns cannot be added."""
        with pytest.raises(FormatError):
            store.add("?a", "likes", "bob")
    
    def test_add_missing_argument(self, store):
        """Test adding with a missing slot raises."""
        with pytest.raises(MissingArgumentError):
            store.add("alice", "likes", None)
        with pytest.raises(MissingArgumentError):
            store.add(None)
    
    def test_contains(self, store):
        """Test containment of a concrete fact."""
        assert store.contains(Triple("alice", "likes", "bob"))
        assert not store.contains(Triple("alice", "likes", "cake"))
        assert Triple("bob", "likes", "cake") in store
    
    def test_contains_pattern(self, store):
        """Test containment of a pattern with a match."""
        assert store.contains(Triple("?who", "likes", "cake"))
        assert not store.contains(Triple("?who", "hates", "cake"))


class TestQuery:
    """Tests for the query argument forms."""
    
    def test_query_string(self, store):
        """Test querying with a query string."""
        results = store.query("?a likes ?b . ?b likes cake")
        assert results == [Bindings({"a": "alice", "b": "bob"})]
    
    def test_query_triple(self, store):
        """Test querying with a Triple."""
        results = store.query(Triple("?who", "likes", "cake"))
        assert {b["who"] for b in results} == {"bob", "carol"}
    
    def test_query_raw_strings(self, store):
        """Test querying with raw id, predicate and object strings."""
        results = store.query("alice", "likes", "?what")
        assert results == [Bindings({"what": "bob"})]
    
    def test_query_list(self, store):
        """Test querying with a list of Triples."""
        results = store.query([Triple("?a", "likes", "?b"), Triple("?b", "likes", "cake")])
        assert len(results) == 1
    
    def test_query_no_match(self, store):
        """Test a query with no match returns an empty list."""
        assert store.query("?a hates ?b") == []
    
    def test_query_malformed(self, store):
        """Test a malformed query string raises."""
        with pytest.raises(FormatError):
            store.query("a b")
    
    def test_query_list_rejects_non_triples(self, store):
        """Test a query list may only hold Triples."""
        with pytest.raises(FormatError):
            store.query(["alice likes bob"])
    
    def test_max_results(self):
        """Test max_results truncates query results."""
        store = TripleStore(config=StoreConfig(max_results=1))
        store.add("bob", "likes", "cake")
        store.add("carol", "likes", "cake")
        assert len(store.query("?who likes cake")) == 1


class TestRemove:
    """Tests for removal."""
    
    def test_remove_fact(self, store):
        """Test removing a stored fact."""
        removed = store.remove("alice", "likes", "bob")
        assert removed == {Triple("alice", "likes", "bob")}
        assert store.count == 3
    
    def test_remove_absent_fact(self, store):
        """Test removing an absent fact removes nothing."""
        assert store.remove(Triple("alice", "likes", "cake")) == set()
        assert store.count == 4
    
    def test_remove_pattern(self, store):
        """Test removing every fact matching a pattern."""
        removed = store.remove("?who likes cake")
        assert removed == {Triple("bob", "likes", "cake"), Triple("carol", "likes", "cake")}
        assert store.count == 2
    
    def test_remove_all_variables_clears(self, store):
        """Test ?a ?b ?c removes every fact."""
        removed = store.remove(Triple("?a", "?b", "?c"))
        assert len(removed) == 4
        assert store.count == 0
    
    def test_remove_repeated_variable_is_not_clear(self, store):
        """Test a pattern repeating one variable only removes matching facts."""
        removed = store.remove("?a ?p ?a")
        assert removed == {Triple("dave", "knows", "dave")}
        assert store.count == 3
    
    def test_remove_conjunction(self, store):
        """Test every triple implied by the conjunction's bindings is removed."""
        removed = store.remove("?a likes ?b . ?b likes cake")
        assert removed == {Triple("alice", "likes", "bob"), Triple("bob", "likes", "cake")}
        assert store.all() == {Triple("carol", "likes", "cake"), Triple("dave", "knows", "dave")}
    
    def test_remove_empty_list(self, store):
        """Test an empty query list removes nothing."""
        assert store.remove([]) == set()


class TestStoreLifecycle:
    """Tests for all(), clear() and close()."""
    
    def test_all(self, store):
        """Test all() returns every stored triple."""
        assert Triple("alice", "likes", "bob") in store.all()
        assert len(store.all()) == 4
    
    def test_clear(self, store):
        """Test clear() empties the store."""
        assert store.clear() is True
        assert store.all() == set()
    
    def test_clear_on_open(self):
        """Test clear_on_open empties a supplied backend."""
        backend = PolarsFactBackend()
        backend.insert(Triple("alice", "likes", "bob"))
        store = TripleStore(backend=backend, config=StoreConfig(clear_on_open=True))
        assert store.count == 0
    
    def test_existing_backend_kept(self):
        """Test a supplied backend keeps its facts."""
        backend = PolarsFactBackend()
        backend.insert(Triple("alice", "likes", "bob"))
        store = TripleStore(backend=backend)
        assert store.count == 1
        assert store.backend is backend
    
    def test_close(self):
        """Test a closed store rejects operations."""
        with TripleStore() as store:
            store.add("alice", "likes", "bob")
        with pytest.raises(StoreClosedError):
            store.query("?a ?b ?c")
        with pytest.raises(StoreClosedError):
            store.add("bob", "likes", "cake")
    
    def test_invalid_config(self):
        """Test an invalid config is rejected at construction."""
        with pytest.raises(ConfigValidationError):
            TripleStore(config=StoreConfig(store_name=""))


class TestMatch:
    """Tests for matching against caller-supplied facts."""
    
    def test_match_facts(self, store):
        """Test matching against caller-supplied facts."""
        facts = [Triple("x", "likes", "y"), Triple("y", "likes", "cake")]
        results = store.match("?a likes ?b . ?b likes cake", facts)
        assert results == [Bindings({"a": "x", "b": "y"})]
    
    def test_match_agrees_with_backend(self, store):
        """Test the core matcher and the backend agree on stored facts."""
        query = "?a likes ?b . ?b likes cake"
        assert store.match(query, store.all()) == store.query(query)
    
    def test_match_agrees_with_backend_on_prefixed_values(self):
        """Test the matcher and the backend agree when values carry the URN prefix."""
        store = TripleStore()
        store.add("a", "likes", "em:b")
        store.add("em:b", "likes", "cake")
        query = "?a likes ?b . ?b likes cake"
        expected = [Bindings({"a": "a", "b": "em:b"})]
        assert store.query(query) == expected
        assert store.match(query, store.all()) == expected
        store.close()
