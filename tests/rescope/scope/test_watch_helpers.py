import pytest

from rescope.scope.watchers import compile_accessor, values_equal


class TestWatchGroup:
    """Tests for Scope.watch_group."""

    def test_first_call_has_equal_lists(self, root):
        """Test the first listener call receives the same values twice."""
        root.a = 1
        root.b = 2
        calls = []
        root.watch_group(["a", "b"], lambda new, old: calls.append((new, old)))

        root.digest()

        assert calls == [([1, 2], [1, 2])]

    def test_single_call_per_digest(self, root):
        """Test changing several members still fires the listener once."""
        root.a = 1
        root.b = 2
        calls = []
        root.watch_group(["a", "b"], lambda new, old: calls.append((new, old)))
        root.digest()
        calls.clear()

        root.a = 10
        root.b = 20
        root.digest()

        assert calls == [([10, 20], [1, 2])]

    def test_unchanged_members_keep_their_value(self, root):
        """Test only the changed member differs between new and old."""
        root.a = 1
        root.b = 2
        calls = []
        root.watch_group(["a", "b"], lambda new, old: calls.append((new, old)))
        root.digest()
        calls.clear()

        root.a = 5
        root.digest()

        assert calls == [([5, 2], [1, 2])]

    def test_empty_group_fires_once(self, root):
        """Test an empty group calls its listener once with empty lists."""
        calls = []
        root.watch_group([], lambda new, old: calls.append((new, old)))

        root.digest()
        root.digest()

        assert calls == [([], [])]

    def test_deregister(self, root):
        """Test a deregistered group stops firing."""
        root.a = 1
        calls = []
        deregister = root.watch_group(["a"], lambda new, old: calls.append(new))
        root.digest()

        deregister()
        root.a = 2
        root.digest()

        assert calls == [[1]]


class TestWatchCollection:
    """Tests for Scope.watch_collection."""

    def test_detects_append(self, root):
        """Test appending to a watched list fires with the previous items."""
        root.items = [1, 2]
        calls = []
        root.watch_collection("items", lambda new, old: calls.append((list(new), list(old))))
        root.digest()
        calls.clear()

        root.items.append(3)
        root.digest()

        assert calls == [([1, 2, 3], [1, 2])]

    def test_no_change_no_call(self, root):
        """Test digesting an untouched collection does not fire."""
        root.items = [1, 2]
        calls = []
        root.watch_collection("items", lambda new, old: calls.append(new))
        root.digest()
        calls.clear()

        root.digest()

        assert calls == []

    def test_detects_item_replacement_in_mapping(self, root):
        """Test replacing a mapping value fires the listener."""
        root.data = {"a": 1}
        calls = []
        root.watch_collection("data", lambda new, old: calls.append((dict(new), dict(old))))
        root.digest()
        calls.clear()

        root.data["a"] = 2
        root.data["b"] = 3
        root.digest()

        assert calls == [({"a": 2, "b": 3}, {"a": 1})]

    def test_nested_mutation_is_not_seen(self, root):
        """Test changes below the first level are ignored."""
        root.rows = [{"name": "x"}]
        calls = []
        root.watch_collection("rows", lambda new, old: calls.append(new))
        root.digest()
        calls.clear()

        root.rows[0]["name"] = "y"
        root.digest()

        assert calls == []


class TestEval:
    """Tests for Scope.eval and accessor compilation."""

    def test_callable(self, root):
        """Test callables receive the scope."""
        root.a = 2
        assert root.eval(lambda s: s.a * 3) == 6

    def test_dotted_path(self, root):
        """Test dotted paths read mappings and attributes."""

        class User:
            name = "ada"

        root.user = User()
        root.config = {"theme": {"color": "blue"}}

        assert root.eval("user.name") == "ada"
        assert root.eval("config.theme.color") == "blue"

    def test_missing_segment_is_none(self, root):
        """Test a missing path segment yields None instead of raising."""
        root.config = {}
        assert root.eval("config.theme.color") is None
        assert root.eval("nothing.here") is None

    def test_locals_override_properties(self, root):
        """Test locals take precedence over scope properties."""
        root.x = {"y": 1}
        assert root.eval("x.y", x={"y": 3}) == 3

    def test_inherited_property(self, root):
        """Test paths are resolved through the parent chain."""
        root.user = {"name": "ada"}
        assert root.new().new().eval("user.name") == "ada"

    def test_none_expression(self, root):
        """Test evaluating nothing returns None."""
        assert root.eval() is None

    def test_invalid_expression(self):
        """Test only callables and strings are accepted."""
        with pytest.raises(TypeError):
            compile_accessor(42)


class TestValuesEqual:
    """Tests for the watcher equality rule."""

    def test_primitives_compare_by_value(self):
        """Test same-typed primitives compare by value."""
        assert values_equal(1000, int("1000"))
        assert values_equal("ab", "".join(["a", "b"]))

    def test_different_types_are_different(self):
        """Test 1 and 1.0 are a change."""
        assert not values_equal(1, 1.0)

    def test_nan_equals_nan(self):
        """Test NaN never keeps a watcher dirty."""
        assert values_equal(float("nan"), float("nan"))

    def test_objects_compare_by_reference(self):
        """Test equal but distinct lists are a change unless deep."""
        assert not values_equal([1], [1])
        assert values_equal([1], [1], deep=True)
