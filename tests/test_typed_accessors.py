"""Tests for ConfigManager typed accessors and ConfigCollection."""

import json

import pytest
from confseek import ConfigCollection
from confseek import ConfigManager
from confseek import InvalidArrayValueError
from confseek import InvalidBooleanValueError
from confseek import InvalidFloatValueError
from confseek import InvalidIntegerValueError
from confseek import InvalidStringValueError
from confseek import TypedAccessorError

VALUES = {
    "name": "app",
    "port": 8080,
    "port_str": "8080",
    "negative_str": "-7",
    "ratio": 0.75,
    "ratio_str": "3.14159",
    "exponent_str": "1e3",
    "enabled": True,
    "disabled": False,
    "yes_str": "yes",
    "off_str": "OFF",
    "zero": 0,
    "one": 1,
    "two": 2,
    "empty": "",
    "word": "abc",
    "nothing": None,
    "hosts": ["a", "b", "c"],
    "limits": {"cpu": 2, "mem": 512},
}


@pytest.fixture
def manager(tmp_path):
    """Create ConfigManager with an 'app' module loaded from JSON."""
    path = tmp_path / "app.json"
    path.write_text(json.dumps(VALUES))
    config = ConfigManager()
    config.load(path, "app")
    return config


class TestString:
    """Test string accessor."""

    def test_strings_and_numbers(self, manager):
        """Test strings pass through and numbers render in decimal."""
        assert manager.string("app", "name") == "app"
        assert manager.string("app", "port") == "8080"
        assert manager.string("app", "ratio") == "0.75"

    def test_booleans(self, manager):
        """Test True renders as "1" and False as ""."""
        assert manager.string("app", "enabled") == "1"
        assert manager.string("app", "disabled") == ""

    def test_null_message(self, manager):
        """Test the error message names module, key and given kind."""
        with pytest.raises(InvalidStringValueError) as exc_info:
            manager.string("app", "nothing")
        assert str(exc_info.value) == "Configuration value for [app.nothing] must be a string, null given."

    def test_missing_and_array(self, manager):
        """Test missing keys count as null and containers as array."""
        with pytest.raises(InvalidStringValueError, match="null given"):
            manager.string("app", "does.not.exist")
        with pytest.raises(InvalidStringValueError, match="array given"):
            manager.string("app", "hosts")


class TestInteger:
    """Test integer accessor."""

    def test_numbers(self, manager):
        """Test ints pass through and floats truncate."""
        assert manager.integer("app", "port") == 8080
        assert manager.integer("app", "ratio") == 0

    def test_numeric_strings(self, manager):
        """Test numeric strings are parsed, truncating fractions."""
        assert manager.integer("app", "port_str") == 8080
        assert manager.integer("app", "negative_str") == -7
        assert manager.integer("app", "ratio_str") == 3
        assert manager.integer("app", "exponent_str") == 1000

    def test_rejections(self, manager):
        """Test non-numeric strings, booleans, null and arrays are rejected."""
        with pytest.raises(InvalidIntegerValueError, match="must be an integer, non-numeric string given"):
            manager.integer("app", "word")
        with pytest.raises(InvalidIntegerValueError, match="scalar given"):
            manager.integer("app", "enabled")
        with pytest.raises(InvalidIntegerValueError, match="null given"):
            manager.integer("app", "nothing")
        with pytest.raises(InvalidIntegerValueError, match="array given"):
            manager.integer("app", "limits")

    def test_non_finite_rejected(self, manager, tmp_path):
        """Test infinite and NaN values raise instead of overflowing."""
        path = tmp_path / "limits.yaml"
        path.write_text("big: .inf\nsmall: -.inf\nundefined: .nan\nhuge_str: \"1e400\"\n")
        manager.load(path, "limits")
        assert not manager.is_dirty("limits")

        for key in ("big", "small", "undefined", "huge_str"):
            with pytest.raises(InvalidIntegerValueError, match="must be an integer, scalar given"):
                manager.integer("limits", key)


class TestFloat:
    """Test float accessor."""

    def test_numbers_and_strings(self, manager):
        """Test ints widen and numeric strings parse."""
        assert manager.float("app", "ratio") == 0.75
        assert manager.float("app", "port") == 8080.0
        assert isinstance(manager.float("app", "port"), float)
        assert manager.float("app", "ratio_str") == pytest.approx(3.14159)

    def test_rejections(self, manager):
        """Test non-numeric values are rejected."""
        with pytest.raises(InvalidFloatValueError, match="non-numeric string given"):
            manager.float("app", "word")
        with pytest.raises(InvalidFloatValueError, match="null given"):
            manager.float("app", "nothing")


class TestBoolean:
    """Test boolean accessor."""

    @pytest.mark.parametrize(
        "key,expected",
        [
            ("enabled", True),
            ("disabled", False),
            ("yes_str", True),
            ("off_str", False),
            ("one", True),
            ("zero", False),
            ("empty", False),
        ],
    )
    def test_accepted_values(self, manager, key, expected):
        """Test the accepted truthy and falsy representations."""
        assert manager.boolean("app", key) is expected

    @pytest.mark.parametrize("key", ["word", "two", "nothing", "hosts", "ratio"])
    def test_rejections(self, manager, key):
        """Test anything outside the accepted table is rejected."""
        with pytest.raises(InvalidBooleanValueError):
            manager.boolean("app", key)


class TestArray:
    """Test array and collection accessors."""

    def test_lists_and_mappings(self, manager):
        """Test containers are returned unchanged."""
        assert manager.array("app", "hosts") == ["a", "b", "c"]
        assert manager.array("app", "limits") == {"cpu": 2, "mem": 512}

    def test_returns_copy(self, manager):
        """Test changing the returned list leaves the stored value alone."""
        manager.array("app", "hosts").append("d")

        assert manager.array("app", "hosts") == ["a", "b", "c"]
        assert not manager.is_dirty("app")

    def test_scalar_rejected(self, manager):
        """Test scalars are rejected."""
        with pytest.raises(InvalidArrayValueError, match="must be an array, scalar given"):
            manager.array("app", "name")

    def test_errors_are_type_errors(self, manager):
        """Test accessor errors can be caught as TypeError."""
        with pytest.raises(TypeError):
            manager.array("app", "nothing")
        assert issubclass(InvalidArrayValueError, TypedAccessorError)

    def test_collection(self, manager):
        """Test collection wraps the value in a ConfigCollection."""
        hosts = manager.collection("app", "hosts")

        assert isinstance(hosts, ConfigCollection)
        assert hosts.count() == 3
        assert hosts == ["a", "b", "c"]

    def test_collection_rejects_scalar(self, manager):
        """Test collection fails like array for scalars."""
        with pytest.raises(InvalidArrayValueError):
            manager.collection("app", "port")


class TestConfigCollection:
    """Test ConfigCollection class."""

    def test_list_operations(self):
        """Test querying a list-backed collection."""
        hosts = ConfigCollection(["db1", "web1", "db2"])

        assert len(hosts) == 3
        assert list(hosts) == ["db1", "web1", "db2"]
        assert hosts.keys() == [0, 1, 2]
        assert hosts.contains("web1")
        assert hosts.contains(lambda h: h.startswith("db"))
        assert hosts.filter(lambda h: h.startswith("db")).to_list() == ["db1", "db2"]
        assert hosts.first() == "db1"
        assert hosts.last(lambda h: h.startswith("db")) == "db2"
        assert hosts.first(lambda h: h == "none", "fallback") == "fallback"
        assert hosts.to_dict() == {0: "db1", 1: "web1", 2: "db2"}

    def test_dict_operations(self):
        """Test querying a dict-backed collection keeps keys through filter."""
        limits = ConfigCollection({"cpu": 2, "mem": 0, "disk": 10})

        assert limits.keys() == ["cpu", "mem", "disk"]
        assert limits.values() == [2, 0, 10]
        assert limits.filter().all() == {"cpu": 2, "disk": 10}
        assert limits.filter(lambda v: v > 5) == {"disk": 10}

    def test_empty(self):
        """Test empty collections."""
        empty = ConfigCollection([])
        assert empty.is_empty()
        assert empty.first() is None
        assert empty.all() == []
