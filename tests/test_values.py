from octoform.core.values import NULL, UNKNOWN, AttributePath, Configuration, Value


def test_value_states():
    assert NULL.is_null and not NULL.is_set
    assert UNKNOWN.is_unknown and not UNKNOWN.is_set
    assert Value.known("x").is_set
    assert Value.known("").is_known
    assert Value.known("").is_set
    assert not Value.known(None).is_set


def test_attribute_path():
    path = AttributePath.root("settings").child("mode")

    assert str(path) == "settings.mode"
    assert path.name == "mode"
    assert path.parent() == AttributePath.root("settings")
    assert str(AttributePath()) == ""


def test_configuration_from_dict():
    config = Configuration.from_dict(
        {"name": "alpha", "size": None, "later": UNKNOWN, "block": {"mode": "fast"}}
    )

    assert config.value("name") == Value.known("alpha")
    assert config.value("size").is_null
    assert config.value("missing").is_null
    assert config.value("later").is_unknown
    assert config.get_path(AttributePath(("block", "mode"))) == Value.known("fast")
    assert config.get_path(AttributePath(("name", "deeper"))).is_null
    assert config.block(AttributePath.root("block")) is not None
    assert config.has_unknown()


def test_known_values_skip_null_and_unknown():
    config = Configuration.from_dict({"a": 1, "b": None, "c": UNKNOWN, "d": {"e": 2, "f": UNKNOWN}})

    assert config.known_values() == {"a": 1, "d": {"e": 2}}
