"""Tests for loading configurations from YAML."""

import pytest

from keycase.config import ConfigLoader, load, load_string, parse_config
from keycase.config.loader import merge_documents
from keycase.config.types import ColumnConfig, KeyboardConfig, McuConfig
from keycase.errors import DuplicateAnchor, InvalidKey, InvalidSegment, MissingField, ParseError
from keycase.layout.compass import Corner, Direction


def test_sample_configuration(config):
    assert isinstance(config, KeyboardConfig)
    assert config.keys.pitch == 20.0
    main = config.key_clusters["main"]
    assert main.matrix_columns[1] == ColumnConfig(rows=4, stagger=2.0)
    assert main.aliases["top"] == (1, "last")
    assert config.key_clusters["thumb"].rotation == 90.0
    assert config.secondaries["above-home"].corner is Corner.NNE
    assert config.secondaries["chained"].offset == (1.0, 0.0)
    assert set(config.tweaks) == {"bridge", "skirt"}
    assert config.mcu == McuConfig()
    assert config.cluster_matrices()["main"].rows_per_column == (3, 4, 2)


def test_load_string_matches_parse_config(keyboard_yaml, document):
    assert load_string(keyboard_yaml).keys == parse_config(document).keys


def test_key_clusters_are_required():
    with pytest.raises(MissingField) as excinfo:
        parse_config({"keys": {"pitch": 19}})
    assert excinfo.value.key == "key-clusters"


def test_unknown_field_reports_its_path(document):
    document["case"] = {"rear-housing": {"include": True, "colour": "red"}}
    with pytest.raises(InvalidKey) as excinfo:
        parse_config(document)
    assert excinfo.value.path == ["case", "rear-housing", "colour"]


def test_reversed_tweak_segments_report_their_path(document):
    document["tweaks"]["bad"] = [["home", "SSE", 3, 1]]
    with pytest.raises(InvalidSegment) as excinfo:
        parse_config(document)
    assert excinfo.value.path == ["tweaks", "bad", 0, 3]


def test_aliases_are_unique_across_clusters(document):
    document["key-clusters"]["thumb"]["aliases"]["home"] = [0, 0]
    with pytest.raises(DuplicateAnchor) as excinfo:
        parse_config(document)
    assert excinfo.value.path == ["key-clusters", "thumb", "aliases", "home"]


def test_secondaries_may_not_reuse_aliases(document):
    document["secondaries"]["far"] = {"anchor": "home"}
    with pytest.raises(DuplicateAnchor):
        parse_config(document)


@pytest.mark.parametrize("section", [
    {"mcu": {"type": "arduino"}},
    {"keys": {"pitch": 0}},
    {"key-clusters": {}},
    {"key-clusters": {"main": {"matrix-columns": [{"rows": 0}]}}},
    {"key-clusters": {"main": {"matrix-columns": [{"rows": 1}], "aliases": {"a": [0]}}}},
    {"case": {"leds": {"include": True}}},
    {"case": {"leds": {"include": True, "cluster": "nowhere"}}},
])
def test_invalid_sections(document, section):
    document.update(section)
    with pytest.raises(ParseError):
        parse_config(document)


def test_supplemented_sections(make_config):
    config = make_config(
        mcu={
            "include": True,
            "type": "teensy",
            "position": {"anchor": "home", "corner": "WNW", "prefer-rear-housing": True},
            "support": {"stop": {"anchor": "home", "direction": "n"}},
        },
        connection={
            "include": True,
            "position": {"anchor": "home", "corner": "SSW"},
            "socket-size": [6, 8, 3],
            "raise-to-roof": True,
        },
        case={
            "back-plate": {"include": True, "position": {"anchor": "home", "corner": "NNW"}},
            "foot-plates": {"polygons": [{"points": [{"anchor": "home"}, {"anchor": "top"}]}]},
        },
    )
    assert config.mcu.type == "teensy"
    assert config.mcu.position.corner is Corner.WNW
    assert config.mcu.position.prefer_rear_housing
    assert config.mcu.support.stop.direction is Direction.N
    assert config.connection.socket_size == (6.0, 8.0, 3.0)
    assert config.case.back_plate.position.corner is Corner.NNW
    assert config.case.back_plate.fasteners.distance == 20.0
    assert len(config.case.foot_plates.polygons[0].points) == 2


def test_merge_documents():
    base = {"keys": {"pitch": 19}, "walls": {"thickness": 2, "bevel": 1}}
    override = {"walls": {"thickness": 3}, "tweaks": {}}
    assert merge_documents(base, override) == {
        "keys": {"pitch": 19},
        "walls": {"thickness": 3, "bevel": 1},
        "tweaks": {},
    }


def test_layered_files(tmp_path, keyboard_yaml):
    base = tmp_path / "base.yaml"
    base.write_text(keyboard_yaml)
    override = tmp_path / "override.yaml"
    override.write_text("keys:\n  pitch: 18\nwalls:\n  thickness: 2\n")
    config = load(base, override)
    assert config.keys.pitch == 18.0
    assert config.walls.thickness == 2.0
    assert "home" in config.key_clusters["main"].aliases


def test_loader_rejects_non_mapping(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n")
    with pytest.raises(ParseError):
        ConfigLoader().load(path)
    with pytest.raises(ValueError):
        ConfigLoader().load()


@pytest.mark.parametrize("name", ["mcu", "leds", "back-plate", "bridge-negative"])
def test_tweak_names_may_not_shadow_features(document, name):
    document["tweaks"][name] = [["home", "SSE", 0, 4]]
    with pytest.raises(ParseError) as excinfo:
        parse_config(document)
    assert excinfo.value.path == ["tweaks", name]


@pytest.mark.parametrize("section", ["mcu", "connection"])
def test_included_feature_needs_an_anchor(document, section):
    document[section] = {"include": True}
    with pytest.raises(MissingField) as excinfo:
        parse_config(document)
    assert excinfo.value.key == "anchor"
    assert excinfo.value.path == [section, "position"]


def test_rear_housing_stands_in_for_the_anchor(document):
    document["case"] = {"rear-housing": {"include": True}}
    document["connection"] = {"include": True, "position": {"prefer-rear-housing": True}}
    config = parse_config(document)
    assert config.connection.position.anchor is None


def test_excluded_feature_needs_no_anchor(document):
    document["mcu"] = {"include": False}
    assert parse_config(document).mcu.position.anchor is None
