"""Tests for auxiliary feature placement."""

import numpy as np
import pytest

from keycase.errors import OutOfBoundsCoordinate
from keycase.features import (
    MCU_PCBS,
    backplate_fastener_positions,
    backplate_transform,
    connection_transform,
    foot_plate_polygons,
    led_channel_polygon,
    led_hole_positions,
    led_housing_outlines,
    mcu_pcb,
    mcu_stop_posts,
    mcu_transform,
)
from keycase.layout.placement import PlacementResolver


@pytest.fixture
def featured(make_config, feature_sections):
    config = make_config(**feature_sections)
    return config, PlacementResolver.from_config(config)


def test_pcb_dimensions(featured):
    config, _ = featured
    assert mcu_pcb(config) is MCU_PCBS["promicro"]
    assert MCU_PCBS["teensy++"].length > MCU_PCBS["teensy"].length


def test_mcu_faces_its_wall_and_stands_on_the_floor(featured):
    config, resolver = featured
    holder = mcu_transform(resolver, config)
    # WNW of home is (-10, 10); shimmed 1 mm off the north end, pulled in by
    # the connector overshoot and raised by half the board width.
    np.testing.assert_allclose(holder.position, [-9.1, 10.0, 9.0], atol=1e-9)
    np.testing.assert_allclose(holder.rotation_matrix @ [0, 1, 0], [-1, 0, 0], atol=1e-12)


def test_mcu_rotation_is_added(make_config, feature_sections):
    sections = feature_sections
    sections["mcu"] = {
        "include": True,
        "position": {"anchor": "home", "corner": "WNW", "rotation": [0, 0, 90]},
    }
    config = make_config(**sections)
    holder = mcu_transform(PlacementResolver.from_config(config), config)
    np.testing.assert_allclose(holder.rotation_matrix @ [0, 1, 0], [0, -1, 0], atol=1e-12)


def test_mcu_stop_spans_two_keys(featured):
    config, resolver = featured
    posts = mcu_stop_posts(resolver, config)
    assert len(posts) == 4
    # The north corners of home coincide with the south corners of the key above.
    np.testing.assert_allclose(posts[0].position, [-10, 10, 30], atol=1e-9)
    np.testing.assert_allclose(posts[1].position, [10, 10, 30], atol=1e-9)
    np.testing.assert_allclose(posts[2].position, posts[0].position, atol=1e-9)
    np.testing.assert_allclose(posts[3].position, posts[1].position, atol=1e-9)


def test_mcu_stop_past_the_matrix(make_config, feature_sections):
    sections = feature_sections
    sections["mcu"]["support"] = {"stop": {"anchor": "far", "direction": "N"}}
    config = make_config(**sections)
    with pytest.raises(OutOfBoundsCoordinate) as excinfo:
        mcu_stop_posts(PlacementResolver.from_config(config), config)
    assert excinfo.value.chain == ["far"]


def test_mcu_without_stop(make_config):
    config = make_config(mcu={"include": True, "position": {"anchor": "home", "corner": "WNW"}})
    assert mcu_stop_posts(PlacementResolver.from_config(config), config) == []


def test_connection_above_the_floor(featured):
    config, resolver = featured
    socket = connection_transform(resolver, config)
    np.testing.assert_allclose(socket.position, [-10, -5, 3], atol=1e-9)


def test_connection_under_the_housing_roof(make_config, feature_sections):
    sections = feature_sections
    sections["case"] = {"rear-housing": {"include": True, "position": [0, 60, 0]}}
    sections["connection"] = {
        "include": True,
        "raise-to-roof": True,
        "position": {"corner": "NNE", "prefer-rear-housing": True},
    }
    config = make_config(**sections)
    socket = connection_transform(PlacementResolver.from_config(config), config)
    # Roof at 16, roof thickness 2, half the socket height 2.
    assert socket.position[2] == pytest.approx(12.0)
    assert socket.position[0] == pytest.approx(20.0)


def test_back_plate(featured):
    config, resolver = featured
    plate = backplate_transform(resolver, config)
    # Segment 3 below NNW of home, lowered by half the beam height.
    np.testing.assert_allclose(plate.position, [-10, 12, 22], atol=1e-9)
    np.testing.assert_allclose(plate.rotation, [0, 0, 0])
    holes = backplate_fastener_positions(resolver, config)
    np.testing.assert_allclose(holes, [[0, 12, 22], [-20, 12, 22]], atol=1e-9)


def test_foot_plate_polygons(featured):
    config, resolver = featured
    (polygon,) = foot_plate_polygons(resolver, config)
    np.testing.assert_allclose(polygon, [[-10, -11], [10, -11], [30, 73]], atol=1e-9)


def test_led_holes(featured):
    config, resolver = featured
    holes = led_hole_positions(resolver, config)
    np.testing.assert_allclose(holes, [[-10, 10, 7.5], [-10, 15, 7.5], [-10, 20, 7.5]])


def test_led_channel(featured):
    config, resolver = featured
    channel = led_channel_polygon(resolver, config)
    assert channel.shape == (8, 2)
    np.testing.assert_allclose(channel[0], [-9, -10])
    np.testing.assert_allclose(channel[3], [-9, 50])
    np.testing.assert_allclose(channel[-1], [1, -10])


def test_led_housings_are_clipped_to_the_channel(featured):
    config, resolver = featured
    outlines = led_housing_outlines(resolver, config)
    assert len(outlines) == 3
    for outline, y in zip(outlines, (10, 15, 20)):
        np.testing.assert_allclose(outline.min(axis=0), [-9, y - 2.5])
        np.testing.assert_allclose(outline.max(axis=0), [1, y + 2.5])
