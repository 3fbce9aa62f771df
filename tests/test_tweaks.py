"""Tests for tweak tree resolution."""

import numpy as np
import pytest

from keycase.config.schema import case_tweaks
from keycase.errors import UnknownTweak
from keycase.layout.compass import Corner
from keycase.layout.placement import PlacementResolver
from keycase.layout.tweaks import TweakGroup, TweakLeaf, TweakResolver, hull_windows


@pytest.fixture
def tweaks(resolver, config):
    return TweakResolver(resolver, config.tweaks)


@pytest.mark.parametrize("count,chunk_size,expected", [
    (3, None, ((0, 1, 2),)),
    (3, 2, ((0, 1), (1, 2))),
    (3, 3, ((0, 1, 2),)),
    (2, 5, ((0, 1),)),
    (4, 3, ((0, 1, 2), (1, 2, 3))),
    (0, 2, ()),
])
def test_hull_windows(count, chunk_size, expected):
    assert hull_windows(count, chunk_size) == expected


def test_chunked_group_gives_two_hulls(tweaks):
    resolved = tweaks.resolve_tweak("bridge")
    requests = resolved.hull_requests()
    assert len(requests) == 2
    # [home, SSE, 0, 3] has four points; the others one each.
    assert [len(points) for points in resolved.groups[0].point_lists] == [4, 1, 1]
    assert requests[0].shape == (5, 3)
    assert requests[1].shape == (2, 3)


def test_leaf_points_follow_segments(tweaks, resolver):
    points = tweaks.leaf_points(TweakLeaf("home", Corner.SSE, 0, 3))
    expected = [resolver.point("home", Corner.SSE, segment) for segment in range(4)]
    np.testing.assert_allclose(points, expected)


def test_leaf_without_corner_is_the_anchor_point(tweaks, resolver):
    points = tweaks.leaf_points(TweakLeaf("above-home", None, 0, 4))
    np.testing.assert_allclose(points, [resolver.point("above-home")])


def test_bare_leaf_is_a_group_of_one(tweaks):
    resolved = tweaks.resolve_tweak("skirt")
    assert len(resolved.groups) == 1
    assert resolved.groups[0].windows == ((0,),)
    points = resolved.hull_requests()[0]
    assert points.shape == (5, 3)
    assert points[-1, 2] == 0.0


@pytest.mark.parametrize("flags,levels", [
    ({}, (0,)),
    ({"at-ground": True}, (0, 4)),
    ({"at-ground": True, "above-ground": False}, (4,)),
    ({"above-ground": False}, (0,)),
])
def test_implicit_segment_levels(tweaks, resolver, flags, levels):
    group = case_tweaks({"hull-around": [["home", "SSE"], ["top", "NNE", 1]], **flags})
    assert group.implicit_segments() == levels
    resolved = tweaks.resolve_node(group)
    implicit, explicit = resolved.point_lists
    np.testing.assert_allclose(
        implicit, [resolver.point("home", Corner.SSE, level) for level in levels]
    )
    # Written-out segments are not affected by the group.
    np.testing.assert_allclose(explicit, [resolver.point("top", Corner.NNE, 1)])


def test_nested_groups_flatten(tweaks):
    inner = TweakGroup(
        children=(TweakLeaf("top", Corner.NNW), TweakLeaf("far", Corner.ENE)), chunk_size=2
    )
    outer = TweakGroup(children=(TweakLeaf("home", Corner.SSE), inner))
    resolved = tweaks.resolve_node(outer)
    assert resolved.windows == ((0, 1),)
    assert [len(points) for points in resolved.point_lists] == [1, 2]


def test_highlight_is_carried(tweaks):
    group = TweakGroup(children=(TweakLeaf("home"),), highlight=True)
    assert tweaks.resolve_node(group).highlight
    assert not tweaks.resolve_tweak("bridge").highlight


def test_unknown_tweak(tweaks):
    assert tweaks.names() == ["bridge", "skirt"]
    with pytest.raises(UnknownTweak):
        tweaks.resolve_tweak("nothing")


def test_group_validation():
    with pytest.raises(ValueError):
        TweakGroup(children=())
    with pytest.raises(ValueError):
        TweakGroup(children=(TweakLeaf("home"),), chunk_size=1)


def test_null_corner_in_a_document(document, make_config):
    config = make_config(tweaks={**document["tweaks"], "peg": [["home", None, 0, 3]]})
    resolver = PlacementResolver.from_config(config)
    resolved = TweakResolver(resolver, config.tweaks).resolve_tweak("peg")
    np.testing.assert_allclose(resolved.hull_requests()[0], [resolver.point("home")])
