# tests/test_noisemap.py

"""
Tests for the noise map algebra: chunk addressing, scaling, combination
normalization, size propagation and identities.
"""

import numpy as np
import pytest

from worldgen import (
    FieldFactory, NoiseMap, NoiseMapCombination, PerlinNoise, ScaledNoiseMap,
    Seed, Size, Step, combine, scale,
)


class TestNoiseMap:
    def test_chunk_shape_is_height_by_width(self, perlin_map):
        assert perlin_map("a", size=(16, 12)).generate().shape == (12, 16)

    def test_deterministic(self, perlin_map):
        nm = perlin_map("determinism")
        np.testing.assert_array_equal(nm.generate_chunk(3, -2), nm.generate_chunk(3, -2))

    def test_same_parameters_give_same_values(self, perlin_map):
        np.testing.assert_array_equal(perlin_map("same").generate(), perlin_map("same").generate())

    def test_chunks_tile_the_plane(self, perlin_map):
        nm = perlin_map("tiling", size=(4, 3))
        wide = nm.generate_sized_chunk(Size.of(8, 6), 0, 0)
        np.testing.assert_array_equal(nm.generate_chunk(1, 0), wide[0:3, 4:8])
        np.testing.assert_array_equal(nm.generate_chunk(0, 1), wide[3:6, 0:4])
        np.testing.assert_array_equal(nm.generate_chunk(1, 1), wide[3:6, 4:8])

    def test_cell_coordinates(self, coordinate_map):
        nm = coordinate_map((3, 2))
        np.testing.assert_array_equal(nm.generate_chunk(2, 5), [[6.0, 7.0, 8.0], [6.0, 7.0, 8.0]])
        np.testing.assert_array_equal(nm.generate_chunk(-1, 0), [[-3.0, -2.0, -1.0], [-3.0, -2.0, -1.0]])

    def test_range(self, perlin_map):
        values = perlin_map("range", size=(32, 32), step=(0.3, 0.3)).generate_chunk(-1, 4)
        assert values.min() >= -1.0
        assert values.max() <= 1.0

    def test_zero_step_is_flat(self, factory, perlin):
        values = NoiseMap(perlin, seed=4, size=(5, 5), factory=factory).generate()
        assert np.all(values == values[0, 0])

    @pytest.mark.parametrize("size, shape", [((0, 0), (0, 0)), ((4, 0), (0, 4)), ((-3, 2), (2, 0))])
    def test_degenerate_size_gives_empty_grid(self, factory, perlin, size, shape):
        nm = NoiseMap(perlin, seed=1, step=(0.1, 0.1), size=size, factory=factory)
        assert nm.generate().shape == shape

    def test_setters_return_new_values_with_same_identity(self, perlin_map):
        nm = perlin_map("original")
        reseeded = nm.with_seed("other")
        assert reseeded is not nm
        assert reseeded.identity == nm.identity
        assert nm.seed == Seed.of("original")
        assert reseeded.seed == Seed.of("other")

    def test_set_dispatches_on_property(self, factory, perlin):
        nm = (NoiseMap(perlin, factory=factory)
              .set(Seed.of("Hello?"))
              .set(Step.of(0.005, 0.005))
              .set(Size.of(80, 50)))
        assert nm.seed == Seed.of("Hello?")
        assert nm.step == Step.of(0.005, 0.005)
        assert nm.size == Size.of(80, 50)

    def test_set_rejects_unknown_properties(self, perlin_map):
        with pytest.raises(TypeError):
            perlin_map("x").set(3)

    def test_integer_seed_is_verbatim(self, perlin_map):
        assert perlin_map("x").with_seed(77).seed.value == 77

    def test_identities_are_unique_and_increasing(self, factory, perlin):
        first = NoiseMap(perlin, factory=factory)
        second = NoiseMap(perlin, factory=factory)
        assert second.identity > first.identity

    def test_factory_builds_maps(self, factory, perlin):
        nm = factory.noise_map(perlin, seed=1, step=(0.1, 0.1), size=(2, 2))
        assert nm.factory is factory
        assert nm.generate().shape == (2, 2)


class TestScaledNoiseMap:
    def test_scale_linearity(self, perlin_map):
        nm = perlin_map("linear")
        np.testing.assert_array_equal((nm * 3).generate_chunk(2, 1), nm.generate_chunk(2, 1) * 3)

    def test_left_and_right_multiplication(self, perlin_map):
        nm = perlin_map("sides")
        np.testing.assert_array_equal((2 * nm).generate(), (nm * 2).generate())

    def test_has_its_own_identity(self, perlin_map):
        nm = perlin_map("own")
        assert (nm * 2).identity != nm.identity

    def test_delegates_properties(self, perlin_map):
        scaled = perlin_map("delegate", size=(4, 4)) * 5
        resized = scaled.with_size(6, 2)
        assert resized.size == Size.of(6, 2)
        assert resized.identity == scaled.identity
        assert resized.inner.size == Size.of(6, 2)
        assert scaled.size == Size.of(4, 4)

    def test_nested_scaling_multiplies_weight(self, perlin_map):
        nm = perlin_map("nested")
        twice = (nm * 2) * 3
        assert twice.weight == 6
        np.testing.assert_allclose(twice.generate(), nm.generate() * 6)

    @pytest.mark.parametrize("factor", [1.5, "2", True])
    def test_only_integer_factors(self, perlin_map, factor):
        with pytest.raises(TypeError):
            perlin_map("x") * factor
        with pytest.raises(TypeError):
            scale(perlin_map("x"), factor)

    def test_numpy_integers_are_accepted(self, perlin_map):
        assert scale(perlin_map("x"), np.int64(4)).factor == 4

    @pytest.mark.parametrize("factor", [0, -1, -3])
    def test_only_positive_factors(self, perlin_map, factor):
        with pytest.raises(ValueError):
            perlin_map("x") * factor
        with pytest.raises(ValueError):
            scale(perlin_map("x"), factor)


class TestNoiseMapCombination:
    def test_sum_normalization(self, perlin_map):
        a, b = perlin_map("a"), perlin_map("b")
        combined = a + b
        assert combined.total_scale == 2
        np.testing.assert_allclose(combined.generate_chunk(1, 2), (a.generate_chunk(1, 2) + b.generate_chunk(1, 2)) / 2)

    def test_scaled_operand_contributes_its_scale(self, perlin_map):
        a, b = perlin_map("a"), perlin_map("b")
        combined = a + b * 3
        assert combined.total_scale == 4
        np.testing.assert_allclose(combined.generate(), (a.generate() + b.generate() * 3) / 4)

    def test_scaled_plus_scaled(self, perlin_map):
        a, b = perlin_map("a"), perlin_map("b")
        assert (a * 2 + b * 5).total_scale == 7

    def test_associativity_of_total_scale(self, perlin_map):
        a, b, c = perlin_map("a"), perlin_map("b"), perlin_map("c")
        left = (a + b * 3) + c
        right = a + (b * 3 + c)
        assert left.total_scale == right.total_scale == 5
        np.testing.assert_allclose(left.generate_chunk(0, 1), right.generate_chunk(0, 1))
        np.testing.assert_allclose(
            left.generate_chunk(0, 1),
            (a.generate_chunk(0, 1) + b.generate_chunk(0, 1) * 3 + c.generate_chunk(0, 1)) / 5
        )

    def test_combination_plus_combination(self, perlin_map):
        a, b, c, d = (perlin_map(key) for key in "abcd")
        combined = (a + b) + (c * 3 + d)
        assert combined.total_scale == 6
        expected = (a.generate() + b.generate() + c.generate() * 3 + d.generate()) / 6
        np.testing.assert_allclose(combined.generate(), expected)

    @pytest.mark.parametrize("build", [
        lambda a, b: (a, b),
        lambda a, b: (a, b * 2),
        lambda a, b: (a * 3, b * 2),
        lambda a, b: (a + b, b * 2),
        lambda a, b: (a + b, a * 4 + b),
        lambda a, b: (a * 2 + b, a),
    ])
    def test_addition_is_commutative(self, perlin_map, build):
        lhs, rhs = build(perlin_map("a"), perlin_map("b"))
        forward, backward = lhs + rhs, rhs + lhs
        assert forward.total_scale == backward.total_scale
        assert forward.identity != backward.identity
        np.testing.assert_allclose(forward.generate(), backward.generate())

    def test_normalized_output_stays_in_range(self, perlin_map):
        combined = perlin_map("a", step=(0.4, 0.4)) * 2 + perlin_map("b") + perlin_map("c") * 5
        values = combined.generate_chunk(3, 3)
        assert values.min() >= -1.0
        assert values.max() <= 1.0

    def test_size_propagation(self, perlin_map):
        small, big = perlin_map("s", size=(5, 5)), perlin_map("b", size=(10, 10))
        for combined in (small + big, big + small, small * 2 + big, small + (big + small)):
            assert combined.size == Size.of(10, 10)
            assert combined.generate_chunk(0, 0).shape == (10, 10)

    def test_size_set_after_combination_reaches_every_leaf(self, perlin_map):
        combined = (perlin_map("a") + perlin_map("b") * 2).with_size(7, 3)
        assert combined.left.size == Size.of(7, 3)
        assert combined.right.inner.size == Size.of(7, 3)
        assert combined.generate().shape == (3, 7)

    def test_seed_set_after_combination_reaches_every_leaf(self, perlin_map):
        combined = (perlin_map("a") + perlin_map("b")).with_seed(5)
        assert combined.left.seed.value == 5
        assert combined.right.seed.value == 5

    def test_nested_combination_is_not_renormalized(self, perlin_map):
        a, b, c = perlin_map("a"), perlin_map("b"), perlin_map("c")
        inner = a + b
        outer = inner + c
        assert isinstance(outer.left, NoiseMapCombination)
        assert outer.left.outer is False
        assert outer.left.identity == inner.identity
        # The standalone value is still a normalizing, outer combination.
        assert inner.outer is True
        np.testing.assert_allclose(inner.generate(), (a.generate() + b.generate()) / 2)

    def test_scaled_combination_contributes_its_factor(self, perlin_map):
        a, b, c = perlin_map("a"), perlin_map("b"), perlin_map("c")
        scaled = (a + b) * 2
        assert isinstance(scaled, ScaledNoiseMap)
        combined = scaled + c
        assert combined.total_scale == 3
        np.testing.assert_allclose(combined.generate(), ((a.generate() + b.generate()) + c.generate()) / 3)

    def test_combine_function_matches_operator(self, perlin_map):
        a, b = perlin_map("a"), perlin_map("b")
        np.testing.assert_array_equal(combine(a, b).generate(), (a + b).generate())

    def test_new_identity_per_combination(self, perlin_map):
        a, b = perlin_map("a"), perlin_map("b")
        identities = {a.identity, b.identity, (a + b).identity, (a + b).identity}
        assert len(identities) == 4

    def test_mixed_factories_are_rejected(self, perlin_map):
        stranger = NoiseMap(PerlinNoise(), seed=1, factory=FieldFactory())
        with pytest.raises(ValueError):
            perlin_map("a") + stranger

    def test_adding_non_fields_fails(self, perlin_map):
        with pytest.raises(TypeError):
            perlin_map("a") + 1.0


class TestParameters:
    def test_setters_change_parameters_but_not_identity(self, perlin_map):
        template = perlin_map("template")
        variant = template.with_seed("variant")
        assert variant.identity == template.identity
        assert variant.parameters() != template.parameters()

    def test_equal_configuration_gives_equal_parameters(self, perlin_map):
        template = perlin_map("template")
        assert template.with_seed(5).parameters() == template.with_seed(5).parameters()

    def test_scaled_and_combined_parameters_follow_their_leaves(self, perlin_map):
        a, b = perlin_map("a"), perlin_map("b")
        combined = a + b * 2
        assert combined.parameters() == combined.with_size(16, 12).parameters()
        assert combined.parameters() != combined.with_seed(9).parameters()
        assert (a * 2).parameters() != (a * 3).parameters()
