"""Tests for field and method tags."""

import pytest

from stiefelax.manifolds.methods import (
    CayleyRetraction,
    DifferentiatedRetractionVectorTransport,
    Field,
    PadeRetraction,
    PolarInverseRetraction,
    PolarRetraction,
    ProjectionTransport,
    QRRetraction,
    RetractionMethod,
)


class TestField:
    def test_real_dimensions(self):
        assert Field.REAL.real_dimension == 1
        assert Field.COMPLEX.real_dimension == 2
        assert Field.QUATERNION.real_dimension == 4

    def test_str(self):
        assert str(Field.REAL) == "ℝ"
        assert str(Field.COMPLEX) == "ℂ"


class TestRetractionTags:
    def test_cayley_is_pade_of_order_one(self):
        cayley = CayleyRetraction()
        assert isinstance(cayley, PadeRetraction)
        assert isinstance(cayley, RetractionMethod)
        assert cayley.m == 1

    def test_cayley_rejects_other_orders(self):
        with pytest.raises(ValueError):
            CayleyRetraction(m=2)

    @pytest.mark.parametrize("m", [0, -1, 1.5, True])
    def test_pade_rejects_invalid_orders(self, m):
        with pytest.raises(ValueError):
            PadeRetraction(m)

    def test_tags_are_hashable_values(self):
        assert PadeRetraction(3) == PadeRetraction(3)
        assert len({PolarRetraction(), PolarRetraction(), QRRetraction()}) == 2


class TestTransportTags:
    @pytest.mark.parametrize("retraction", [CayleyRetraction(), PadeRetraction(1), PolarRetraction(), QRRetraction()])
    def test_supported_differentiated_retractions(self, retraction):
        method = DifferentiatedRetractionVectorTransport(retraction)
        assert method.retraction == retraction

    def test_higher_order_pade_has_no_differentiated_transport(self):
        with pytest.raises(ValueError):
            DifferentiatedRetractionVectorTransport(PadeRetraction(2))

    def test_inverse_retraction_is_not_a_retraction(self):
        with pytest.raises(ValueError):
            DifferentiatedRetractionVectorTransport(PolarInverseRetraction())

    def test_projection_transport(self):
        assert ProjectionTransport() == ProjectionTransport()
