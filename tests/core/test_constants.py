"""Test module for numerical constants."""

from stiefelax.core.constants import NumericalConstants


class TestNumericalConstants:
    """Test numerical constants."""

    def test_constant_values(self):
        assert NumericalConstants.MAX_CONDITION_NUMBER == 1e12
        assert NumericalConstants.QR_SIGN_SHIFT == 0.5

    def test_constant_types(self):
        assert isinstance(NumericalConstants.MAX_CONDITION_NUMBER, float)
        assert isinstance(NumericalConstants.QR_SIGN_SHIFT, float)
