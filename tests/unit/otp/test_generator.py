"""Tests for one-time code generation."""

import pytest

from medvault.core.modules.otp import generator
from medvault.core.modules.otp.generator import generate_otp_code
from medvault.utils import is_otp_code


class TestGenerateOtpCode:
    def test_code_is_six_digits(self):
        for _ in range(200):
            code = generate_otp_code()
            assert is_otp_code(code)

    def test_small_values_are_zero_padded(self, monkeypatch):
        monkeypatch.setattr(generator.secrets, "randbelow", lambda _: 42)
        assert generate_otp_code() == "000042"

    def test_excluded_codes_are_redrawn(self, monkeypatch):
        draws = iter([7, 7, 8])
        monkeypatch.setattr(generator.secrets, "randbelow", lambda _: next(draws))
        assert generate_otp_code(exclude={"000007"}) == "000008"

    def test_uses_full_code_space(self, monkeypatch):
        seen = []
        monkeypatch.setattr(generator.secrets, "randbelow", lambda bound: seen.append(bound) or bound - 1)
        assert generate_otp_code() == "999999"
        assert seen == [1_000_000]

    def test_exhausted_code_space_raises(self):
        class EverythingTaken:
            def __len__(self):
                return 1_000_000

            def __contains__(self, item):
                return True

            def __iter__(self):
                return iter(())

        with pytest.raises(ValueError, match="No free one-time code"):
            generate_otp_code(exclude=EverythingTaken())


class TestIsOtpCode:
    def test_accepts_six_digits(self):
        assert is_otp_code("482913")
        assert is_otp_code("000000")

    def test_rejects_other_shapes(self):
        assert not is_otp_code("48291")
        assert not is_otp_code("4829130")
        assert not is_otp_code("48a913")
        assert not is_otp_code("")
        assert not is_otp_code("４８２９１３")  # full-width digits
