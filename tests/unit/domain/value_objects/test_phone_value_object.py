"""Tests for the Phone value object."""

import pytest

from src.domain.value_objects.phone import Phone


class TestPhone:
    def test_strips_non_digits(self):
        phone = Phone(country_code="+55", number="(11) 98765-4321")
        assert phone.country_code == "55"
        assert phone.number == "11987654321"

    def test_subject_and_e164(self):
        phone = Phone(country_code="1", number="4155550100")
        assert phone.subject == "14155550100"
        assert phone.e164 == "+14155550100"
        assert str(phone) == "+14155550100"

    @pytest.mark.parametrize(
        "country_code,number",
        [("", "4155550100"), ("1234", "4155550100"), ("1", "12"), ("1", "123456789012345")],
    )
    def test_rejects_invalid_parts(self, country_code, number):
        with pytest.raises(ValueError):
            Phone(country_code=country_code, number=number)

    def test_rejects_non_string_parts(self):
        with pytest.raises(TypeError):
            Phone(country_code=55, number="11987654321")

    def test_mask_for_logging_keeps_last_two_digits(self):
        masked = Phone(country_code="55", number="11987654321").mask_for_logging()
        assert masked == "+55*********21"
