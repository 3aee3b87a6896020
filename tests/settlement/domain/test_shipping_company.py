"""Tests for ShippingCompany credentials and city allow-list."""

import json

from settlement.directory.shipping_company import ShippingCompany


def _company(**overrides):
    defaults = {"name": "Fast Couriers", "api_endpoint": "https://c.example.com", "api_token": "tok"}
    defaults.update(overrides)
    return ShippingCompany(**defaults)


class TestCredentials:
    def test_endpoint_and_token_means_api(self):
        assert _company().has_api_credentials is True

    def test_missing_token_means_local_only(self):
        assert _company(api_token=None).has_api_credentials is False

    def test_missing_endpoint_means_local_only(self):
        assert _company(api_endpoint=None).has_api_credentials is False


class TestCities:
    def test_no_allow_list_serves_everywhere(self):
        assert _company().serves_city("Nablus") is True

    def test_allow_list_is_case_insensitive(self):
        company = _company(shipping_cities=json.dumps(["Ramallah", "Nablus "]))
        assert company.serves_city("ramallah") is True
        assert company.serves_city("Nablus") is True

    def test_city_outside_allow_list(self):
        company = _company(shipping_cities=json.dumps(["Ramallah"]))
        assert company.serves_city("Hebron") is False

    def test_unknown_city_is_not_blocked(self):
        company = _company(shipping_cities=json.dumps(["Ramallah"]))
        assert company.serves_city(None) is True
