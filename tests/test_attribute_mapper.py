"""
Unit tests for upstream <-> public attribute mapping
"""

import unittest
import sys
import os

# Add backend to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'backend'))
sys.path.insert(0, os.path.dirname(__file__))

from services import attribute_mapper as mapper
from fixtures import package, title, vendor


class TestProviderMapping(unittest.TestCase):

    def test_provider_detail(self):
        attributes = mapper.provider_to_public(vendor())
        self.assertEqual(attributes["name"], "EBSCO")
        self.assertFalse(attributes["supportsCustomPackages"])
        self.assertEqual(attributes["providerToken"]["value"], "abc")
        self.assertEqual(attributes["proxy"], {"id": "<n>", "inherited": True})

    def test_search_projection_omits_token_and_proxy(self):
        attributes = mapper.provider_to_public(vendor(), detail=False)
        self.assertNotIn("providerToken", attributes)
        self.assertNotIn("proxy", attributes)

    def test_absent_token_stays_absent(self):
        attributes = mapper.provider_to_public(vendor(vendorToken=None))
        self.assertIsNone(attributes["providerToken"])

    def test_empty_token_value_reads_as_null(self):
        token = dict(vendor()["vendorToken"], value="")
        self.assertIsNone(mapper.provider_to_public(vendor(vendorToken=token))["providerToken"]["value"])

    def test_provider_update_payload(self):
        intent = mapper.provider_intent({"providerToken": {"value": "xyz", "prompt": "ignored"}, "name": "x"})
        self.assertEqual(intent, {"providerToken": {"value": "xyz"}})
        payload = mapper.provider_to_upstream(intent, vendor())
        self.assertEqual(payload, {"vendorToken": {"value": "xyz"}})


class TestPackageMapping(unittest.TestCase):

    def test_package_to_public(self):
        attributes = mapper.package_to_public(package())
        self.assertEqual(attributes["contentType"], "Aggregated Full Text")
        self.assertEqual(attributes["customCoverage"], {"beginCoverage": "2003-01-01", "endCoverage": None})
        self.assertEqual(attributes["providerId"], 19)
        self.assertTrue(attributes["allowKbToAddTitles"])
        self.assertIsNone(attributes["packageToken"])
        self.assertEqual(mapper.package_id(package()), "19-1234")

    def test_unknown_content_type(self):
        self.assertEqual(mapper.package_to_public(package(contentType="Hologram"))["contentType"], "Unknown")

    def test_hidden_by_system_reason(self):
        record = package(visibilityData={"isHidden": True, "reason": "Hidden by EP"})
        self.assertEqual(mapper.package_to_public(record)["visibilityData"],
                         {"isHidden": True, "reason": "Set by system"})

    def test_intent_drops_read_only_and_unknown_fields(self):
        intent = mapper.package_intent({
            "isSelected": True,
            "visibilityData": {"isHidden": True, "reason": "mine"},
            "titleCount": 4,
        })
        self.assertEqual(intent, {"isSelected": True, "visibilityData": {"isHidden": True}})

    def test_selected_package_payload_overlays_current(self):
        intent = mapper.package_intent({"customCoverage": {"endCoverage": "2010-12-31"}})
        payload = mapper.package_to_upstream(intent, package())
        self.assertTrue(payload["isSelected"])
        self.assertFalse(payload["isHidden"])
        self.assertEqual(payload["customCoverage"], {"beginCoverage": "2003-01-01", "endCoverage": "2010-12-31"})
        self.assertNotIn("packageName", payload)

    def test_deselected_package_payload_has_no_customization(self):
        payload = mapper.package_to_upstream({"isSelected": False}, package())
        self.assertEqual(payload, {"isSelected": False, "allowEbscoToAddTitles": True})

    def test_null_selection_keeps_package_selected(self):
        intent = mapper.package_intent({"isSelected": None, "visibilityData": {"isHidden": True}})
        payload = mapper.package_to_upstream(intent, package())
        self.assertIs(payload["isSelected"], True)
        self.assertTrue(payload["isHidden"])

    def test_custom_package_payload_maps_content_type_label(self):
        record = package(isCustom=True, contentType="EBook")
        payload = mapper.package_to_upstream({"name": "Renamed", "contentType": "E-Journal"}, record)
        self.assertEqual(payload["packageName"], "Renamed")
        self.assertEqual(payload["contentType"], "EJournal")


class TestTitleAndResourceMapping(unittest.TestCase):

    def test_absent_arrays_are_empty_lists(self):
        attributes = mapper.title_to_public(title())
        self.assertEqual(attributes["subjects"], [])
        self.assertEqual(attributes["contributors"], [])
        self.assertEqual(attributes["identifiers"], [{"id": "1234-5678", "type": "ISSN", "subtype": "Print"}])
        self.assertEqual(attributes["publicationType"], "Book")

    def test_resource_to_public(self):
        attributes = mapper.resource_to_public(title(), 123355, 2845506)
        self.assertEqual(attributes["packageId"], "123355-2845506")
        self.assertTrue(attributes["isPackageCustom"])
        self.assertEqual(attributes["customCoverages"],
                         [{"beginCoverage": "2001-01-01", "endCoverage": "2002-01-01"}])
        self.assertIsNone(attributes["customEmbargoPeriod"])
        self.assertEqual(mapper.resource_id(title(), 123355, 2845506), "123355-2845506-555")

    def test_resource_in_other_package_has_no_entry(self):
        self.assertIsNone(mapper.find_customer_resource(title(), 1, 2))

    def test_resource_intent_aliases(self):
        intent = mapper.resource_intent({
            "name": "Title",
            "publicationType": "Book Series",
            "packageId": "1-2",
            "customCoverageList": [{"beginCoverage": "2001-01-01", "extra": 1}],
            "unknownField": True,
        })
        self.assertEqual(intent, {
            "titleName": "Title",
            "pubType": "Book Series",
            "package_id": "1-2",
            "customCoverages": [{"beginCoverage": "2001-01-01"}],
        })

    def test_create_payload_maps_publication_label(self):
        payload = mapper.resource_create_to_upstream({"titleName": "T", "pubType": "Thesis & Dissertation"})
        self.assertEqual(payload["pubType"], "ThesisDissertation")
        self.assertEqual(payload["contributorsList"], [])

    def test_update_payload_for_custom_title(self):
        intent = mapper.resource_intent({"name": "New name", "customEmbargoPeriod": {"embargoUnit": "Months",
                                                                                    "embargoValue": 6}})
        payload = mapper.resource_update_to_upstream(intent, title(), 123355, 2845506)
        self.assertTrue(payload["isSelected"])
        self.assertEqual(payload["titleName"], "New name")
        self.assertEqual(payload["customEmbargoPeriod"], {"embargoUnit": "Months", "embargoValue": 6})
        self.assertEqual(payload["customCoverageList"],
                         [{"beginCoverage": "2001-01-01", "endCoverage": "2002-01-01"}])

    def test_null_selection_keeps_resource_selected(self):
        intent = mapper.resource_intent({"isSelected": None, "coverageStatement": "Since 2001"})
        payload = mapper.resource_update_to_upstream(intent, title(), 123355, 2845506)
        self.assertIs(payload["isSelected"], True)

    def test_scalar_coverages_stay_raw_in_intent(self):
        self.assertEqual(mapper.resource_intent({"customCoverages": 5}), {"customCoverages": 5})
        self.assertEqual(mapper.resource_intent({"customCoverages": [5]}), {"customCoverages": [5]})


class TestConfigurationMapping(unittest.TestCase):

    def test_api_key_is_masked(self):
        attributes = mapper.configuration_to_public(
            {"customer_id": "cust", "api_key": "secret", "base_url": "https://sandbox.ebsco.io"}
        )
        self.assertEqual(attributes["apiKey"], "*" * 40)
        self.assertNotIn("secret", str(attributes))


if __name__ == '__main__':
    unittest.main()
