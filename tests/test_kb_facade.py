"""
Unit tests for KBFacade: the fetch, validate, write pipeline
"""

import unittest
import sys
import os
from unittest.mock import Mock

# Add backend to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'backend'))
sys.path.insert(0, os.path.dirname(__file__))

from services.kb_facade import KBFacade
from services.outcomes import OutcomeStatus
from services.validation.query import ScalarFilter, StructuredFilter
from utils.errors import MalformedIdentifierError, UpstreamError, UpstreamNotFoundError
from fixtures import package, title, vendor


class FacadeTestCase(unittest.TestCase):

    def setUp(self):
        self.client = Mock()
        self.facade = KBFacade(self.client)


class TestProviders(FacadeTestCase):

    def test_search(self):
        self.client.search_providers.return_value = {"vendors": [vendor()], "totalResults": 1}
        outcome = self.facade.search_providers("ebsco")

        self.assertEqual(outcome.status, OutcomeStatus.OK)
        self.assertEqual(outcome.document["meta"], {"totalResults": 1})
        self.assertEqual(outcome.document["data"][0]["id"], "19")
        self.client.search_providers.assert_called_once_with("ebsco", page=1, sort="relevance")

    def test_invalid_sort_never_reaches_upstream(self):
        outcome = self.facade.search_providers("ebsco", sort="newest")
        self.assertEqual(outcome.http_status, 400)
        self.client.search_providers.assert_not_called()

    def test_get_missing_provider(self):
        self.client.get_provider.side_effect = UpstreamNotFoundError()
        self.assertEqual(self.facade.get_provider("19").http_status, 404)

    def test_clearing_token_reads_back_null(self):
        cleared = vendor(vendorToken=dict(vendor()["vendorToken"], value=""))
        self.client.get_provider.side_effect = [vendor(), cleared]

        outcome = self.facade.update_provider("19", {"providerToken": {"value": ""}})

        self.assertEqual(outcome.status, OutcomeStatus.OK)
        self.client.update_provider.assert_called_once_with("19", {"vendorToken": {"value": ""}})
        self.assertIsNone(outcome.document["data"]["attributes"]["providerToken"]["value"])

    def test_token_too_long(self):
        self.client.get_provider.return_value = vendor()
        outcome = self.facade.update_provider("19", {"providerToken": {"value": "x" * 501}})

        self.assertEqual(outcome.http_status, 422)
        self.assertEqual(outcome.errors()[0]["title"], "Invalid value")
        self.client.update_provider.assert_not_called()

    def test_token_on_provider_without_token(self):
        self.client.get_provider.return_value = vendor(vendorToken=None)
        outcome = self.facade.update_provider("19", {"providerToken": {"value": "abc"}})

        self.assertEqual(outcome.http_status, 400)
        self.assertEqual(outcome.errors()[0]["title"], "Provider does not allow token")

    def test_malformed_provider_id(self):
        with self.assertRaises(MalformedIdentifierError):
            self.facade.get_provider("19-1")
        self.client.get_provider.assert_not_called()


class TestPackages(FacadeTestCase):

    def test_get_package(self):
        self.client.get_package.return_value = package()
        outcome = self.facade.get_package("19-1234")

        self.assertEqual(outcome.document["data"]["id"], "19-1234")
        self.assertEqual(outcome.document["data"]["type"], "packages")
        self.client.get_package.assert_called_once_with("19", "1234")

    def test_malformed_package_id_short_circuits(self):
        with self.assertRaises(MalformedIdentifierError):
            self.facade.get_package("19")
        self.client.get_package.assert_not_called()

    def test_search_with_filters(self):
        self.client.search_packages.return_value = {"packagesList": [package()], "totalResults": 40}
        outcome = self.facade.search_packages(None, search_filter=StructuredFilter(selected="true", type="ebook"))

        self.assertEqual(outcome.document["meta"]["totalResults"], 40)
        self.client.search_packages.assert_called_once_with(
            None, page=1, sort="name", selected="true", content_type="ebook", custom=None
        )

    def test_scalar_filter_is_rejected(self):
        outcome = self.facade.search_packages("x", search_filter=ScalarFilter("true"))
        self.assertEqual(outcome.http_status, 400)
        self.assertEqual(outcome.errors()[0]["title"], "Invalid filter parameter")

    def test_provider_packages(self):
        self.client.search_provider_packages.return_value = {"packagesList": [], "totalResults": 0}
        outcome = self.facade.search_packages(None, provider_id="19")

        self.assertEqual(outcome.document["data"], [])
        self.client.search_provider_packages.assert_called_once_with("19", None, page=1, sort="name")

    def test_update_selected_package(self):
        self.client.get_package.return_value = package()
        outcome = self.facade.update_package("19-1234", {"visibilityData": {"isHidden": True}})

        self.assertEqual(outcome.http_status, 204)
        payload = self.client.update_package.call_args[0][2]
        self.assertTrue(payload["isHidden"])

    def test_customizing_deselected_package_is_rejected(self):
        self.client.get_package.return_value = package(isSelected=False)
        outcome = self.facade.update_package(
            "19-1234", {"customCoverage": {"beginCoverage": "2003-01-01"}}
        )

        self.assertEqual(outcome.http_status, 400)
        self.assertEqual(outcome.errors()[0]["source"]["pointer"], "/data/attributes/customCoverage/beginCoverage")
        self.client.update_package.assert_not_called()

    def test_update_missing_package_skips_validation(self):
        self.client.get_package.side_effect = UpstreamNotFoundError()
        outcome = self.facade.update_package("19-1234", {"isSelected": False, "visibilityData": {"isHidden": True}})
        self.assertEqual(outcome.http_status, 404)

    def test_null_selection_keeps_package_selected(self):
        self.client.get_package.return_value = package()
        outcome = self.facade.update_package(
            "19-1234", {"isSelected": None, "visibilityData": {"isHidden": True}}
        )

        self.assertEqual(outcome.http_status, 204)
        payload = self.client.update_package.call_args[0][2]
        self.assertIs(payload["isSelected"], True)
        self.assertTrue(payload["isHidden"])

    def test_non_boolean_selection_is_rejected(self):
        self.client.get_package.return_value = package()
        for value in ["false", 0, "yes"]:
            with self.subTest(value=value):
                outcome = self.facade.update_package("19-1234", {"isSelected": value})
                self.assertEqual(outcome.http_status, 422)
                self.assertEqual(outcome.errors()[0]["title"], "Invalid isSelected")
        self.client.update_package.assert_not_called()

    def test_non_string_content_type_is_rejected(self):
        self.client.get_package.return_value = package(isCustom=True)
        outcome = self.facade.update_package("19-1234", {"contentType": ["E-Book"]})

        self.assertEqual(outcome.http_status, 422)
        self.assertEqual(outcome.errors()[0]["title"], "Invalid contentType")
        self.client.update_package.assert_not_called()

    def test_upstream_failure_propagates(self):
        self.client.get_package.return_value = package()
        self.client.update_package.side_effect = UpstreamError("KB API error: 500", status_code=500)
        with self.assertRaises(UpstreamError):
            self.facade.update_package("19-1234", {"isSelected": True})

    def test_package_resources(self):
        self.client.list_package_resources.return_value = {
            "titles": [title(vendor_id=19, package_id=1234)], "totalResults": 1
        }
        outcome = self.facade.list_package_resources("19-1234")
        self.assertEqual(outcome.document["data"][0]["id"], "19-1234-555")


class TestResources(FacadeTestCase):

    def create_attributes(self, **overrides):
        attributes = {"name": "New Title", "publicationType": "Book", "packageId": "123355-2845506"}
        attributes.update(overrides)
        return attributes

    def test_create_custom_title(self):
        self.client.get_package.return_value = package(vendorId=123355, packageId=2845506, isCustom=True)
        self.client.list_package_resources.return_value = {"titles": [], "totalResults": 0}
        self.client.create_resource.return_value = "555"
        self.client.get_resource.return_value = title()

        outcome = self.facade.create_resource(self.create_attributes())

        self.assertEqual(outcome.status, OutcomeStatus.OK)
        self.assertEqual(outcome.document["data"]["id"], "123355-2845506-555")
        self.client.create_resource.assert_called_once()
        self.assertEqual(self.client.create_resource.call_args[0][:2], ("123355", "2845506"))

    def test_create_with_bare_package_id_uses_custom_provider(self):
        self.client.get_custom_provider_id.return_value = "123355"
        self.client.get_package.return_value = package(vendorId=123355, packageId=2845506, isCustom=True)
        self.client.list_package_resources.return_value = {"titles": []}
        self.client.create_resource.return_value = "555"
        self.client.get_resource.return_value = title()

        outcome = self.facade.create_resource(self.create_attributes(packageId="2845506"))

        self.assertEqual(outcome.status, OutcomeStatus.OK)
        self.client.get_package.assert_called_once_with("123355", "2845506")

    def test_create_in_managed_package(self):
        self.client.get_package.return_value = package()
        outcome = self.facade.create_resource(self.create_attributes(packageId="19-1234"))

        self.assertEqual(outcome.http_status, 400)
        self.assertEqual(outcome.errors()[0]["title"], "Custom Title can not be added to the provided package")
        self.client.create_resource.assert_not_called()

    def test_create_duplicate_title(self):
        self.client.get_package.return_value = package(vendorId=123355, packageId=2845506, isCustom=True)
        existing = title()
        existing["titleName"] = "new title"
        self.client.list_package_resources.return_value = {"titles": [existing]}

        outcome = self.facade.create_resource(self.create_attributes())

        self.assertEqual(outcome.http_status, 400)
        self.assertEqual(outcome.errors()[0]["title"], "Custom Title with the provided name already exists")

    def test_create_in_missing_package(self):
        self.client.get_package.side_effect = UpstreamNotFoundError()
        outcome = self.facade.create_resource(self.create_attributes())

        self.assertEqual(outcome.http_status, 422)
        self.assertEqual(outcome.errors()[0]["title"], "Invalid package_id")

    def test_field_failures_win_over_rules(self):
        self.client.get_package.return_value = package()
        outcome = self.facade.create_resource(self.create_attributes(name="x" * 401, packageId="19-1234"))

        self.assertEqual(outcome.http_status, 422)
        self.assertEqual([e["title"] for e in outcome.errors()], ["Invalid titleName"])

    def test_get_resource_not_in_package(self):
        self.client.get_resource.return_value = title()
        self.assertEqual(self.facade.get_resource("1-2-555").http_status, 404)

    def test_update_resource(self):
        self.client.get_resource.return_value = title()
        outcome = self.facade.update_resource("123355-2845506-555", {"coverageStatement": "Since 2001"})

        self.assertEqual(outcome.http_status, 200)
        payload = self.client.update_resource.call_args[0][3]
        self.assertEqual(payload["coverageStatement"], "Since 2001")

    def test_deselect_with_customization_is_rejected(self):
        self.client.get_resource.return_value = title()
        outcome = self.facade.update_resource(
            "123355-2845506-555", {"isSelected": False, "coverageStatement": "Since 2001"}
        )
        self.assertEqual(outcome.http_status, 400)
        self.client.update_resource.assert_not_called()

    def test_null_selection_does_not_deselect_custom_title(self):
        self.client.get_resource.return_value = title()
        outcome = self.facade.update_resource(
            "123355-2845506-555", {"isSelected": None, "coverageStatement": "Since 2001"}
        )

        self.assertEqual(outcome.http_status, 200)
        payload = self.client.update_resource.call_args[0][3]
        self.assertIs(payload["isSelected"], True)
        self.assertEqual(payload["coverageStatement"], "Since 2001")
        self.client.delete_resource.assert_not_called()

    def test_string_selection_is_rejected(self):
        self.client.get_resource.return_value = title()
        outcome = self.facade.update_resource("123355-2845506-555", {"isSelected": "false"})

        self.assertEqual(outcome.http_status, 422)
        self.assertEqual(outcome.errors()[0]["title"], "Invalid isSelected")
        self.client.update_resource.assert_not_called()

    def test_scalar_coverages_are_rejected(self):
        self.client.get_resource.return_value = title()
        for value in [5, True, "2001-01-01", {"beginCoverage": "2001-01-01"}]:
            with self.subTest(value=value):
                outcome = self.facade.update_resource("123355-2845506-555", {"customCoverages": value})
                self.assertEqual(outcome.http_status, 422)
                self.assertEqual(outcome.errors()[0]["title"], "Invalid customCoverages")
        self.client.update_resource.assert_not_called()

    def test_list_publication_type_is_rejected(self):
        self.client.get_package.return_value = package(vendorId=123355, packageId=2845506, isCustom=True)
        self.client.list_package_resources.return_value = {"titles": []}

        outcome = self.facade.create_resource(self.create_attributes(publicationType=["Book"]))

        self.assertEqual(outcome.http_status, 422)
        self.assertEqual(outcome.errors()[0]["title"], "Invalid pubType")
        self.client.create_resource.assert_not_called()

    def test_destroy_then_destroy_again(self):
        self.client.get_resource.side_effect = [title(), UpstreamNotFoundError()]

        first = self.facade.destroy_resource("123355-2845506-555")
        second = self.facade.destroy_resource("123355-2845506-555")

        self.assertEqual(first.http_status, 204)
        self.assertEqual(second.http_status, 404)
        self.client.delete_resource.assert_called_once_with("123355", "2845506", "555")

    def test_destroy_managed_title(self):
        self.client.get_resource.return_value = title(vendor_id=19, package_id=1234, is_package_custom=False)
        outcome = self.facade.destroy_resource("19-1234-555")

        self.assertEqual(outcome.http_status, 400)
        self.assertEqual(outcome.errors()[0]["title"], "Resource cannot be deleted")
        self.client.delete_resource.assert_not_called()


class TestTitles(FacadeTestCase):

    def test_search_and_get(self):
        self.client.search_titles.return_value = {"titles": [title()], "totalResults": 1}
        self.client.get_title.return_value = title()

        self.assertEqual(self.facade.search_titles("custom").document["data"][0]["type"], "titles")
        self.assertEqual(self.facade.get_title("555").document["data"]["id"], "555")


if __name__ == '__main__':
    unittest.main()
