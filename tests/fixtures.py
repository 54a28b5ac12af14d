"""Upstream KB API records shared by the tests"""


def vendor(**overrides):
    record = {
        "vendorId": 19,
        "vendorName": "EBSCO",
        "isCustomer": False,
        "packagesTotal": 600,
        "packagesSelected": 12,
        "vendorToken": {
            "factName": "[[galesiteid]]",
            "prompt": "/itweb/",
            "helpText": "<p>Token help</p>",
            "value": "abc",
        },
        "proxy": {"id": "<n>", "inherited": True},
    }
    record.update(overrides)
    return record


def package(**overrides):
    record = {
        "vendorId": 19,
        "packageId": 1234,
        "packageName": "Academic Search",
        "vendorName": "EBSCO",
        "contentType": "AggregatedFullText",
        "packageType": "Complete",
        "isCustom": False,
        "isSelected": True,
        "titleCount": 10,
        "selectedCount": 10,
        "allowEbscoToAddTitles": True,
        "customCoverage": {"beginCoverage": "2003-01-01", "endCoverage": ""},
        "visibilityData": {"isHidden": False, "reason": ""},
        "proxy": {"id": "<n>", "inherited": True},
        "packageToken": None,
    }
    record.update(overrides)
    return record


def title(vendor_id=123355, package_id=2845506, title_id=555, is_package_custom=True, **entry_overrides):
    entry = {
        "vendorId": vendor_id,
        "packageId": package_id,
        "vendorName": "Custom Provider",
        "packageName": "Custom Package",
        "isPackageCustom": is_package_custom,
        "isSelected": True,
        "isTokenNeeded": False,
        "url": "https://example.com/title",
        "visibilityData": {"isHidden": False, "reason": ""},
        "managedCoverageList": [],
        "customCoverageList": [{"beginCoverage": "2001-01-01", "endCoverage": "2002-01-01"}],
        "coverageStatement": None,
        "managedEmbargoPeriod": None,
        "customEmbargoPeriod": None,
    }
    entry.update(entry_overrides)
    return {
        "titleId": title_id,
        "titleName": "My Custom Title",
        "publisherName": "Self",
        "pubType": "Book",
        "isTitleCustom": is_package_custom,
        "isPeerReviewed": False,
        "edition": None,
        "description": None,
        "identifiersList": [{"id": "1234-5678", "type": 0, "subtype": 1}],
        "subjectsList": None,
        "contributorsList": None,
        "customerResourcesList": [entry],
    }

