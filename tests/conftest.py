"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import json

import pytest


@pytest.fixture
def gpo_list_json() -> str:
    """Sample Get-GPO -All output (ConvertTo-Json -InputObject @(...))."""
    return json.dumps(
        [
            {"Id": "31b2f340-016d-11d2-945f-00c04fb984f9", "DisplayName": "Default Domain Policy"},
            {
                "Id": "6ac1786c-016f-11d2-945f-00c04fb984f9",
                "DisplayName": "Default Domain Controllers Policy",
            },
            {"Id": "0f1e2d3c-4b5a-6978-8796-a5b4c3d2e1f0", "DisplayName": "Workstations: Firewall"},
        ]
    )


@pytest.fixture
def wmi_filter_json() -> str:
    """Sample Get-ADObject msWMI-Som output with two filters."""
    return json.dumps(
        [
            {
                "DistinguishedName": "CN={A1},CN=SOM,CN=WMIPolicy,CN=System,DC=corp,DC=example",
                "msWMI-Name": "Windows 11",
                "msWMI-ID": "{A1}",
                "msWMI-Author": "admin@corp.example",
                "msWMI-Parm1": "Client OS",
                "msWMI-Parm2": "1;3;10;58;WQL;root\\CIMv2;SELECT * FROM Win32_OperatingSystem;",
            },
            {
                "DistinguishedName": "CN={B2},CN=SOM,CN=WMIPolicy,CN=System,DC=corp,DC=example",
                "msWMI-Name": "Laptops",
                "msWMI-ID": "{B2}",
            },
        ]
    )


@pytest.fixture
def windows_acl_json() -> str:
    """Sample output of the Get-Acl script for a non-admin operator."""
    return json.dumps(
        {
            "Identities": ["CORP\\backup-svc", "CORP\\Domain Users", "CORP\\GPO Backup Operators"],
            "IsAdmin": False,
            "Entries": [
                {"Identity": "BUILTIN\\Administrators", "Rights": 2032127, "Type": "Allow"},
                {"Identity": "CORP\\GPO Backup Operators", "Rights": 197055, "Type": "Allow"},
                {"Identity": "BUILTIN\\Users", "Rights": 1179817, "Type": "Allow"},
            ],
        }
    )
