"""Canned data served and sent by the platform mock."""

from __future__ import annotations

import base64
import json
import os
import random
from collections.abc import Iterable, Mapping
from typing import Any

INVENTORY_TOPIC = "platform.inventory.events"
TEST_SYSTEM_ID = "TEST-0000"
NO_PKGS_SYSTEM_ID = "TEST-NO-PKGS"
DEFAULT_RBAC_PERMISSIONS = "patch:*:read"

_UPLOAD_HOST_ID = "00000000-0000-0000-0000-000000000100"
_UPLOAD_REQUEST_ID = "ingress-service-5f79d54bf-q5jh6/iDl0gmf6Qw-071711"

# (name, version-release, arch) of the packages installed on the mocked system
_PACKAGE_PARTS: tuple[tuple[str, str, str], ...] = (
    ("kernel-debug-devel", "2.6.32-220.el6", "i686"),
    ("bogl-debuginfo", "0.1.18-11.2.1.el5.1", "i386"),
    ("tetex-latex", "3.0-33.13.el5", "x86_64"),
    ("openssh-clients", "5.3p1-20.el6_0.3", "i686"),
    ("httpd-debuginfo", "2.2.3-43.el5", "i386"),
    ("openoffice.org-langpack-tn_ZA", "1:3.2.1-19.6.el6_0.5", "i686"),
    ("mod_nss-debuginfo", "1.0.8-8.el5_10", "i386"),
    ("java-1.5.0-ibm-demo", "1:1.5.0.16.9-1jpp.1.el5", "i386"),
    ("openoffice.org-calc", "1:3.2.1-19.6.el6_0.5", "i686"),
    ("rubygem-foreman_api", "0.1.11-6.el6sat", "noarch"),
    ("bluez-libs-debuginfo", "3.7-1.1", "i386"),
    ("java-1.6.0-sun-demo", "1:1.6.0.27-1jpp.2.el5", "x86_64"),
    ("thunderbird-debuginfo", "2.0.0.24-6.el5", "x86_64"),
    ("chkconfig-debuginfo", "1.3.30.2-2.el5", "i386"),
    ("PackageKit-device-rebind", "0.5.8-20.el6", "i686"),
    ("java-1.7.0-oracle-devel", "1:1.7.0.25-1jpp.1.el5_9", "i386"),
    ("xulrunner-debuginfo", "1.9.0.7-3.el5", "i386"),
    ("mysql-server", "5.1.66-2.el6_3", "i686"),
    ("iproute", "2.6.18-13.el5", "i386"),
    ("libbonobo", "2.24.2-5.el6", "i686"),
)

PACKAGES: tuple[str, ...] = tuple(
    f"{name}-{evr}.{arch}" for name, evr, arch in _PACKAGE_PARTS
)


def _dumps(obj: Any) -> str:
    return json.dumps(obj, separators=(",", ":"))


def make_system_profile(
    system_id: str, random_pkgs: bool = False, rng: random.Random | None = None
) -> dict[str, Any]:
    """Build a bare system profile.

    The system ``TEST-NO-PKGS`` has no packages; with *random_pkgs* a random
    leading part of the package list is installed, otherwise all of it.
    """
    if system_id == NO_PKGS_SYSTEM_ID:
        packages: list[str] = []
    elif random_pkgs:
        count = (rng or random.Random()).randrange(len(PACKAGES))
        packages = list(PACKAGES[:count])
    else:
        packages = list(PACKAGES)

    return {
        "arch": "i686",
        "installed_packages": packages,
        "yum_repos": [{"id": "repo1", "name": "Debug packages", "enabled": True}],
        "dnf_modules": [{"name": "firefox", "stream": "60"}],
    }


def _yum_update(package: str, repository: str, erratum: str | None = None) -> dict[str, str]:
    update = {
        "package": package,
        "repository": repository,
        "basearch": "x86_64",
        "releasever": "8",
    }
    if erratum is not None:
        update["erratum"] = erratum
    return update


def _yum_updates() -> dict[str, Any]:
    baseos = "rhel-8-for-x86_64-baseos-rpms"
    ubi = "ubi-8-baseos"
    bash_new = "bash-0:4.4.20-3.el8.x86_64"
    curl_new = "curl-0:7.61.1-22.el8.x86_64"
    return {
        "releasever": "8",
        "basearch": "x86_64",
        "update_list": {
            "bash-0:4.4.20-1.el8_4.x86_64": {
                "available_updates": [
                    _yum_update(bash_new, baseos, "RHBA-2022:1993"),
                    _yum_update(bash_new, ubi, "RHBA-2022:1993"),
                    _yum_update("bash-0:4.4.23-1.fc28.x86_64", "local"),
                ]
            },
            "curl-0:7.61.1-18.el8_4.2.x86_64": {
                "available_updates": [
                    _yum_update(curl_new, baseos, "RHSA-2021:4511"),
                    _yum_update(curl_new, ubi, "RHSA-2021:4511"),
                ]
            },
        },
        "metadata_time": "2022-05-30T14:00:25Z",
    }


def upload_event(profile: Mapping[str, Any]) -> str:
    """Return the JSON inventory event announcing an upload of *profile*."""
    tags = [
        {"key": "env", "value": "prod"},
        {"namespace": "satellite", "key": "organization", "value": "rh"},
    ]
    host = {
        "id": _UPLOAD_HOST_ID,
        "account": TEST_SYSTEM_ID,
        "reporter": "puptoo",
        "tags": tags,
        "system_profile": dict(profile),
    }
    metadata = {
        "request_id": _UPLOAD_REQUEST_ID,
        "custom_metadata": {"yum_updates": _yum_updates()},
    }
    return _dumps({"type": "created", "host": host, "platform_metadata": metadata})


def mock_identity() -> str:
    """Return a base64 encoded identity of a user of account ``0``."""
    identity = {"account_number": "0", "type": "User"}
    return base64.b64encode(_dumps(identity).encode()).decode("ascii")


def delete_event() -> str:
    """Return the JSON inventory event deleting the test system."""
    event = {"id": TEST_SYSTEM_ID, "type": "delete", "b64_identity": mock_identity()}
    return json.dumps(event, separators=(",", ":"), sort_keys=True)


def rbac_access(permission: str | None = None) -> dict[str, Any]:
    """Return the access list granting *permission*.

    Without a permission the ``RBAC_PERMISSIONS`` environment variable is
    used, defaulting to ``patch:*:read``.
    """
    if permission is None:
        permission = os.environ.get("RBAC_PERMISSIONS", DEFAULT_RBAC_PERMISSIONS)
    return {"data": [{"permission": permission}]}


def _vmaas_update(erratum: str, package: str) -> dict[str, str]:
    return {
        "basearch": "i686",
        "erratum": erratum,
        "package": package,
        "releasever": "ser1",
        "repository": "repo1",
    }


def vmaas_updates() -> dict[str, Any]:
    """Return the updates available for the mocked system."""
    firefox = [
        _vmaas_update("RH-1", "firefox-0:77.0.1-1.fc31.x86_64"),
        _vmaas_update("RH-2", "firefox-1:76.0.1-1.fc31.x86_64"),
    ]
    kernel = [_vmaas_update("RH-100", "kernel-0:5.10.13-200.fc31.x86_64")]
    return {
        "basearch": "i686",
        "modules_list": [],
        "releasever": "ser1",
        "repository_list": ["repo1"],
        "update_list": {
            "firefox-0:76.0.1-1.fc31.x86_64": {"available_updates": firefox},
            "kernel-0:5.6.13-200.fc31.x86_64": {"available_updates": kernel},
        },
    }


def vmaas_patches() -> dict[str, Any]:
    """Return the names of the errata applicable to the mocked system."""
    return {"errata_list": ["RH-1", "RH-2", "RH-100"]}


def _erratum(
    number: int,
    kind: str,
    timestamp: str,
    packages: Iterable[str],
    cves: Iterable[str] = (),
    reboot: bool = False,
    release_versions: Iterable[str] | None = None,
) -> dict[str, Any]:
    prefix = f"adv-{number}"
    erratum: dict[str, Any] = {
        "bugzilla_list": [],
        "cve_list": list(cves),
        "description": f"{prefix}-des",
        "issued": timestamp,
        "package_list": list(packages),
        "reference_list": [],
    }
    if release_versions is not None:
        erratum["release_versions"] = list(release_versions)
    erratum.update(
        requires_reboot=reboot,
        solution=f"{prefix}-sol",
        summary=f"{prefix}-sum",
        synopsis=f"{prefix}-syn",
        type=kind,
        updated=timestamp,
        url=f"url{number}",
    )
    return erratum


def vmaas_errata() -> dict[str, Any]:
    """Return the metadata of the mocked errata."""
    old = "2016-09-22T12:00:00+04:00"
    new = "2020-01-02T15:04:05+07:00"
    epel = {
        "description": "epel-des",
        "issued": old,
        "reference_list": [],
        "requires_reboot": False,
        "summary": "epel-sum",
        "synopsis": "epel-syn",
        "type": "bugfix",
        "updated": old,
        "solution": "",
        "url": "",
    }
    errata = {
        "RH-1": _erratum(
            1, "enhancement", old, ["firefox-0:77.0.1-1.fc31.x86_64"],
            release_versions=["7.0", "7Server"],
        ),
        "RH-100": _erratum(
            100, "security", new, ["kernel-5.10.13-200.fc31.x86_64"],
            cves=["CVE-1001", "CVE-1002"], reboot=True,
        ),
        "RH-2": _erratum(2, "bugfix", old, ["firefox-1:76.0.1-1.fc31.x86_64"]),
        "EPEL-1234": epel,
    }
    return {"errata_list": errata, "page": 0, "page_size": 10, "pages": 1}


def vmaas_pkglist() -> dict[str, Any]:
    """Return the list of known packages with their summaries."""
    texts = {
        "firefox": ("Mozilla Firefox Web browser", "Mozilla Firefox is an open-source web browser..."),
        "kernel": ("The Linux kernel", "The kernel meta package"),
    }
    nevras = (
        ("firefox", "firefox-76.0.1-1.fc31.x86_64"),
        ("kernel", "kernel-5.6.13-200.fc31.x86_64"),
        ("firefox", "firefox-0:77.0.1-1.fc31.x86_64"),
        ("kernel", "kernel-5.7.13-200.fc31.x86_64"),
        (None, "firefox-0:77.0.1-1.fc31.src"),
        (None, "kernel-5.7.13-200.fc31.src"),
    )
    package_list = []
    for name, nevra in nevras:
        summary, description = texts[name] if name else (None, None)
        package_list.append({"nevra": nevra, "summary": summary, "description": description})
    return {
        "page": 0,
        "page_size": 3,
        "pages": 1,
        "package_list": package_list,
        "last_change": "2021-04-09T04:52:06.999732+00:00",
    }


def vmaas_repos() -> dict[str, Any]:
    """Return the list of known repositories."""
    repos: dict[str, list[Any]] = {f"repo{n}": [] for n in range(1, 4)}
    return {"page": 0, "page_size": 3, "pages": 1, "repository_list": repos}