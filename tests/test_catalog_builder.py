from collections import Counter

import pytest

from docversions.client.catalog_builder import CatalogBuilder
from docversions.models.settings import BuildSettings
from docversions.models.version import CurrentVersion, ReleaseVersion, SyntheticVersion
from docversions.utils.exceptions import NoStableReleaseError


def labels(options):
    return [option.label for option in options]


def test_switcher_scenario(builder, switcher_versions, current_release):
    result = builder.build_catalog(switcher_versions, current_release)

    assert result.highest_stable.raw == "2.1.1"
    assert list(result.latest) == ["2.1", "2.0", "1.9"]
    assert labels(result.latest_options) == ["v2.1.1", "v2.0.0", "v1.9.0"]
    assert all(option.group == "Latest" for option in result.latest_options)
    assert result.snapshots[1].label == "v2.1.x-snapshot"
    assert not result.backfilled
    assert result.clean


def test_full_history_keeps_registry_order(builder, switcher_versions, current_release):
    result = builder.build_catalog(switcher_versions, current_release)

    assert labels(result.history) == ["v2.0.0", "v2.1.0", "v2.1.1", "v1.9.0"]
    assert [option.group for option in result.history] == ["v2.0", "v2.1", "v2.1", "v1.9"]


def test_snapshot_options_lead_catalog(builder, switcher_versions, current_release):
    result = builder.build_catalog(switcher_versions, current_release)
    master, stable = result.options[:2]

    assert master.version == SyntheticVersion(version="snapshot")
    assert master.label == "master-snapshot"
    assert master.group == "Latest"
    assert master.docs_url == "https://code.angularjs.org/snapshot/docs"
    assert stable.version == SyntheticVersion(version="snapshot-stable")
    assert stable.group == "Latest"
    assert stable.docs_url == "https://code.angularjs.org/snapshot-stable/docs"
    assert not any(option.is_snapshot for option in result.options[2:])


def test_registry_noise_is_filtered(builder, registry_versions):
    current = CurrentVersion(version="1.5.0", is_snapshot=False)
    result = builder.build_catalog(registry_versions, current)

    assert result.blacklisted == ["1.3.4-build.3588"]
    assert result.dropped == ["1.0.0rc1"]
    assert not result.clean
    assert labels(result.history) == [
        "v1.0.0",
        "v1.0.1",
        "v1.0.2",
        "v1.2.0-rc.1",
        "v1.2.0",
        "v1.3.4",
        "v1.4.8",
        "v1.5.0-beta.1",
        "v1.5.0",
    ]
    assert labels(result.latest_options) == ["v1.5.0", "v1.4.8", "v1.3.4", "v1.2.0", "v1.0.2"]
    assert result.snapshots[1].label == "v1.5.x-snapshot"


def test_blacklisted_and_zero_major_never_listed(builder, registry_versions):
    current = CurrentVersion(version="1.5.0", is_snapshot=False)
    result = builder.build_catalog(registry_versions, current)
    listed = [option.version for option in result.options if not option.is_snapshot]

    assert all(version.raw != "1.3.4-build.3588" for version in listed)
    assert all(version.major > 0 for version in listed)


def test_custom_blacklist(registry_versions):
    builder = CatalogBuilder(BuildSettings(blacklist=["1.4.8", "1.3.4-build.3588"]))
    result = builder.build_catalog(registry_versions, CurrentVersion(version="1.5.0"))

    assert "v1.4.8" not in labels(result.options)
    assert "1.4" not in result.latest


def test_latest_is_highest_of_branch(builder, registry_versions):
    result = builder.build_catalog(registry_versions, CurrentVersion(version="1.5.0"))
    history = [option.version for option in result.history]

    for branch, latest in result.latest.items():
        members = [version for version in history if version.branch == branch]
        assert members
        assert all(latest >= version for version in members)
    assert set(result.latest) == {version.branch for version in history}


def test_latest_compares_prerelease_identifiers(builder):
    result = builder.build_catalog(
        ["1.2.0-rc.1", "1.2.0", "1.2.1-beta.2", "1.2.1-beta.10"],
        CurrentVersion(version="1.2.0"),
    )

    assert result.latest["1.2"].raw == "1.2.1-beta.10"
    assert result.highest_stable.raw == "1.2.0"


def test_catalog_is_idempotent(builder, registry_versions):
    current = CurrentVersion(version="1.5.0", is_snapshot=False)
    first = builder.build_catalog(registry_versions, current)
    second = builder.build_catalog(registry_versions, current)

    assert first.model_dump_json(by_alias=True) == second.model_dump_json(by_alias=True)


def test_current_version_backfilled_once(builder):
    raw_versions = ["2.0.0", "2.1.0"]
    result = builder.build_catalog(raw_versions, CurrentVersion(version="3.0.0"))

    history = labels(result.history)
    assert result.backfilled
    assert history.count("v3.0.0") == 1
    assert history[-1] == "v3.0.0"
    assert result.latest_options[0].label == "v3.0.0"
    assert result.snapshots[1].label == "v3.0.x-snapshot"
    assert raw_versions == ["2.0.0", "2.1.0"]


def test_listed_current_version_not_duplicated(builder, switcher_versions, current_release):
    result = builder.build_catalog(switcher_versions, current_release)

    assert labels(result.history).count("v2.1.1") == 1


def test_snapshot_build_not_backfilled(builder, switcher_versions, current_snapshot):
    result = builder.build_catalog(switcher_versions, current_snapshot)

    assert not result.backfilled
    assert len(result.history) == len(switcher_versions)


def branch_pairs(result):
    return Counter((option.version.version, option.group) for option in result.options[2:])


@pytest.mark.parametrize(
    "raw_versions, current",
    [
        (["1.2.0", "1.2.0", "1.3.0"], CurrentVersion(version="1.3.0")),
        (["1.2.0+a", "1.2.0+b", "1.3.0"], CurrentVersion(version="1.3.0")),
        (["2.0.0", "3.0.0"], CurrentVersion(version="v3.0.0")),
        (["v1.4.0", "1.4.0", "1.4.1"], CurrentVersion(version="1.4.1+sha.5114f85")),
    ],
)
def test_release_listed_once_per_group(builder, raw_versions, current):
    result = builder.build_catalog(raw_versions, current)

    assert all(count == 1 for count in branch_pairs(result).values())
    assert result.snapshots[0].label == "master-snapshot"
    assert result.snapshots[1].version == SyntheticVersion(version="snapshot-stable")
    assert not result.backfilled


def test_repeated_release_keeps_last_listing(builder):
    result = builder.build_catalog(
        ["1.2.0+a", "1.3.0", "1.2.0+b"], CurrentVersion(version="1.3.0")
    )

    assert labels(result.history) == ["v1.3.0", "v1.2.0+b"]
    assert result.duplicates == ["1.2.0+a"]
    assert labels(result.latest_options) == ["v1.3.0", "v1.2.0+b"]


def test_no_stable_release_raises(builder):
    with pytest.raises(NoStableReleaseError):
        builder.build_catalog(
            ["0.9.0", "0.10.6", "1.0.0-rc.1", "2.0.0-beta.1"],
            CurrentVersion(version="2.0.0-beta.2"),
        )


def test_zero_major_only_has_no_branches(builder):
    parsed, dropped, blacklisted, duplicates = builder._classify(["0.10.6", "0.9.0"])

    assert parsed == []
    assert builder.latest_per_branch(parsed) == {}


def test_only_zero_major_raises(builder):
    with pytest.raises(NoStableReleaseError, match="no stable release found"):
        builder.build_catalog(["0.9.0", "0.10.6"], CurrentVersion(version="0.10.6"))


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("1.0.0", "https://code.angularjs.org/1.0.0/docs-1.0.0"),
        ("1.0.1", "https://code.angularjs.org/1.0.1/docs-1.0.1"),
        ("1.0.2", "https://code.angularjs.org/1.0.2/docs"),
        ("1.1.0", "https://code.angularjs.org/1.1.0/docs"),
        ("2.0.1", "https://code.angularjs.org/2.0.1/docs"),
    ],
)
def test_docs_url_legacy_folder(builder, raw, expected):
    assert builder.docs_url(ReleaseVersion.parse(raw)) == expected


def test_docs_url_custom_host():
    builder = CatalogBuilder(BuildSettings(docs_host="docs.example.org/"))

    assert builder.docs_url(ReleaseVersion.parse("3.2.1")) == "https://docs.example.org/3.2.1/docs"


def test_make_option_defaults(builder):
    option = builder.make_option(ReleaseVersion.parse("1.4.8"))

    assert option.label == "v1.4.8"
    assert option.group == "v1.4"
    assert option.docs_url == "https://code.angularjs.org/1.4.8/docs"


def test_make_option_overrides(builder):
    option = builder.make_option(ReleaseVersion.parse("1.4.8"), "Latest", "custom")

    assert option.label == "custom"
    assert option.group == "Latest"


def test_stable_snapshot_label_replaces_last_character():
    assert CatalogBuilder.stable_snapshot_label(ReleaseVersion.parse("1.4.8")) == "v1.4.x-snapshot"


def test_records(builder, switcher_versions):
    current = CurrentVersion.model_validate(
        {"version": "2.1.1", "isSnapshot": False, "codeName": "tidal-wave"}
    )
    result = builder.build_catalog(switcher_versions, current)
    current_record, all_record = builder.records(result)

    assert current_record.id == "current-version-data"
    assert current_record.service_name == "CURRENT_NG_VERSION"
    assert current_record.output_path == "js/current-version-data.js"
    assert current_record.service_value == {
        "version": "2.1.1",
        "isSnapshot": False,
        "codeName": "tidal-wave",
    }

    assert all_record.id == "allversions-data"
    assert all_record.service_name == "ALL_NG_VERSIONS"
    assert all_record.ng_module_name == "allVersionsData"
    assert len(all_record.service_value) == len(result.options)
    assert all_record.service_value[0] == {
        "version": {"version": "snapshot"},
        "label": "master-snapshot",
        "group": "Latest",
        "docsUrl": "https://code.angularjs.org/snapshot/docs",
    }
    assert all_record.service_value[2]["version"]["raw"] == "2.1.1"
    assert all_record.service_value[2]["version"]["version"] == "2.1.1"
