# ABOUTME: Tests for the catalog: entry views, merge precedence, search and
# ABOUTME: conversion of registry entries into installable services
from mcpwire.catalog import (
    SOURCE_CURATED,
    SOURCE_REGISTRY,
    Catalog,
    entry_to_service,
    env_vars_from_registry,
    from_curated,
    from_curated_map,
    from_registry,
    from_registry_list,
    merge,
)
from mcpwire.models import EnvVar, Service
from mcpwire.registry import (
    KeyValueInput,
    Package,
    RemoteTransport,
    Repository,
    ServerJSON,
    ServerResponse,
    server_response_from_dict,
)


def registry_server(name: str, **kwargs) -> ServerResponse:
    return ServerResponse(server=ServerJSON(name=name, **kwargs))


def npm_package(identifier: str, version: str = "", **kwargs) -> Package:
    return Package(
        registry_type="npm",
        identifier=identifier,
        version=version,
        transport=RemoteTransport(type="stdio"),
        **kwargs,
    )


class TestEntryViews:
    """Tests for the uniform accessors on Entry."""

    def test_curated_accessors(self) -> None:
        """Test curated entries read from the service definition."""
        svc = Service(
            name="sentry",
            description="Errors",
            transport="http",
            url="https://mcp.sentry.dev/mcp",
            env=[EnvVar(name="TOKEN", required=True)],
        )
        entry = from_curated(svc)

        assert entry.source == SOURCE_CURATED
        assert entry.display_name() == "sentry"
        assert entry.description() == "Errors"
        assert entry.transport() == "http"
        assert entry.env_vars() == [EnvVar(name="TOKEN", required=True)]
        assert entry.install_type() == "remote"
        assert entry.package_types() is None
        assert entry.repository_url() == ""

    def test_registry_display_name_prefers_title(self) -> None:
        """Test the registry title wins over the name for display."""
        entry = from_registry(registry_server("io.github/acme", title="Acme"))
        assert entry.display_name() == "Acme"

        untitled = from_registry(registry_server("io.github/acme"))
        assert untitled.display_name() == "io.github/acme"

    def test_registry_install_types(self) -> None:
        """Test remote, package and combined install types."""
        remote = RemoteTransport(type="streamable-http", url="https://x.dev/mcp")
        pkg = npm_package("@acme/mcp")

        assert from_registry(registry_server("a", remotes=[remote])).install_type() == "remote"
        assert from_registry(registry_server("b", packages=[pkg])).install_type() == "package"
        assert from_registry(registry_server("c", remotes=[remote], packages=[pkg])).install_type() == "remote/package"
        assert from_registry(registry_server("d")).install_type() == ""

    def test_registry_transport_prefers_remote(self) -> None:
        """Test transport reads the first remote before packages."""
        entry = from_registry(registry_server(
            "a",
            remotes=[RemoteTransport(type="sse", url="https://x.dev/sse")],
            packages=[npm_package("@acme/mcp")],
        ))
        assert entry.transport() == "sse"

    def test_package_types_unique_in_order(self) -> None:
        """Test registry types are deduplicated keeping first-seen order."""
        pypi = Package(registry_type="pypi", identifier="acme", transport=RemoteTransport(type="stdio"))
        entry = from_registry(registry_server(
            "a", packages=[npm_package("x"), pypi, npm_package("y")],
        ))
        assert entry.package_types() == ["npm", "pypi"]

    def test_package_types_none_without_packages(self) -> None:
        """Test package_types is None, not empty, when there are no packages."""
        assert from_registry(registry_server("a")).package_types() is None

    def test_urls(self) -> None:
        """Test repository and website URLs come from the registry record."""
        entry = from_registry(registry_server(
            "a",
            website_url="https://acme.dev",
            repository=Repository(url="https://github.com/acme/mcp", source="github"),
        ))
        assert entry.website_url() == "https://acme.dev"
        assert entry.repository_url() == "https://github.com/acme/mcp"


class TestEnvVarsFromRegistry:
    """Tests for combining package variables and secret headers."""

    def test_packages_then_secret_headers(self) -> None:
        """Test ordering and that non-secret headers are ignored."""
        response = registry_server(
            "a",
            packages=[npm_package("x", environment_variables=[KeyValueInput(name="API_KEY", is_required=True)])],
            remotes=[RemoteTransport(
                type="streamable-http",
                url="https://x.dev",
                headers=[
                    KeyValueInput(name="X-Token", is_secret=True),
                    KeyValueInput(name="X-Plain", value="1"),
                ],
            )],
        )

        names = [v.name for v in env_vars_from_registry(response)]
        assert names == ["API_KEY", "X-Token"]

    def test_duplicates_merge_required_and_description(self) -> None:
        """Test duplicate names OR required and backfill empty descriptions."""
        response = registry_server(
            "a",
            packages=[npm_package("x", environment_variables=[KeyValueInput(name="TOKEN")])],
            remotes=[RemoteTransport(
                type="sse",
                url="https://x.dev",
                headers=[KeyValueInput(name="TOKEN", description="The token", is_secret=True, is_required=True)],
            )],
        )

        env = env_vars_from_registry(response)
        assert env == [EnvVar(name="TOKEN", description="The token", required=True)]

    def test_empty_names_skipped(self) -> None:
        """Test variables without a name are dropped."""
        response = registry_server(
            "a",
            packages=[npm_package("x", environment_variables=[KeyValueInput(name=""), KeyValueInput(name="OK")])],
        )
        assert [v.name for v in env_vars_from_registry(response)] == ["OK"]


class TestMerge:
    """Tests for merging curated and registry entries."""

    def test_curated_wins_case_insensitive(self) -> None:
        """Test a registry entry colliding with a curated name is dropped."""
        curated = from_curated_map({"Sentry": Service(name="Sentry")})
        registry = from_registry_list([registry_server("sentry"), registry_server("acme")])

        cat = merge(curated, registry)

        assert cat.count() == 2
        assert cat.find("SENTRY").source == SOURCE_CURATED
        assert cat.find("acme").source == SOURCE_REGISTRY

    def test_registry_duplicates_keep_first(self) -> None:
        """Test duplicate registry names keep the first occurrence."""
        first = registry_server("acme", description="first")
        second = registry_server("ACME", description="second")

        cat = merge([], from_registry_list([first, second]))

        assert cat.count() == 1
        assert cat.find("acme").description() == "first"

    def test_empty_inputs(self) -> None:
        """Test merging nothing yields an empty catalog."""
        assert merge([], []).count() == 0


class TestCatalog:
    """Tests for sorting, filtering and lookup."""

    def make_catalog(self) -> Catalog:
        curated = from_curated_map({
            "zeta": Service(name="zeta", description="Last one"),
            "Alpha": Service(name="Alpha", description="First one"),
        })
        registry = from_registry_list([registry_server("beta", description="Docs search", title="Beta Docs")])
        return merge(curated, registry)

    def test_all_sorted_case_insensitive(self) -> None:
        """Test all() sorts by lowercase name."""
        assert [e.name for e in self.make_catalog().all()] == ["Alpha", "beta", "zeta"]

    def test_all_returns_copy(self) -> None:
        """Test mutating the returned list leaves the catalog intact."""
        cat = self.make_catalog()
        entries = cat.all()
        entries.clear()
        assert cat.count() == 3
        assert len(cat.all()) == 3

    def test_by_source(self) -> None:
        """Test filtering by source keeps sort order."""
        cat = self.make_catalog()
        assert [e.name for e in cat.by_source(SOURCE_CURATED)] == ["Alpha", "zeta"]
        assert [e.name for e in cat.by_source(SOURCE_REGISTRY)] == ["beta"]

    def test_search_empty_returns_all(self) -> None:
        """Test an empty query matches everything."""
        cat = self.make_catalog()
        assert cat.search("") == cat.all()

    def test_search_matches_name_display_name_and_description(self) -> None:
        """Test substring search across the three text fields."""
        cat = self.make_catalog()
        assert [e.name for e in cat.search("ALP")] == ["Alpha"]
        assert [e.name for e in cat.search("beta docs")] == ["beta"]
        assert [e.name for e in cat.search("one")] == ["Alpha", "zeta"]
        assert cat.search("nothing-matches") == []

    def test_null_registry_fields_not_searchable(self) -> None:
        """Test a record with null title and description does not match "none"."""
        entry = from_registry(server_response_from_dict(
            {"server": {"name": "io.acme/nulls", "title": None, "description": None}}
        ))
        cat = Catalog([entry])

        assert entry.display_name() == "io.acme/nulls"
        assert cat.search("none") == []

    def test_find_missing(self) -> None:
        """Test find returns None for unknown names."""
        assert self.make_catalog().find("gamma") is None


class TestEntryToService:
    """Tests for converting entries into installable services."""

    def test_curated_returned_unchanged(self) -> None:
        """Test curated entries return their own definition."""
        svc = Service(name="x", transport="stdio", command="npx")
        assert entry_to_service(from_curated(svc)) is svc

    def test_remote_streamable_http_becomes_http(self) -> None:
        """Test streamable-http remotes install as http with header placeholders."""
        entry = from_registry(registry_server(
            "acme",
            description="Acme",
            remotes=[RemoteTransport(
                type="streamable-http",
                url="https://acme.dev/mcp",
                headers=[
                    KeyValueInput(name="Authorization", is_secret=True, is_required=True),
                    KeyValueInput(name="X-Region", default="eu"),
                ],
            )],
        ))

        svc = entry_to_service(entry)

        assert svc is not None
        assert svc.transport == "http"
        assert svc.url == "https://acme.dev/mcp"
        assert svc.headers == {"Authorization": "${Authorization}", "X-Region": "eu"}
        assert [v.name for v in svc.env] == ["Authorization"]

    def test_npm_package(self) -> None:
        """Test npm packages run through npx with a pinned version."""
        entry = from_registry(registry_server("acme", packages=[npm_package("@acme/mcp", "1.2.0")]))

        svc = entry_to_service(entry)

        assert svc is not None
        assert svc.transport == "stdio"
        assert svc.command == "npx"
        assert svc.args == ["-y", "@acme/mcp@1.2.0"]

    def test_pypi_and_oci_packages(self) -> None:
        """Test pypi uses uvx and oci uses docker run."""
        pypi = Package(registry_type="pypi", identifier="acme-mcp", version="0.3", transport=RemoteTransport(type="stdio"))
        oci = Package(registry_type="oci", identifier="ghcr.io/acme/mcp", transport=RemoteTransport(type="stdio"))

        pypi_svc = entry_to_service(from_registry(registry_server("p", packages=[pypi])))
        oci_svc = entry_to_service(from_registry(registry_server("o", packages=[oci])))

        assert (pypi_svc.command, pypi_svc.args) == ("uvx", ["acme-mcp==0.3"])
        assert (oci_svc.command, oci_svc.args) == ("docker", ["run", "-i", "--rm", "ghcr.io/acme/mcp"])

    def test_runtime_hint_overrides_command(self) -> None:
        """Test a package runtime hint replaces the default launcher."""
        entry = from_registry(registry_server("acme", packages=[npm_package("@acme/mcp", runtime_hint="bunx")]))
        assert entry_to_service(entry).command == "bunx"

    def test_unsupported_returns_none(self) -> None:
        """Test entries without a usable remote or package give None."""
        nuget = Package(registry_type="nuget", identifier="Acme.Mcp", transport=RemoteTransport(type="stdio"))
        entry = from_registry(registry_server("acme", packages=[nuget]))
        assert entry_to_service(entry) is None
        assert entry_to_service(from_registry(registry_server("empty"))) is None
