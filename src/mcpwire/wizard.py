# Wires the concrete collaborators into the interactive wizard
# ABOUTME: Catalog loading, credential store, targets and reports are bound here
import logging
import webbrowser
from typing import TextIO

from mcpwire import __version__
from mcpwire.catalog import (
    SOURCE_REGISTRY,
    Catalog,
    Entry,
    entry_to_service,
    from_curated_map,
    from_registry,
    from_registry_list,
    merge,
)
from mcpwire.config import Config, load_config
from mcpwire.credentials import FileSource, default_resolver, remove_stored_credentials, unresolved_required
from mcpwire.models import EnvVar, Service
from mcpwire.registry import RegistryCache
from mcpwire.reports import write_services_list, write_status, write_targets_list
from mcpwire.services import load_services
from mcpwire.targets import (
    all_targets,
    installed_targets,
    install_target,
    oauth_manual_hint,
    service_uses_oauth,
    uninstall_target,
)
from mcpwire.tui import Callbacks, run_wizard
from mcpwire.tui.apply import ApplyCallbacks

logger = logging.getLogger(__name__)


def load_catalog(source: str, cache: RegistryCache | None = None) -> Catalog:
    """Build the catalog for a wizard source choice.

    Args:
        source: "curated", "registry" or "all"
        cache: Registry cache to read; a default one is created when omitted

    Raises:
        ValueError: If a user service definition file is unreadable
        OSError: If definition files cannot be read
    """
    curated = [] if source == SOURCE_REGISTRY else from_curated_map(load_services())
    if source == "curated":
        return Catalog(curated)

    cache = cache if cache else RegistryCache()
    cache.load()
    registry = from_registry_list(cache.all())
    logger.debug(f"Catalog for {source}: {len(curated)} curated, {len(registry)} registry")
    return merge(curated, registry)


class WizardContext:
    """Holds the shared collaborators for one wizard session."""

    def __init__(
        self,
        config: Config | None = None,
        cache: RegistryCache | None = None,
        file_source: FileSource | None = None,
    ) -> None:
        self.config = config if config else load_config()
        self.cache = cache if cache else RegistryCache()
        self.file_source = file_source if file_source else FileSource()

    @property
    def registry_enabled(self) -> bool:
        return self.config.is_feature_enabled("registry")

    def load_catalog(self, source: str) -> Catalog:
        return load_catalog(source, self.cache)

    def registry_sync_status(self) -> str:
        # non-empty only while the cache is still being read
        if self.cache.loaded:
            return ""
        return self.cache.status_line()

    def refresh_registry_entry(self, entry: Entry) -> Entry:
        self.cache.load()
        found = self.cache.find(entry.name)
        return from_registry(found) if found else entry

    def resolve_credentials(self, service: Service) -> tuple[dict[str, str], list[EnvVar]]:
        return unresolved_required(service, default_resolver(self.file_source))

    def store_credential(self, name: str, value: str) -> None:
        self.file_source.store(name, value)

    def remove_stored_credentials(self, names: list[str]) -> int:
        return remove_stored_credentials(names, self.file_source)

    def open_url(self, url: str) -> None:
        if not webbrowser.open(url):
            logger.warning(f"No browser available to open {url}")

    def render_status(self, out: TextIO) -> None:
        write_status(out, list(load_services()), installed_targets())

    def render_services_list(self, out: TextIO) -> None:
        write_services_list(out, load_services())

    def render_targets_list(self, out: TextIO) -> None:
        write_targets_list(out, all_targets())

    def callbacks(self) -> Callbacks:
        return Callbacks(
            load_catalog=self.load_catalog,
            registry_sync_status=self.registry_sync_status,
            refresh_registry_entry=self.refresh_registry_entry,
            catalog_entry_to_service=entry_to_service,
            resolve_credentials=self.resolve_credentials,
            store_credential=self.store_credential,
            open_url=self.open_url,
            all_targets=all_targets,
            render_status=self.render_status,
            render_services_list=self.render_services_list,
            render_targets_list=self.render_targets_list,
            registry_enabled=self.registry_enabled,
            apply=ApplyCallbacks(
                install_target=install_target,
                uninstall_target=uninstall_target,
                service_uses_oauth=service_uses_oauth,
                oauth_manual_hint=oauth_manual_hint,
                remove_stored_credentials=self.remove_stored_credentials,
            ),
        )


def run(context: WizardContext | None = None) -> None:
    """Start the wizard on the current terminal."""
    context = context if context else WizardContext()
    logger.info(f"Starting wizard (registry {'on' if context.registry_enabled else 'off'})")
    run_wizard(context.callbacks(), version=__version__)
