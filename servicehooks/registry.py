"""Service registry: the fixed set of services, keyed by hook name.

Built once at boot, then frozen. Lookups at request time need no locking
since nothing mutates the table after freeze().
"""

import logging
from typing import Any, Dict, Iterator, List, Protocol, runtime_checkable

LOG = logging.getLogger("servicehooks.registry")


@runtime_checkable
class ServiceDescriptor(Protocol):
    """What the dispatcher needs from a service.

    A service may also set ``diagnostic = True`` to mark itself as the
    self-test service; see is_diagnostic().
    """

    hook_name: str
    title: str

    def receive(self, event: str, data: Dict[str, Any], payload: Dict[str, Any]) -> Any: ...


def is_diagnostic(service: ServiceDescriptor) -> bool:
    """True for the self-test service. Plugins may leave the flag out."""
    return bool(getattr(service, "diagnostic", False))


class RegistryError(Exception):
    """Raised for invalid registry use (boot-time configuration errors)."""

    pass


class DuplicateServiceError(RegistryError):
    """Two services share a hook name."""

    pass


class RegistryFrozenError(RegistryError):
    """register() called after boot."""

    pass


class ServiceNotFoundError(RegistryError, KeyError):
    """No service is registered under the hook name."""

    pass


class ServiceRegistry:
    """Ordered table of services keyed by hook_name."""

    def __init__(self) -> None:
        self._services: Dict[str, ServiceDescriptor] = {}
        self._frozen = False

    def register(self, service: ServiceDescriptor) -> ServiceDescriptor:
        """Add a service. Only valid before freeze()."""
        if self._frozen:
            raise RegistryFrozenError(f"Cannot register {service.hook_name!r}: registry is frozen")
        name = service.hook_name
        if not name or "/" in name:
            raise RegistryError(f"Invalid hook name: {name!r}")
        if name in self._services:
            raise DuplicateServiceError(f"Hook name {name!r} is already registered")
        self._services[name] = service
        LOG.debug("Registered service %s (%s)", name, service.title)
        return service

    def freeze(self) -> "ServiceRegistry":
        """Disallow further registration."""
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def lookup(self, hook_name: str) -> ServiceDescriptor:
        try:
            return self._services[hook_name]
        except KeyError:
            raise ServiceNotFoundError(hook_name) from None

    def names(self) -> List[str]:
        return list(self._services)

    def __contains__(self, hook_name: object) -> bool:
        return hook_name in self._services

    def __iter__(self) -> Iterator[ServiceDescriptor]:
        return iter(self._services.values())

    def __len__(self) -> int:
        return len(self._services)


def build_registry(config: Any = None) -> ServiceRegistry:
    """Register the built-in services and freeze the registry."""
    from servicehooks.services import CommitMsgChecker, Mailer, Web

    mail_config = getattr(config, "mail", None)
    registry = ServiceRegistry()
    registry.register(Web())
    registry.register(CommitMsgChecker(mailer=Mailer(mail_config)))
    return registry.freeze()
