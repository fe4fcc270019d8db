"""Role-based decision on whether a caller may see an unmasked value.

The decision is fail-closed: an empty allow-list, a missing principal or an
unauthenticated principal all mean "masked". The principal is passed in
explicitly on every call and no result is cached, since the caller varies from
one serialization to the next.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Optional, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    """
    Resolved identity of the current caller.

    Attributes:
        name: Optional identifier, used only for diagnostics
        roles: Granted role identifiers, matched by exact string comparison
        authenticated: False for an explicitly unauthenticated (anonymous) caller
    """

    name: Optional[str] = None
    roles: frozenset[str] = field(default_factory=frozenset)
    authenticated: bool = True

    def __post_init__(self) -> None:
        roles = self.roles
        if roles is None:
            roles = frozenset()
        elif isinstance(roles, str):
            roles = frozenset({roles})
        else:
            roles = frozenset(roles)
        object.__setattr__(self, "roles", roles)

    @classmethod
    def anonymous(cls) -> "Principal":
        """An unauthenticated caller without roles."""
        return cls(name=None, roles=frozenset(), authenticated=False)

    def has_role(self, role: str) -> bool:
        return role in self.roles


@runtime_checkable
class PrincipalProvider(Protocol):
    """Host-supplied lookup of the current caller's roles.

    Returns ``None`` when no authenticated caller is present.
    """

    def current_principal_roles(self) -> Optional[set[str]]: ...


def principal_from_provider(provider: Optional[PrincipalProvider]) -> Optional[Principal]:
    """Resolve a ``Principal`` from a host provider, or ``None`` without one."""
    if provider is None:
        return None
    roles = provider.current_principal_roles()
    if roles is None:
        return None
    return Principal(roles=frozenset(roles))


class AuthorizationOracle:
    """Decides whether a principal may bypass masking for a field.

    An oracle can carry a fallback ``PrincipalProvider``; it is consulted only
    when a check is made without an explicit principal.
    """

    def __init__(self, provider: Optional[PrincipalProvider] = None):
        self.provider = provider

    def is_authorized(
        self,
        allowed_roles: Optional[Iterable[str]],
        principal: Optional[Principal] = None,
    ) -> bool:
        """Return True iff ``principal`` holds at least one of ``allowed_roles``.

        An empty or missing allow-list always denies, even for a principal
        holding every role.
        """
        if not allowed_roles:
            return False

        if principal is None:
            principal = principal_from_provider(self.provider)

        if principal is None or not principal.authenticated:
            return False

        allowed = {allowed_roles} if isinstance(allowed_roles, str) else set(allowed_roles)
        granted = any(principal.has_role(role) for role in allowed)
        if not granted:
            logger.debug(
                "Principal %s lacks roles %s; value stays masked",
                principal.name or "<unnamed>",
                sorted(allowed),
            )
        return granted


def is_authorized(
    allowed_roles: Optional[Iterable[str]], principal: Optional[Principal]
) -> bool:
    """Check ``allowed_roles`` against an explicit principal."""
    return _DEFAULT_ORACLE.is_authorized(allowed_roles, principal)


_DEFAULT_ORACLE = AuthorizationOracle()
