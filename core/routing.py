"""
Route classification shared by the dispatcher stages.
"""
from enum import Enum
from starlette.types import Scope

API_PREFIX = '/api'
WELL_KNOWN_PREFIX = '/.well-known'
DOMAIN_ASSOCIATION_PATH = WELL_KNOWN_PREFIX + '/apple-developer-merchantid-domain-association'
DOMAIN_ASSOCIATION_TXT_PATH = DOMAIN_ASSOCIATION_PATH + '.txt'


class RouteMatch(str, Enum):
    VERIFICATION = 'verification'
    STATIC_ASSET = 'static-asset'
    API = 'api'
    SPA_FALLBACK = 'spa-fallback'
    UNMATCHED = 'unmatched'


def has_prefix(path: str, prefix: str) -> bool:
    """Segment-aware prefix test: '/api' and '/api/x' match, '/apiary' does not."""
    return path == prefix or path.startswith(prefix + '/')


def is_api_path(path: str) -> bool:
    return has_prefix(path, API_PREFIX)


def is_well_known_path(path: str) -> bool:
    return has_prefix(path, WELL_KNOWN_PREFIX)


def is_verification_path(path: str) -> bool:
    return path in (DOMAIN_ASSOCIATION_PATH, DOMAIN_ASSOCIATION_TXT_PATH)


def mark_route(scope: Scope, match: RouteMatch) -> None:
    """Record which stage claimed the request, for the access log."""
    scope.setdefault('state', {})['route_match'] = match


def claimed_route(scope: Scope) -> RouteMatch:
    match = scope.get('state', {}).get('route_match')
    if match is not None:
        return match
    return RouteMatch.API if is_api_path(scope['path']) else RouteMatch.UNMATCHED
