"""
Candidate path lists and first-match resolution for files served by the edge layer.

Every logical resource maps to an ordered tuple of path templates. The
templates are expanded against the deployment config on each call, so a
change of working directory between requests is picked up, and resolution
simply walks the expanded list until a file exists.
"""
from enum import Enum
from pathlib import Path
from typing import Optional, Sequence, Tuple
from core.config import DeployConfig
from common.logger import setup_logger

logger = setup_logger('core.resources')

DOMAIN_ASSOCIATION_NAME = 'apple-developer-merchantid-domain-association'


class ResourceIdentity(str, Enum):
    VERIFICATION_FILE = 'verification-file'
    VERIFICATION_FILE_TXT = 'verification-file-with-extension'
    SPA_ENTRY = 'spa-entry'


def _well_known_templates(name: str) -> Tuple[str, ...]:
    # Deployment-root location first, then the two working-directory layouts
    return (
        '{public}/.well-known/' + name,
        '{cwd}/public/.well-known/' + name,
        '{cwd}/.well-known/' + name,
    )


CANDIDATE_TEMPLATES = {
    ResourceIdentity.VERIFICATION_FILE: _well_known_templates(DOMAIN_ASSOCIATION_NAME),
    ResourceIdentity.VERIFICATION_FILE_TXT: _well_known_templates(DOMAIN_ASSOCIATION_NAME + '.txt'),
    ResourceIdentity.SPA_ENTRY: (
        '{dist}/index.html',
        '{dist}/src/index.html',  # bundlers that keep the entry's source folder
    ),
}


def candidate_paths(identity: ResourceIdentity, config: DeployConfig) -> Tuple[Path, ...]:
    """Expand the templates of one resource into absolute paths, in precedence order."""
    bases = {
        'public': str(config.public_dir),
        'dist': str(config.dist_dir),
        'cwd': str(config.working_dir()),
    }
    return tuple(Path(template.format(**bases)) for template in CANDIDATE_TEMPLATES[identity])


def combined_candidates(*identities: ResourceIdentity, config: DeployConfig) -> Tuple[Path, ...]:
    """Concatenate the candidate lists of several resources, keeping their order."""
    paths = []
    for identity in identities:
        paths.extend(candidate_paths(identity, config))
    return tuple(paths)


def resolve(candidates: Sequence[Path]) -> Optional[Path]:
    """Return the first candidate that exists as a regular file, or None.

    Only existence is checked; nothing is opened or read.
    """
    for path in candidates:
        try:
            if path.is_file():
                return path
        except OSError:
            # Unreadable parent or over-long name: treat as absent
            continue
    return None


def log_resolution(request_path: str, candidates: Sequence[Path], resolved: Optional[Path]) -> None:
    """Diagnostic trace of one resolution decision."""
    logger.info("Request for: %s", request_path)
    logger.info("Trying paths: %s", [str(p) for p in candidates])
    if resolved is not None:
        logger.info("File found: %s", resolved)
    else:
        logger.warning("File not found in any of these paths: %s", [str(p) for p in candidates])
