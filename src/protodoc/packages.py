from __future__ import annotations

import logging
from typing import Dict, Iterable, List

from protodoc.models import DEFAULT_NAMESPACE

logger = logging.getLogger(__name__)


def arrange_into_packages(names: Iterable[str], namespace: str = DEFAULT_NAMESPACE) -> Dict[str, List[str]]:
    """Group "<namespace>.<pkg>.<Rest>" names by <pkg>.

    Names with too few components or outside the namespace are skipped
    with a warning.
    """
    packages: Dict[str, List[str]] = {}
    for name in names:
        parts = name.split(".", 2)
        if len(parts) < 3:
            logger.warning("Skipping %s, not enough parts in package", name)
            continue
        if parts[0] != namespace:
            logger.warning("Skipping %s, not a %s package", name, namespace)
            continue
        packages.setdefault(parts[1], []).append(name)
    return packages
