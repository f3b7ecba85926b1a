"""Identity labels attached to every exported series."""

from typing import Mapping


PROFILE_LABEL = "profile"
GROUP_LABEL = "group"
COMMAND_LABEL = "command"
PYTHON_VERSION_LABEL = "pythonversion"
VERSION_LABEL = "version"
JOB_LABEL = "job"

# Labels added per series by the publisher, plus the push gateway job;
# identity labels may not use them.
RESERVED_LABELS = frozenset({COMMAND_LABEL, PYTHON_VERSION_LABEL, VERSION_LABEL, JOB_LABEL})


def merge_labels(labels: dict[str, str], add: Mapping[str, str] | None) -> dict[str, str]:
    """Merge ``add`` into ``labels`` in place; later keys win."""
    for key, value in (add or {}).items():
        labels[key] = value
    return labels


def clone_labels(labels: Mapping[str, str]) -> dict[str, str]:
    return dict(labels)


def build_identity_labels(
    profile: str,
    group: str | None = None,
    extra: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Build the identity label set of a publisher.

    Order is profile, group (when non-empty), then the extra labels.
    An extra label with the same name overrides profile or group.
    """
    labels = {PROFILE_LABEL: profile}
    if group:
        labels[GROUP_LABEL] = group
    return merge_labels(labels, extra)


def reserved_collisions(labels: Mapping[str, str]) -> list[str]:
    """Return the identity label names that clash with reserved labels."""
    return sorted(key for key in labels if key in RESERVED_LABELS)
