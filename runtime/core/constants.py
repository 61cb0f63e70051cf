"""Label keys the operator stamps on every Job it launches."""

from __future__ import annotations

# Managed-by marker; also the default selector for listing operator Jobs.
DEFAULT_SELECTOR_KEY = "git-operator.io/kind"
DEFAULT_SELECTOR_VALUE = "git-operator"

REPOSITORY_LABEL_KEY = "git-operator.io/repository"
COMMIT_SHA_LABEL_KEY = "git-operator.io/commit-sha"
