# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/ocsconfig/errors.py


class OcsConfigError(RuntimeError):
    """Base class for ocsconfig failures."""


class AlreadyOwnedError(OcsConfigError):
    """Raised when another controller of the same kind already owns the ConfigMap."""


class ConfigLoadError(OcsConfigError):
    """Raised when a settings file or StorageCluster manifest cannot be loaded."""
