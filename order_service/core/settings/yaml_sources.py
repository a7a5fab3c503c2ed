"""YAML config sources with conf.d directory support.

Each settings domain can be backed by an optional YAML file plus a conf.d
directory of overrides:

- conf/rabbit.yaml        (base configuration)
- conf/rabbit.d/*.yaml    (override files, merged alphabetically)

Files are optional; when none exist the source contributes nothing and the
environment remains the effective source of configuration.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic_settings.sources.providers.yaml import YamlConfigSettingsSource

if TYPE_CHECKING:
    from pydantic_settings import BaseSettings


class ConfDYamlConfigSettingsSource(YamlConfigSettingsSource):
    """YAML settings source that merges a base file with a conf.d directory.

    The base directory defaults to ``conf`` and can be moved per domain with
    an environment variable (e.g. ``RABBIT_CONFIG_DIR=/etc/order-service``).
    """

    def __init__(
        self,
        settings_cls: type[BaseSettings],
        yaml_file: str,
        confd_dir: str | None,
        config_dir_env: str = "CONFIG_DIR",
        base_dir: str = "conf",
        yaml_file_encoding: str | None = "utf-8",
    ) -> None:
        config_base = Path(os.getenv(config_dir_env, base_dir))

        yaml_files: list[Path] = []
        main_file = config_base / yaml_file
        if main_file.exists():
            yaml_files.append(main_file)

        if confd_dir:
            confd_path = config_base / confd_dir
            if confd_path.is_dir():
                yaml_files.extend(sorted(confd_path.glob("*.yaml")))
                yaml_files.extend(sorted(confd_path.glob("*.yml")))

        self._yaml_files = yaml_files

        super().__init__(
            settings_cls=settings_cls,
            yaml_file=yaml_files if yaml_files else None,
            yaml_file_encoding=yaml_file_encoding,
        )

    def __repr__(self) -> str:
        files_str = ", ".join(str(f) for f in self._yaml_files)
        return f"{self.__class__.__name__}(yaml_files=[{files_str}])"


def _domain_source(
    settings_cls: type[BaseSettings], domain: str
) -> ConfDYamlConfigSettingsSource:
    return ConfDYamlConfigSettingsSource(
        settings_cls,
        yaml_file=f"{domain}.yaml",
        confd_dir=f"{domain}.d",
        config_dir_env=f"{domain.upper()}_CONFIG_DIR",
    )


def create_app_yaml_source(settings_cls: type[BaseSettings]) -> ConfDYamlConfigSettingsSource:
    """Create YAML source for AppSettings (conf/app.yaml, conf/app.d/)."""
    return _domain_source(settings_cls, "app")


def create_db_yaml_source(settings_cls: type[BaseSettings]) -> ConfDYamlConfigSettingsSource:
    """Create YAML source for PostgresSettings (conf/db.yaml, conf/db.d/)."""
    return _domain_source(settings_cls, "db")


def create_rabbit_yaml_source(settings_cls: type[BaseSettings]) -> ConfDYamlConfigSettingsSource:
    """Create YAML source for RabbitSettings (conf/rabbit.yaml, conf/rabbit.d/)."""
    return _domain_source(settings_cls, "rabbit")


def create_logging_yaml_source(settings_cls: type[BaseSettings]) -> ConfDYamlConfigSettingsSource:
    """Create YAML source for LoggingSettings (conf/logging.yaml, conf/logging.d/)."""
    return _domain_source(settings_cls, "logging")


def create_workflow_yaml_source(settings_cls: type[BaseSettings]) -> ConfDYamlConfigSettingsSource:
    """Create YAML source for WorkflowSettings (conf/workflow.yaml, conf/workflow.d/)."""
    return _domain_source(settings_cls, "workflow")


def create_gateway_yaml_source(settings_cls: type[BaseSettings]) -> ConfDYamlConfigSettingsSource:
    """Create YAML source for PaymentGatewaySettings (conf/gateway.yaml, conf/gateway.d/)."""
    return _domain_source(settings_cls, "gateway")


__all__ = [
    "ConfDYamlConfigSettingsSource",
    "create_app_yaml_source",
    "create_db_yaml_source",
    "create_gateway_yaml_source",
    "create_logging_yaml_source",
    "create_rabbit_yaml_source",
    "create_workflow_yaml_source",
]
