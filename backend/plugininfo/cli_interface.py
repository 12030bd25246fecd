"""
Plugin Info CLI Interface
Command-line access to plugin metadata records and their releases
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from sqlalchemy.exc import SQLAlchemyError

from .config import Settings, get_settings
from .logging_config import configure_logging
from .models.plugin_models import PluginInfo, Release
from .services.plugin_info_service import PluginInfoService, get_plugin_info_service
from .services.plugins.exceptions import PluginError
from .services.plugins.identity import authenticated_user

logger = logging.getLogger(__name__)


def load_document(path: Path) -> Dict[str, Any]:
    """Read a YAML or JSON document describing a plugin or a release."""
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        data = json.loads(text)
    else:
        data = yaml.safe_load(text)
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a mapping, got {type(data).__name__}")
    return data


def _dump(value: Any) -> str:
    if isinstance(value, list):
        payload = [item.model_dump(mode="json", by_alias=True) for item in value]
    else:
        payload = value.model_dump(mode="json", by_alias=True)
    return json.dumps(payload, indent=2)


class PluginInfoCLI:
    """Thin command layer over PluginInfoService"""

    def __init__(self, service: PluginInfoService):
        self.service = service

    def list_plugins(self, service_tag: Optional[str] = None) -> int:
        if service_tag is not None:
            plugins = self.service.find_all_by_service(service_tag)
        else:
            plugins = self.service.find_all()
        print(_dump(plugins))
        return 0

    def show(self, plugin_id: str) -> int:
        print(_dump(self.service.find_by_id(plugin_id)))
        return 0

    def import_plugin(self, path: Path) -> int:
        plugin_info = PluginInfo.model_validate(load_document(path))
        print(_dump(self.service.upsert(plugin_info)))
        return 0

    def add_release(self, plugin_id: str, path: Path) -> int:
        release = Release.model_validate(load_document(path))
        print(_dump(self.service.create_release(plugin_id, release)))
        return 0

    def replace_release(self, plugin_id: str, path: Path) -> int:
        release = Release.model_validate(load_document(path))
        print(_dump(self.service.upsert_release(plugin_id, release)))
        return 0

    def delete(self, plugin_id: str) -> int:
        self.service.delete(plugin_id)
        print(json.dumps({"deleted": plugin_id}))
        return 0

    def delete_release(self, plugin_id: str, version: str) -> int:
        print(_dump(self.service.delete_release(plugin_id, version)))
        return 0

    def prefer(self, plugin_id: str, version: str, preferred: bool) -> int:
        print(_dump(self.service.prefer_release_version(plugin_id, version, preferred)))
        return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="plugininfo",
        description="Manage plugin metadata records and their releases",
    )
    parser.add_argument("--user", help="Acting user recorded on release changes")
    parser.add_argument("--database-url", help="Override PLUGININFO_DATABASE_URL")
    parser.add_argument("--binary-storage", help="Override PLUGININFO_BINARY_STORAGE_PATH")
    parser.add_argument("--log-level", help="Override PLUGININFO_LOG_LEVEL")

    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="List plugins")
    list_parser.add_argument("--service", help="Only plugins tagged with this service")

    show_parser = subparsers.add_parser("show", help="Show one plugin")
    show_parser.add_argument("plugin_id")

    import_parser = subparsers.add_parser("import", help="Create or merge a plugin from YAML/JSON")
    import_parser.add_argument("file", type=Path)

    add_parser = subparsers.add_parser("add-release", help="Add a release from YAML/JSON")
    add_parser.add_argument("plugin_id")
    add_parser.add_argument("file", type=Path)

    replace_parser = subparsers.add_parser("replace-release", help="Replace an existing release")
    replace_parser.add_argument("plugin_id")
    replace_parser.add_argument("file", type=Path)

    delete_parser = subparsers.add_parser("delete", help="Delete a plugin and its binaries")
    delete_parser.add_argument("plugin_id")

    delete_release_parser = subparsers.add_parser("delete-release", help="Delete one release")
    delete_release_parser.add_argument("plugin_id")
    delete_release_parser.add_argument("version")

    prefer_parser = subparsers.add_parser("prefer", help="Mark a release as preferred")
    prefer_parser.add_argument("plugin_id")
    prefer_parser.add_argument("version")
    prefer_parser.add_argument("--unset", action="store_true", help="Clear the preferred flag")

    return parser


def _settings_from_args(args: argparse.Namespace) -> Settings:
    overrides: Dict[str, Any] = {}
    if args.database_url:
        overrides["database_url"] = args.database_url
    if args.binary_storage:
        overrides["binary_storage_path"] = args.binary_storage
    if args.log_level:
        overrides["log_level"] = args.log_level.upper()
    settings = get_settings()
    if not overrides:
        return settings
    # Overrides must pass the same field validation as the environment
    return Settings(**{**settings.model_dump(), **overrides})


def run_command(cli: PluginInfoCLI, args: argparse.Namespace) -> int:
    if args.command == "list":
        return cli.list_plugins(args.service)
    if args.command == "show":
        return cli.show(args.plugin_id)
    if args.command == "import":
        return cli.import_plugin(args.file)
    if args.command == "add-release":
        return cli.add_release(args.plugin_id, args.file)
    if args.command == "replace-release":
        return cli.replace_release(args.plugin_id, args.file)
    if args.command == "delete":
        return cli.delete(args.plugin_id)
    if args.command == "delete-release":
        return cli.delete_release(args.plugin_id, args.version)
    if args.command == "prefer":
        return cli.prefer(args.plugin_id, args.version, not args.unset)
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None, service: Optional[PluginInfoService] = None) -> int:
    """Entry point; returns the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = _settings_from_args(args)
        configure_logging(settings.log_level, settings.log_format)
        cli = PluginInfoCLI(service or get_plugin_info_service(settings))
        with authenticated_user(args.user):
            return run_command(cli, args)
    except PluginError as e:
        print(json.dumps(e.to_dict(), indent=2, default=str), file=sys.stderr)
        return 1
    except (OSError, ValueError, yaml.YAMLError, SQLAlchemyError) as e:
        logger.error(f"Command failed: {e}")
        return 1
