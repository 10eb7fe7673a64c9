"""Contains utility functions for working with YAML files."""

from pathlib import Path
from typing import Any

from ruamel.yaml import YAML


def create_yaml_dumper() -> YAML:
    """Creates a YAML object for dumping reports with multiline string support."""
    yaml_dumper = YAML()
    yaml_dumper.default_flow_style = False
    yaml_dumper.explicit_start = True
    yaml_dumper.indent(mapping=2, sequence=4, offset=2)  # type: ignore[attr-defined]
    yaml_dumper.width = 4096

    def represent_str(dumper: Any, data: str) -> Any:
        """Use literal block style for multiline strings such as error messages."""
        if "\n" in data:
            return dumper.represent_scalar("tag:yaml.org,2002:str", data, style="|")
        return dumper.represent_scalar("tag:yaml.org,2002:str", data)

    yaml_dumper.representer.add_representer(str, represent_str)  # type: ignore[attr-defined]
    return yaml_dumper


def load_yaml_file(path: Path) -> Any:
    """Loads a YAML file."""
    with open(path, encoding="utf-8") as f:
        return YAML(typ="safe").load(f)


def dump_yaml_to_file(data: Any, file_path: Path) -> None:
    """Dumps data to a YAML file, creating parent directories as needed."""
    file_path.parent.mkdir(parents=True, exist_ok=True)
    with open(file_path, "w", encoding="utf-8") as f:
        create_yaml_dumper().dump(data, f)  # type: ignore[misc]
