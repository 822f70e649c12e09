"""Field descriptions for generated parameter and value-object structs, and code YAML loading."""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

__all__ = [
    "KeyValueDoc",
    "ParamField",
    "VoField",
    "case_to_camel",
    "left_str_pad",
    "load_code_yaml",
    "param_fields",
    "type_assert",
    "vo_fields",
]


@dataclass
class ParamField:
    field_name: str
    field_type: str
    tag: str
    tag_name: str


@dataclass
class VoField:
    field_name: str
    field_type: str
    tag: str


@dataclass
class KeyValueDoc:
    key: str
    value: Any
    doc: str
    iota: str


def left_str_pad(input: str, pad_length: int, pad_string: str) -> str:
    """Prefix ``input`` with ``pad_string`` repeated ``pad_length`` times."""
    return pad_string * max(pad_length, 0) + input


def _float_text_has_dot(value: float) -> bool:
    """Whether the shortest default rendering of ``value`` contains a decimal point."""
    if not math.isfinite(value) or value == 0:
        return False
    magnitude = abs(value)
    if 1e-4 <= magnitude < 1e21:
        return not value.is_integer()
    mantissa = repr(magnitude).split("e")[0].replace(".", "").strip("0")
    return len(mantissa) > 1


def type_assert(value: Any) -> str:
    """The struct field type for a value decoded from JSON.

    JSON numbers count as floating point: those rendered without a decimal
    point become ``int64``, the others ``float64``.
    """
    if isinstance(value, bool):
        return "interface{}"
    if isinstance(value, (int, float)):
        return "float64" if _float_text_has_dot(float(value)) else "int64"
    if isinstance(value, str):
        return "string"
    return "interface{}"


def case_to_camel(name: str) -> str:
    """Turn ``snake_case`` into ``CamelCase``."""
    chars = []
    previous = " "
    for char in name.replace("_", " "):
        chars.append(char.upper() if not previous.isalnum() else char)
        previous = char
    return "".join(chars).replace(" ", "")


def _byte_len(text: str) -> int:
    return len(text.encode("utf-8"))


def _sorted_names(json_map: Mapping[str, Any]) -> tuple[list[str], int]:
    names = sorted(json_map)
    width = max((_byte_len(name) for name in names), default=0)
    return names, width


def param_fields(json_map: Mapping[str, Any], tag: str = "") -> list[ParamField]:
    """Aligned parameter fields for the keys of a JSON object, in key order."""
    names, width = _sorted_names(json_map)
    tag = tag or "json"
    fields = []
    for name in names:
        camel = case_to_camel(name)
        fields.append(
            ParamField(
                field_name=camel + left_str_pad(" ", width - _byte_len(camel), " "),
                field_type=type_assert(json_map[name]),
                tag=tag,
                tag_name=name,
            )
        )
    return fields


def vo_fields(
    json_map: Mapping[str, Any], gorm_tag: bool, json_tag: bool
) -> list[VoField]:
    """Aligned value-object fields with optional column and JSON tags."""
    names, width = _sorted_names(json_map)
    fields = []
    for name in names:
        camel = case_to_camel(name)
        tag = ""
        if gorm_tag:
            tag += f'gorm:"column:{name}"'
        if json_tag:
            json_part = f'json:"{name}"'
            if tag:
                tag += " " + left_str_pad(json_part, width - _byte_len(camel), " ")
            else:
                tag += json_part
        if tag:
            tag = f"`{tag}`"
        fields.append(
            VoField(
                field_name=camel + left_str_pad(" ", width - _byte_len(camel), " "),
                field_type=type_assert(json_map[name]),
                tag=tag,
            )
        )
    return fields


_TOP_LEVEL_KEY = re.compile(r"^[a-zA-Z]")


def _yes_no(value: Any) -> Any:
    if value is True:
        return "yes"
    if value is False:
        return "no"
    return value


def load_code_yaml(path: str | Path) -> list[KeyValueDoc]:
    """Read an error-code YAML file into key/value/doc entries in file order."""
    path = Path(path)
    stem = path.name[: -len(".yaml")] if path.name.endswith(".yaml") else path.name
    text = path.read_text(encoding="utf-8")
    keys = [
        line.rstrip("\r\n").rstrip(":")
        for line in text.splitlines()
        if _TOP_LEVEL_KEY.match(line)
    ]
    loaded = yaml.safe_load(text) or {}
    if not isinstance(loaded, dict):
        raise ValueError(f"{path} does not hold a mapping")
    document = {str(key): value for key, value in loaded.items()}

    entries = []
    for position, key in enumerate(keys):
        spec = document.get(key)
        if spec is None:
            spec = {}
        if not isinstance(spec, dict):
            raise TypeError(f"entry {key!r} in {path} is not a mapping")
        iota = _yes_no(spec.get("iota", "no"))
        code = spec.get("code", "")
        if iota == "yes" and code == "" and position == 0 and re.search(r"\d+", stem):
            code = stem
        if code == "":
            iota = "no"
        message = spec.get("message", key + "错误")
        if not isinstance(message, str) or not isinstance(iota, str):
            raise TypeError(f"entry {key!r} in {path} has a non-text message or iota")
        entries.append(
            KeyValueDoc(
                key=case_to_camel(key.strip().lower()),
                value=code,
                doc=message,
                iota=iota,
            )
        )
    return entries