"""
Body serializers used by structured and raw responses.

Values are first normalized with FastAPI's ``jsonable_encoder`` so that
pydantic models, dataclasses, dates and UUIDs behave the same in every
format.
"""

import json
from typing import Any
from xml.etree import ElementTree

import tomli_w
import yaml
from fastapi.encoders import jsonable_encoder

MIME_JSON = "application/json"
MIME_XML = "application/xml; charset=utf-8"
MIME_YAML = "application/x-yaml; charset=utf-8"
MIME_TOML = "application/toml; charset=utf-8"
MIME_PLAIN = "text/plain; charset=utf-8"

XML_ROOT_TAG = "xml"
XML_ITEM_TAG = "item"


def json_bytes(value: Any) -> bytes:
    return json.dumps(
        jsonable_encoder(value), ensure_ascii=False, separators=(",", ":")
    ).encode("utf-8")


def yaml_bytes(value: Any) -> bytes:
    return yaml.safe_dump(
        jsonable_encoder(value), allow_unicode=True, sort_keys=False
    ).encode("utf-8")


def toml_bytes(value: Any) -> bytes:
    """Serialize a mapping as a TOML document.

    TOML has no null and no top-level arrays, so ``None`` values are
    dropped and non-mapping values raise ``TypeError``.
    """
    encoded = jsonable_encoder(value, exclude_none=True)
    if not isinstance(encoded, dict):
        raise TypeError(f"TOML document must be a mapping, got {type(value).__name__}")
    return tomli_w.dumps(encoded).encode("utf-8")


def _append_xml(parent: ElementTree.Element, value: Any) -> None:
    if isinstance(value, dict):
        for key, item in value.items():
            _append_xml(ElementTree.SubElement(parent, str(key)), item)
    elif isinstance(value, list):
        for item in value:
            _append_xml(ElementTree.SubElement(parent, XML_ITEM_TAG), item)
    elif isinstance(value, bool):
        parent.text = "true" if value else "false"
    elif value is not None:
        parent.text = str(value)


def xml_bytes(value: Any, root_tag: str = XML_ROOT_TAG) -> bytes:
    """Serialize nested mappings and lists into an XML document.

    Mapping keys become element names, list entries become ``<item>``
    elements and ``None`` becomes an empty element.
    """
    root = ElementTree.Element(root_tag)
    _append_xml(root, jsonable_encoder(value))
    return ElementTree.tostring(root, encoding="utf-8", xml_declaration=True)
