# pdfgate/xfa_json.py
"""
Conversion of XFA XML packets into JSON form data.
"""

import json
import logging
import xml.etree.ElementTree as ET
from typing import Any, Dict, Optional, Union

from pdfgate.errors import XfaParseError

logging.basicConfig(level=logging.INFO)

XFA_DATA_NS = "http://www.xfa.org/schema/xfa-data/1.0/"

SYSTEM_ELEMENTS = ("schema", "datamodel", "dataDescription")
METADATA_PREFIXES = ("FS", "fs", "_", "TEMPLATE", "QUERY", "TRANSFORMATION", "template", "config", "xdp")
LOOKUP_PATTERNS = ("List", "Options", "Choices", "Lookup", "Reference", "Country", "Port", "State", "City", "Dropdown")
LOOKUP_MIN_ITEMS = 10


def _split_tag(tag: str):
    if tag.startswith("{"):
        namespace, _, name = tag[1:].partition("}")
        return namespace, name
    return "", tag


def local_name(tag: str) -> str:
    return _split_tag(tag)[1]


def merge_into_map(target: Dict[str, Any], key: str, value: Any) -> None:
    """Insert value under key; repeated keys collect into a list."""
    if key not in target:
        target[key] = value
    elif isinstance(target[key], list):
        target[key].append(value)
    else:
        target[key] = [target[key], value]


def find_data_section(root: ET.Element) -> Optional[ET.Element]:
    parents = {child: parent for parent in root.iter() for child in parent}
    for node in root.iter():
        namespace, name = _split_tag(node.tag)
        if name != "data":
            continue
        if namespace == XFA_DATA_NS:
            return node
        parent = parents.get(node)
        if parent is not None and local_name(parent.tag) == "datasets":
            return node
    # Last resort: any element called "data"
    for node in root.iter():
        if local_name(node.tag) == "data":
            return node
    return None


def element_to_json(node: ET.Element, data_only: bool = False) -> Optional[Any]:
    name = local_name(node.tag)
    if name in SYSTEM_ELEMENTS:
        return None

    result: Dict[str, Any] = {}
    attributes = {
        local_name(key): value
        for key, value in node.attrib.items()
        if not key.startswith("xmlns")
    }
    if attributes:
        result["_attributes"] = attributes

    text = (node.text or "").strip()
    if text:
        result["_value"] = text

    has_children = False
    for child in node:
        if not isinstance(child.tag, str):
            continue
        has_children = True
        child_value = element_to_json(child, data_only)
        if child_value is not None:
            merge_into_map(result, local_name(child.tag), child_value)

    if not has_children and list(result) == ["_value"]:
        return result["_value"]
    if not result:
        return None
    return result


def is_metadata_field(name: str) -> bool:
    return name.startswith(METADATA_PREFIXES)


def is_lookup_list(name: str, value: Any) -> bool:
    if not any(pattern in name for pattern in LOOKUP_PATTERNS):
        return False
    if isinstance(value, dict):
        return any(isinstance(v, list) and len(v) > LOOKUP_MIN_ITEMS for v in value.values())
    return False


def xfa_xml_to_json(xml: Union[str, bytes], data_only: bool = False) -> str:
    """
    Convert an XFA XML document into indented JSON of its form data.

    With data_only, metadata fields and large lookup lists (dropdown
    choices, country lists and the like) are left out.
    """
    try:
        root = ET.fromstring(xml)
    except ET.ParseError as e:
        logging.error(f"Failed to parse XFA XML: {e}")
        raise XfaParseError(f"XML parse error: {e}") from e

    data_node = find_data_section(root)
    if data_node is None:
        raise XfaParseError("Could not locate form data section in XFA XML")

    form_data: Dict[str, Any] = {}
    for child in data_node:
        if not isinstance(child.tag, str):
            continue
        name = local_name(child.tag)
        if data_only and is_metadata_field(name):
            continue
        value = element_to_json(child, data_only)
        if value is None:
            continue
        if data_only and is_lookup_list(name, value):
            continue
        if data_only and name == "Form" and isinstance(value, dict):
            value = {k: v for k, v in value.items() if not is_lookup_list(k, v)}
            if not value:
                continue
        merge_into_map(form_data, name, value)

    if not form_data:
        raise XfaParseError("No valid data found after extraction")
    return json.dumps(form_data, indent=2, ensure_ascii=False)
