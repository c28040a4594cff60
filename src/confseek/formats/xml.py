"""XML codec built on xml.etree.ElementTree.

The document's root element is unwrapped, so ``<config><db>..</db></config>``
decodes to ``{"db": ...}``. Repeated child tags decode to a list. Leaf text
is typed (true/false, null, numbers); attributes are ignored.
"""

import re
import xml.etree.ElementTree as ET
from typing import Any

from ..exceptions import ConfigEncodingError
from ..exceptions import LoaderError
from .base import Codec

ROOT_ELEMENT = "config"

_TAG_RE = re.compile(r"^[A-Za-z_][\w.-]*$")
_NUMBER_RE = re.compile(r"^-?(\d+|\d*\.\d+)([eE][-+]?\d+)?$")


class XmlCodec(Codec):
    name = "XML"
    extensions = ("xml",)

    def decode(self, text: str, source: str = "<string>") -> Any:
        try:
            root = ET.fromstring(text)
        except ET.ParseError as e:
            raise LoaderError(source, str(e), self.name) from e

        if len(root) == 0 and not (root.text or "").strip():
            return {}

        content = _element_value(root)
        if isinstance(content, dict):
            return content
        return {root.tag: content}

    def encode(self, data: Any) -> str:
        root = ET.Element(ROOT_ELEMENT)
        if isinstance(data, list):
            data = {"item": data}
        if not isinstance(data, dict):
            raise ConfigEncodingError(self.name, "top-level value must be a mapping or list")
        for key, value in data.items():
            _append(root, _tag(key), value)
        ET.indent(root, space="    ")
        return '<?xml version="1.0" encoding="UTF-8"?>\n' + ET.tostring(root, encoding="unicode") + "\n"


def _element_value(element: ET.Element) -> Any:
    children = list(element)
    if not children:
        return _typed(element.text)

    values: dict[str, Any] = {}
    for child in children:
        value = _element_value(child)
        if child.tag not in values:
            values[child.tag] = value
        elif isinstance(values[child.tag], list):
            values[child.tag].append(value)
        else:
            values[child.tag] = [values[child.tag], value]
    return values


def _typed(text: str | None) -> Any:
    if text is None:
        return None
    value = text.strip()
    lowered = value.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if lowered == "null":
        return None
    if _NUMBER_RE.match(value):
        try:
            return int(value)
        except ValueError:
            return float(value)
    return value


def _tag(key: Any) -> str:
    tag = str(key).replace(" ", "_")
    if not _TAG_RE.match(tag):
        raise ConfigEncodingError("XML", f'"{key}" is not a valid element name')
    return tag


def _append(parent: ET.Element, tag: str, value: Any) -> None:
    if isinstance(value, list):
        for item in value:
            _append(parent, tag, item)
        return

    element = ET.SubElement(parent, tag)
    if isinstance(value, dict):
        for key, item in value.items():
            _append(element, _tag(key), item)
    elif value is True:
        element.text = "true"
    elif value is False:
        element.text = "false"
    elif value is not None:
        element.text = str(value)
